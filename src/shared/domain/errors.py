"""Domain error taxonomy shared by every bounded context.

Each module raises subclasses of these kinds; the API layer maps the
*kind* (not the concrete class) onto an HTTP status.  All errors are
local and synchronous: the core never retries them.
"""

from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base class for business-rule violations."""

    code: str = "domain_error"

    def __init__(self, message: str = "", *, code: Optional[str] = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class NotFound(DomainError):
    """A referenced entity does not exist."""

    code = "not_found"


class ValidationFailed(DomainError):
    """A structural invariant was violated."""

    code = "validation_failed"

    def __init__(self, message: str = "", *, errors: Optional[list[str]] = None, code: Optional[str] = None) -> None:
        self.errors: list[str] = list(errors or ([message] if message else []))
        super().__init__(message or "; ".join(self.errors), code=code)


class Conflict(DomainError):
    """The request collides with existing state."""

    code = "conflict"


class InvalidTransition(DomainError):
    """An illegal status change was requested."""

    code = "invalid_transition"


class CannotModify(DomainError):
    """An edit was attempted outside the allowed window or state."""

    code = "cannot_modify"


class AccessDenied(DomainError):
    """The actor does not own the resource."""

    code = "access_denied"


class Expired(DomainError):
    """The resource is past its validity period."""

    code = "expired"
