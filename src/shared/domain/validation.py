"""Explicit validation results.

Validation functions collect every problem they find into a
``ValidationResult`` instead of raising on the first one; the service
decides when to turn a failed result into ``ValidationFailed``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from shared.domain.errors import ValidationFailed


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, message: str) -> None:
        self.errors.append(message)

    def raise_if_failed(
        self, error_class: type[ValidationFailed] = ValidationFailed, code: Optional[str] = None
    ) -> None:
        if self.errors:
            raise error_class("; ".join(self.errors), errors=self.errors, code=code)
