"""DRF exception handler producing a single error envelope.

Every error response has the shape::

    {"type": "client_error", "errors": [{"code": ..., "detail": ..., "attr": ...}]}

Domain errors are mapped by *kind* (see ``shared.domain.errors``);
DRF and Pydantic validation errors are flattened into the same list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import PermissionDenied
from django.http import Http404
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.errors import (
    AccessDenied,
    CannotModify,
    Conflict,
    DomainError,
    Expired,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)

logger = structlog.get_logger(__name__)

STATUS_BY_KIND: List[tuple[type[DomainError], int]] = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (Conflict, status.HTTP_409_CONFLICT),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (CannotModify, status.HTTP_409_CONFLICT),
    (Expired, status.HTTP_409_CONFLICT),
]


def status_for(exc: DomainError) -> int:
    for kind, status_code in STATUS_BY_KIND:
        if isinstance(exc, kind):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    if isinstance(exc, DomainError):
        return _domain_error_response(exc)

    if isinstance(exc, PydanticValidationError):
        errors = [
            {
                "code": error["type"],
                "detail": error["msg"],
                "attr": ".".join(str(part) for part in error["loc"]) or None,
            }
            for error in exc.errors()
        ]
        return Response(
            {"type": "validation_error", "errors": errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.APIException):
        errors = _flatten(exc.get_full_details())
    else:  # pragma: no cover
        errors = [{"code": "error", "detail": str(response.data), "attr": None}]

    error_type = (
        "validation_error"
        if isinstance(exc, exceptions.ValidationError)
        else "client_error"
        if response.status_code < 500
        else "server_error"
    )
    response.data = {"type": error_type, "errors": errors}
    return response


def _domain_error_response(exc: DomainError) -> Response:
    status_code = status_for(exc)
    messages = exc.errors if isinstance(exc, ValidationFailed) and exc.errors else [exc.message]
    logger.warning(
        "api.domain_error",
        error_class=exc.__class__.__name__,
        code=exc.code,
        status_code=status_code,
    )
    error_type = "validation_error" if isinstance(exc, ValidationFailed) else "client_error"
    return Response(
        {
            "type": error_type,
            "errors": [{"code": exc.code, "detail": message, "attr": None} for message in messages],
        },
        status=status_code,
    )


def _flatten(details: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    """Flatten DRF's nested ``get_full_details()`` output."""
    if isinstance(details, list):
        flat: List[Dict[str, Any]] = []
        for index, item in enumerate(details):
            child_attr = attr if isinstance(item, dict) and "message" in item else _join(attr, str(index))
            flat.extend(_flatten(item, child_attr))
        return flat
    if isinstance(details, dict):
        if "message" in details and "code" in details:
            return [{"code": details["code"], "detail": str(details["message"]), "attr": attr}]
        flat = []
        for key, value in details.items():
            child_attr = attr if key in ("detail", "non_field_errors") else _join(attr, key)
            flat.extend(_flatten(value, child_attr))
        return flat
    return [{"code": "error", "detail": str(details), "attr": attr}]


def _join(prefix: Optional[str], key: str) -> str:
    return f"{prefix}.{key}" if prefix else key
