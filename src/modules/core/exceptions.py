"""Domain error base classes and the API error renderer.

Every module raises subclasses of ``DomainError``; the service layer never
builds HTTP responses.  ``standard_exception_handler`` (wired through
``REST_FRAMEWORK["EXCEPTION_HANDLER"]``) renders domain errors, DRF errors
and pydantic validation errors in one shape::

    {"type": "client_error", "errors": [{"code": ..., "detail": ..., "attr": ...}]}
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for business-rule violations raised by services."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "domain_error"
    default_detail: str = "The request could not be processed."

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class RequestValidationError(DomainError):
    """Malformed input (missing size, non-positive quantity, ...)."""

    default_code = "validation_error"
    default_detail = "Invalid input."


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_detail = "Not found."


class Unauthorized(DomainError):
    """The caller's role does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "unauthorized"
    default_detail = "You do not have permission to perform this action."


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_detail = "The resource changed while the request was processed."


# ---------------------------------------------------------------------------
# DRF exception handler
# ---------------------------------------------------------------------------


def _error_type(status_code: int) -> str:
    if status_code >= 500:
        return "server_error"
    return "client_error"


def _flatten_drf_detail(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            nested = key if attr is None else f"{attr}.{key}"
            if key == "non_field_errors":
                nested = attr
            errors.extend(_flatten_drf_detail(value, nested))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            nested = attr
            if isinstance(value, (dict, list)) and attr is not None:
                nested = f"{attr}.{index}"
            errors.extend(_flatten_drf_detail(value, nested))
        return errors
    return [
        {
            "code": getattr(detail, "code", "error"),
            "detail": str(detail),
            "attr": attr,
        }
    ]


def standard_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """Render all API errors as ``{"type", "errors": [...]}``."""
    if isinstance(exc, DomainError):
        logger.info(
            "api.domain_error",
            code=exc.default_code,
            detail=exc.detail,
            status_code=exc.status_code,
        )
        return Response(
            {
                "type": _error_type(exc.status_code),
                "errors": [
                    {"code": exc.default_code, "detail": exc.detail, "attr": None}
                ],
            },
            status=exc.status_code,
        )

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

    response = exception_handler(exc, context)
    if response is None:
        return None

    error_type = (
        "validation_error"
        if isinstance(exc, exceptions.ValidationError)
        else _error_type(response.status_code)
    )
    detail = exc.detail if isinstance(exc, exceptions.APIException) else response.data
    response.data = {
        "type": error_type,
        "errors": _flatten_drf_detail(detail),
    }
    return response
