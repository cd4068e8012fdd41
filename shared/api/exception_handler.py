"""
DRF exception handler

Turns domain errors into HTTP responses with a stable shape:
``{"detail": ..., "code": ..., "field": ...}``.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import (
    AccessDenied,
    DependencyUnavailable,
    DomainError,
    InvalidTransition,
    NotFound,
    ResourceConflict,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (InvalidTransition, status.HTTP_400_BAD_REQUEST),
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (ResourceConflict, status.HTTP_409_CONFLICT),
    (DependencyUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: DomainError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context) -> Optional[Response]:
    if isinstance(exc, DomainError):
        return Response(exc.to_dict(), status=status_for(exc))

    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            {'detail': 'Validation error', 'code': 'validation_failed', 'errors': errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    view = context.get('view')
    logger.exception(
        f"Unhandled exception in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
        extra={'kwargs': context.get('kwargs'), 'exception_type': type(exc).__name__},
    )
    return Response(
        {'detail': 'An unexpected error occurred. Please try again later.', 'code': 'internal_error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
