"""Error handlers for consistent API error responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from procflow.api.v1 import exceptions as api_errors
from procflow.domain import errors as domain_errors

logger = logging.getLogger(__name__)


def to_api_error(exc: domain_errors.ProcessEngineError) -> api_errors.APIError:
    """Map a domain error onto its API error."""
    if isinstance(exc, domain_errors.NotFoundError):
        return api_errors.NotFoundError(exc.resource_type, exc.resource_id)
    if isinstance(exc, domain_errors.PermissionDeniedError):
        return api_errors.ForbiddenError(str(exc), details={
            "node_id": exc.node_id,
            "required_role": exc.required_role,
            "actor_role": exc.actor_role,
        })
    if isinstance(exc, domain_errors.IllegalTransitionError):
        return api_errors.IllegalTransitionError(str(exc), exc.legal_targets)
    if isinstance(exc, domain_errors.StructuralGraphError):
        details = {k: v for k, v in (("node_id", exc.node_id), ("template_id", exc.template_id)) if v}
        return api_errors.StructuralGraphError(str(exc), details=details)
    if isinstance(exc, domain_errors.FormValidationError):
        return api_errors.ValidationError("Form validation failed", details={"errors": exc.errors})
    if isinstance(exc, domain_errors.ConcurrentModificationError):
        return api_errors.ConflictError(str(exc), details={
            "expected_version": exc.expected_version,
            "actual_version": exc.actual_version,
        })
    if isinstance(exc, domain_errors.UploadFailure):
        return api_errors.UploadFailedError(str(exc))
    return api_errors.APIError("INTERNAL_ERROR", str(exc), status_code=500)


async def api_error_handler(request: Request, exc: api_errors.APIError) -> JSONResponse:
    """Handle custom API errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.to_dict(),
        },
    )


async def domain_error_handler(request: Request, exc: domain_errors.ProcessEngineError) -> JSONResponse:
    """Handle process engine errors raised from services."""
    return await api_error_handler(request, to_api_error(exc))


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle FastAPI validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": {
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": errors},
            },
        },
    )


async def pydantic_error_handler(
    request: Request,
    exc: PydanticValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": {
                "error_code": "VALIDATION_ERROR",
                "message": "Data validation failed",
                "details": {"errors": errors},
            },
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the app."""
    app.add_exception_handler(api_errors.APIError, api_error_handler)
    app.add_exception_handler(domain_errors.ProcessEngineError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_error_handler)
