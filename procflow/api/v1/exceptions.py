"""Custom exceptions for API layer."""

from typing import Any, Dict, List, Optional


class APIError(Exception):
    """Base class for API errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(APIError):
    """Resource not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code=f"{resource_type.upper()}_NOT_FOUND",
            message=f"{resource_type.title()} '{resource_id}' does not exist",
            status_code=404,
            details=details,
        )


class ValidationError(APIError):
    """Submitted data failed validation."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code="VALIDATION_ERROR",
            message=message,
            status_code=422,
            details=details,
        )


class ForbiddenError(APIError):
    """Actor may not perform the operation."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code="PERMISSION_DENIED",
            message=message,
            status_code=403,
            details=details,
        )


class ConflictError(APIError):
    """Operation conflicts with current state."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code="CONFLICT",
            message=message,
            status_code=409,
            details=details,
        )


class IllegalTransitionError(APIError):
    """Requested target is not reachable from the current node."""

    def __init__(
        self,
        message: str,
        legal_targets: Optional[List[str]] = None,
    ):
        super().__init__(
            error_code="ILLEGAL_TRANSITION",
            message=message,
            status_code=409,
            details={"legal_targets": legal_targets or []},
        )


class StructuralGraphError(APIError):
    """Template workflow is broken."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code="STRUCTURAL_GRAPH_ERROR",
            message=message,
            status_code=422,
            details=details,
        )


class UploadFailedError(APIError):
    """Upload collaborator failed."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code="UPLOAD_FAILED",
            message=message,
            status_code=502,
            details=details,
        )
