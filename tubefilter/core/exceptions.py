"""
Error taxonomy.
Each error class fixes its HTTP status and a stable machine-readable code;
main.py renders any AppException into the `{"error": {...}}` envelope.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Root of the taxonomy. Unclassified failures surface as 500."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Error envelope returned to clients."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppException):
    """Request rejected before any side effect."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class AuthError(AppException):
    """No resolvable identity on an endpoint that needs one."""

    status_code = 401
    error_code = "NOT_AUTHENTICATED"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class NotFoundError(AppException):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            f"{resource} not found: {identifier}",
            details={"resource": resource, "identifier": identifier},
        )


class UpstreamError(AppException):
    """
    The catalog was unreachable, timed out, answered with a non-success
    status or sent an unreadable body.
    """

    status_code = 500
    error_code = "UPSTREAM_ERROR"

    def __init__(
        self,
        reason: str,
        upstream_status: Optional[int] = None,
        resource: Optional[str] = None,
    ) -> None:
        status = f"{upstream_status} " if upstream_status is not None else ""
        super().__init__(
            f"Catalog API error: {status}{reason}",
            details={"upstream_status": upstream_status, "resource": resource},
        )
        self.upstream_status = upstream_status
