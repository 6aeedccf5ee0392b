"""Standardized error response conventions for registry invocations.

Every failed registry call returns the same error shape so callers can
switch on a machine-readable code instead of parsing messages. Errors are
terminal for the call: nothing is committed and nothing is retried.

Usage:
    from milestones.registry.errors import validation_error, resource_error, ErrorCode

    return validation_error(
        "description must be 1-100 characters",
        code=ErrorCode.INVALID_ARGUMENT,
        max_length=100,
    )

    return resource_error(
        f"No milestone for {owner}",
        code=ErrorCode.NOT_FOUND,
    )
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - RESOURCE: Record missing or already present
    """

    VALIDATION = "validation"  # Invalid input, bad arguments
    RESOURCE = "resource"  # Not found, already exists


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Validation errors
    MISSING_ARGUMENT = "missing_argument"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_TYPE = "invalid_type"
    UNKNOWN_METHOD = "unknown_method"
    MISSING_PRINCIPAL = "missing_principal"

    # Resource errors
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"


# Transport status for each code (InvalidInput=400, NotFound=404, Conflict=409).
# A missing caller principal is rejected by the host before any method runs.
HTTP_STATUS: dict[str, int] = {
    ErrorCode.MISSING_ARGUMENT.value: 400,
    ErrorCode.INVALID_ARGUMENT.value: 400,
    ErrorCode.INVALID_TYPE.value: 400,
    ErrorCode.UNKNOWN_METHOD.value: 400,
    ErrorCode.MISSING_PRINCIPAL.value: 401,
    ErrorCode.NOT_FOUND.value: 404,
    ErrorCode.ALREADY_EXISTS.value: 409,
}


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: Human-readable message
    - code: Machine-readable error code
    - category: Error category (validation, resource)
    - retriable: Always False for registry errors
    - details: Optional additional context
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


def validation_error(
    message: str,
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT,
    **details: object,
) -> dict[str, object]:
    """Create a validation error response (InvalidInput).

    Args:
        message: Human-readable error message
        code: Specific error code (default: INVALID_ARGUMENT)
        **details: Additional context (e.g., max_length=100)

    Returns:
        Error response dict with success=False
    """
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.VALIDATION.value,
        retriable=False,
        details=dict(details) if details else None,
    ).to_dict()


def resource_error(
    message: str,
    code: ErrorCode = ErrorCode.NOT_FOUND,
    **details: object,
) -> dict[str, object]:
    """Create a resource error response (NotFound or Conflict).

    Args:
        message: Human-readable error message
        code: NOT_FOUND or ALREADY_EXISTS (default: NOT_FOUND)
        **details: Additional context

    Returns:
        Error response dict with success=False
    """
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.RESOURCE.value,
        retriable=False,
        details=dict(details) if details else None,
    ).to_dict()


def http_status_for(result: dict[str, object]) -> int:
    """Map a registry result to its transport status code.

    Successful results map to 200. Unknown error codes map to 500 so a
    missing mapping is loud rather than silently reported as a client error.
    """
    if result.get("success", True):
        return 200
    return HTTP_STATUS.get(str(result.get("code", "")), 500)
