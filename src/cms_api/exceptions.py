"""Domain-specific exceptions for the content management API.

These exceptions provide a clean separation between service-layer errors
and HTTP responses. Each one carries the HTTP status and the envelope code
it is rendered with, so routers never translate errors by hand.
"""

from typing import Any


class CmsAPIError(Exception):
    """Base exception for all content management API errors."""

    status_code: int = 500
    code: str = "ERROR"

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(CmsAPIError):
    """Base class for resource not found errors."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any | None = None) -> None:
        message = f"{entity} not found"
        details: dict[str, Any] = {}
        if entity_id is not None:
            message = f"{entity} not found with id of {entity_id}"
            details["id"] = str(entity_id)
        super().__init__(message, details)


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: Any | None = None) -> None:
        super().__init__("User", user_id)


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be found."""

    def __init__(self, role_id: Any | None = None) -> None:
        super().__init__("Role", role_id)


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission cannot be found."""

    def __init__(self, permission_id: Any | None = None) -> None:
        super().__init__("Permission", permission_id)


# =============================================================================
# Duplicate Errors (400)
# =============================================================================


class DuplicateError(CmsAPIError):
    """Base class for unique-field collisions."""

    status_code = 400
    code = "DUPLICATE"


class PermissionAlreadyExistsError(DuplicateError):
    """Raised when a permission code or name is already taken."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(
            f"Permission with {field} {value} already exists",
            {field: value},
        )


class RoleAlreadyExistsError(DuplicateError):
    """Raised when trying to create a role whose name is taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Role with name {name} already exists", {"name": name})


class UserAlreadyExistsError(DuplicateError):
    """Raised when trying to create a user whose email is taken."""

    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email} already exists", {"email": email})


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(CmsAPIError):
    """Base class for validation errors."""

    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidReferenceError(CmsAPIError):
    """Raised when ids in a batch do not all resolve."""

    status_code = 400
    code = "INVALID_REFERENCE"


class InvalidPermissionIdsError(InvalidReferenceError):
    """Raised when one or more permission ids do not exist."""

    def __init__(self, missing_ids: list[str]) -> None:
        super().__init__(
            "One or more permission IDs are invalid",
            {"invalid_ids": missing_ids},
        )


# =============================================================================
# Invariant Violations (400)
# =============================================================================


class InvariantViolationError(CmsAPIError):
    """Base class for operations that would break a system invariant."""

    status_code = 400
    code = "INVARIANT_VIOLATION"


class DefaultRoleDeletionError(InvariantViolationError):
    """Raised when trying to delete the default role."""

    def __init__(self, role_name: str) -> None:
        super().__init__("Cannot delete the default role", {"role": role_name})


class RoleHasUsersError(InvariantViolationError):
    """Raised when trying to delete a role still assigned to users."""

    def __init__(self, role_name: str, user_count: int) -> None:
        super().__init__(
            f"Cannot delete role as it is assigned to {user_count} users",
            {"role": role_name, "user_count": user_count},
        )


# =============================================================================
# Authentication / Authorization Errors (401 / 403)
# =============================================================================


class UnauthenticatedError(CmsAPIError):
    """Raised when no valid credential is present or the account is disabled."""

    status_code = 401
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Not authorized to access this route") -> None:
        super().__init__(message)


class ForbiddenError(CmsAPIError):
    """Raised when an authenticated user lacks a required role or permission."""

    status_code = 403
    code = "FORBIDDEN"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
