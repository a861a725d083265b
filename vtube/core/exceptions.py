"""
Custom exception classes for engagement operations and global error handling
"""

from typing import Optional, Dict, Any
from fastapi import status


class EngagementError(Exception):
    """Base exception for all typed core errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(EngagementError):
    """Raised for missing or malformed input (ids, modes, actions)"""

    def __init__(self, message: str, field: str = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class NotFoundError(EngagementError):
    """Raised when a required video, edge, comment or user is absent"""

    def __init__(self, resource: str = "resource", resource_id: Any = None):
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID {resource_id} not found"
        else:
            message = f"{resource.capitalize()} not found"

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND
        )


class ConflictError(EngagementError):
    """Raised when a create would duplicate existing state"""

    def __init__(self, message: str, status_code: int = status.HTTP_409_CONFLICT, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=status_code, details=details)


class SelfFollowError(ConflictError):
    """Raised when a user tries to follow themselves"""

    def __init__(self):
        super().__init__(
            message="You cannot follow yourself",
            status_code=status.HTTP_400_BAD_REQUEST
        )


class DuplicateFollowError(ConflictError):
    """Raised when an edge already exists for the (follower, following) pair"""

    def __init__(self, following_id: Any, edge_status: str = None):
        details = {"following_id": str(following_id)}
        if edge_status:
            details["status"] = edge_status
        super().__init__(
            message="Already following or requested to follow this user",
            details=details
        )


class PermissionDeniedError(EngagementError):
    """Raised when the caller is not allowed to mutate a resource"""

    def __init__(self, operation: str = "modify", resource: str = "resource"):
        super().__init__(
            message=f"Not authorized to {operation} this {resource}",
            status_code=status.HTTP_403_FORBIDDEN
        )


class AuthenticationError(EngagementError):
    """Raised by the identity dependency when no valid caller is present"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class MediaUploadError(EngagementError):
    """Raised when the media store fails to store an object"""

    def __init__(self, message: str, filename: str = None, kind: str = None):
        details = {}
        if filename:
            details["filename"] = filename
        if kind:
            details["kind"] = kind

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class MediaTypeError(ValidationError):
    """Raised when an uploaded file has a type the store does not accept"""

    def __init__(self, filename: str, content_type: str, allowed_types: list = None):
        if allowed_types:
            allowed_str = ", ".join(sorted(allowed_types))
            message = f"File type '{content_type}' not allowed for '{filename}'. Allowed types: {allowed_str}"
        else:
            message = f"File type '{content_type}' not allowed for '{filename}'"
        super().__init__(message=message, field="content_type", value=content_type)


class MediaSizeError(ValidationError):
    """Raised when an uploaded file exceeds the configured size limit"""

    def __init__(self, filename: str, size: int, max_size: int):
        message = f"File '{filename}' size ({size} bytes) exceeds maximum allowed size ({max_size} bytes)"
        super().__init__(message=message, field="size", value=size)


def create_error_response(error: EngagementError) -> dict:
    """
    Create the uniform response envelope from an EngagementError

    Args:
        error: EngagementError instance

    Returns:
        Dictionary in {statusCode, data, message, success} form
    """
    response = {
        "statusCode": error.status_code,
        "data": None,
        "message": error.message,
        "success": False,
        "error_type": error.__class__.__name__
    }

    if error.details:
        response["details"] = error.details

    return response
