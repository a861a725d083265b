"""
Global error handlers for FastAPI application
"""

import structlog
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from vtube.core.exceptions import EngagementError, create_error_response

logger = structlog.get_logger()


def _envelope(status_code: int, message: str, error_type: str, details: dict = None) -> dict:
    content = {
        "statusCode": status_code,
        "data": None,
        "message": message,
        "success": False,
        "error_type": error_type
    }
    if details:
        content["details"] = details
    return content


async def engagement_error_handler(request: Request, exc: EngagementError) -> JSONResponse:
    """
    Handle typed core exceptions

    Args:
        request: FastAPI request object
        exc: EngagementError exception

    Returns:
        JSONResponse with the error envelope
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Engagement error occurred",
        error_type=exc.__class__.__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException with the standard envelope
    """
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    if isinstance(exc.detail, dict):
        message = str(exc.detail.get("message", "Request failed"))
    else:
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.status_code, message, "HTTPException"),
        headers=getattr(exc, "headers", None)
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors

    Malformed input is a client error like any other ValidationError,
    so it is reported as 400 rather than FastAPI's default 422.
    """
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        method=request.method,
        errors=len(exc.errors())
    )

    formatted_errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        formatted_errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            status.HTTP_400_BAD_REQUEST,
            "Validation error occurred",
            "ValidationError",
            {"validation_errors": formatted_errors}
        )
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle SQLAlchemy database errors that escaped the service layer
    """
    logger.error(
        "Database error occurred",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method
    )

    if isinstance(exc, IntegrityError):
        error_msg = str(exc.orig) if hasattr(exc, 'orig') else str(exc)

        if "UNIQUE constraint failed" in error_msg or "duplicate key" in error_msg.lower():
            status_code = status.HTTP_409_CONFLICT
            content = _envelope(status_code, "A record with this information already exists", "DuplicateError")
        elif "FOREIGN KEY constraint failed" in error_msg or "foreign key" in error_msg.lower():
            status_code = status.HTTP_400_BAD_REQUEST
            content = _envelope(status_code, "Referenced record does not exist", "ForeignKeyError")
        else:
            status_code = status.HTTP_400_BAD_REQUEST
            content = _envelope(status_code, "Database integrity constraint violation", "IntegrityError")
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        content = _envelope(status_code, "Database operation failed", "DatabaseError")

    return JSONResponse(status_code=status_code, content=content)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions
    """
    logger.error(
        "Unexpected error occurred",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
            "InternalServerError"
        )
    )


def register_error_handlers(app):
    """
    Register all error handlers with the FastAPI application

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(EngagementError, engagement_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
