"""
Uniform response envelope shared by every endpoint
"""

from typing import Any
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(data: Any = None, message: str = "Server Response", status_code: int = 200) -> JSONResponse:
    """Wrap a payload as {statusCode, data, message, success}"""
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "data": jsonable_encoder(data),
            "message": message,
            "success": 200 <= status_code < 300,
        }
    )
