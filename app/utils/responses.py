"""
Standard JSON envelope: ``{"success": bool, "message"?: str, ...data}``
"""
from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    **data: Any
) -> JSONResponse:
    """Success envelope; ``data`` keys are merged into the top level"""
    content: dict = {"success": True}
    if message:
        content["message"] = message
    content.update(data)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def created_response(message: Optional[str] = None, **data: Any) -> JSONResponse:
    return success_response(message, status.HTTP_201_CREATED, **data)


def error_response(
    message: str = "An error occurred",
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: Any = None
) -> JSONResponse:
    """Error envelope; a list goes under ``errors``, anything else under ``error``"""
    content: dict = {"success": False, "message": message}
    if errors:
        if isinstance(errors, list):
            content["errors"] = errors
        else:
            content["error"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))
