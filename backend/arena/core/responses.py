"""JSON envelopes returned to clients"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from arena.core.exceptions import AppError


def envelope(message: str = "", data: Optional[Any] = None) -> Dict[str, Any]:
    """``{"message": ..., "data": ...}`` with ``data`` omitted when absent"""
    body: Dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = data
    return body


def error_response(exc: AppError) -> JSONResponse:
    """Render an AppError using its kind's status code and label"""
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(exc.public_message(), exc.details or None),
    )
