"""Generic API response schemas"""

from pydantic import BaseModel
from typing import Optional, Any


class APIResponse(BaseModel):
    """Generic API success response"""
    message: str = ""
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Generic API error response"""
    message: str
    data: Optional[Any] = None


def ok(**fields: Any) -> APIResponse:
    """Success envelope carrying ``{"ok": True, **fields}``"""
    return APIResponse(data={"ok": True, **fields})
