"""
Response envelope wrapping every API reply.

Success: {"status": 200, "message": "...", "data": <payload>, "error": null}
Failure: {"status": 404, "message": "...", "data": null, "error": <detail>}
"""

from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope: {status, message, data, error}."""
    status: int
    message: str
    data: Optional[T] = None
    error: Optional[Any] = None


def success(data: Any = None, message: str = "OK", status: int = 200) -> dict:
    """Build a success envelope (error is always null)."""
    return {"status": status, "message": message, "data": data, "error": None}


def failure(status: int, message: str, error: Any) -> dict:
    """Build a failure envelope (data is always null)."""
    return {"status": status, "message": message, "data": None, "error": error}
