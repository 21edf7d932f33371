# app/utils/response.py

from typing import TypeVar, Generic, Optional, List, Any, Dict
from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class Page(BaseModel, Generic[T]):
    """One page of a listing; ``total`` counts every match, not just this page."""

    total: int
    page: int
    page_size: int
    items: List[T]


def success_response(message: str, data: Any = None) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
    }
