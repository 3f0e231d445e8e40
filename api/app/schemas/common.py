"""
Shared response schemas.
"""
from pydantic import BaseModel
from typing import Any, Dict, Optional
import math


class PaginationResponse(BaseModel):
    """Pagination metadata used by every list endpoint."""
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationResponse":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class ErrorBody(BaseModel):
    """Error payload: stable code plus human-readable message."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Envelope for every error returned by the API."""
    error: ErrorBody
