# cems/schemas/common.py
import math
from typing import Optional
from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalItems: int
    hasNext: bool
    hasPrev: bool


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        currentPage=page,
        totalPages=math.ceil(total / limit) if limit else 0,
        totalItems=total,
        hasNext=page * limit < total,
        hasPrev=page > 1,
    )


def page_offset(page: int, limit: int) -> int:
    """Offset for a 1-based page number."""
    return max(0, (page - 1) * limit)
