from pydantic import BaseModel
from typing import Any, Optional


class PaginationMeta(BaseModel):
    current_page: Optional[int] = None
    per_page: Optional[int] = None
    total: Optional[int] = None
    total_pages: Optional[int] = None
    has_next_page: Optional[bool] = None
    has_prev_page: Optional[bool] = None
    next_page: Optional[int] = None
    prev_page: Optional[int] = None

    model_config = {"extra": "allow"}


class ApiResponse(BaseModel):
    """Envelope for one upstream listing call."""
    success: bool
    data: list[dict[str, Any]] = []
    pagination: Optional[PaginationMeta] = None
    message: Optional[str] = None
