from app.schemas.search import SearchResult, SearchResponse, TypeCounts
from app.schemas.content import ApiResponse, PaginationMeta

__all__ = [
    "SearchResult", "SearchResponse", "TypeCounts",
    "ApiResponse", "PaginationMeta",
]
