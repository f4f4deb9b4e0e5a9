from pydantic import BaseModel
from typing import Literal, Optional, Union

ResultType = Literal[
    "blog", "course", "author", "book", "event", "fatwa", "article", "awlyaa", "tasawwuf",
]

# Enumeration order of the fallback fan-out; results are emitted in this order.
RESULT_TYPES: tuple[str, ...] = (
    "blog", "article", "course", "author", "book", "event", "fatwa", "awlyaa", "tasawwuf",
)


class SearchResult(BaseModel):
    type: ResultType
    id: Union[int, str]
    title: str
    description: Optional[str] = None
    slug: Optional[str] = None
    url: str  # Frontend route path
    image: Optional[str] = None
    date: Optional[str] = None
    author: Optional[str] = None
    score: Optional[float] = None  # Upstream relevance, passed through unchanged


class TypeCounts(BaseModel):
    article: int = 0
    blog: int = 0
    course: int = 0
    author: int = 0
    book: int = 0
    event: int = 0
    fatwa: int = 0
    awlyaa: int = 0
    tasawwuf: int = 0

    @classmethod
    def from_results(cls, results: list[SearchResult]) -> "TypeCounts":
        counts = {t: 0 for t in RESULT_TYPES}
        for result in results:
            counts[result.type] += 1
        return cls(**counts)


class SearchResponse(BaseModel):
    success: bool
    query: str
    results: list[SearchResult] = []
    total: int = 0
    types: TypeCounts = TypeCounts()
    error: Optional[str] = None  # Only set when success is False

    @classmethod
    def ok(cls, query: str, results: list[SearchResult]) -> "SearchResponse":
        return cls(
            success=True,
            query=query,
            results=results,
            total=len(results),
            types=TypeCounts.from_results(results),
        )

    @classmethod
    def failed(cls, query: str, error: str) -> "SearchResponse":
        return cls(success=False, query=query, error=error)
