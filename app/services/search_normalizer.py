"""
Normalizes upstream search payloads into SearchResult records.

The CMS global search endpoint has answered in several shapes over time:
  - {"data": [...]}     items carry model_type / type / model
  - {"results": [...]}  same, under a different key
  - [...]               bare array
  - {"articles": [...], "blogs": [...], ...}  grouped by content type
Anything else is scanned for array values, each treated as one batch.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import ValidationError

from app.core.logging_config import get_logger
from app.schemas.search import SearchResult
from app.services.content_api import encode_uri_component

logger = get_logger(__name__)

DEFAULT_RESULT_TYPE = "article"

TYPE_MAP = {
    "article": "article",
    "articles": "article",
    "blog": "blog",
    "blogs": "blog",
    "book": "book",
    "books": "book",
    "course": "course",
    "courses": "course",
    "author": "author",
    "authors": "author",
    "event": "event",
    "events": "event",
    "darul-ifta": "fatwa",
    "darul_ifta": "fatwa",
    "iftah": "fatwa",
    "fatwa": "fatwa",
    "fatwas": "fatwa",
    "awlyaa": "awlyaa",
    "awlyaas": "awlyaa",
    "tasawwuf": "tasawwuf",
    "tasawwufs": "tasawwuf",
    # Fatwa taxonomy records: counted as fatwas, linked to listing pages
    "tag": "fatwa",
    "tags": "fatwa",
    "iftah-sub-category": "fatwa",
    "iftah_sub_category": "fatwa",
    "iftah-sub-categories": "fatwa",
    "iftah_sub_categories": "fatwa",
}

TAG_TYPES = {"tag", "tags"}
SUB_CATEGORY_TYPES = {
    "iftah-sub-category", "iftah_sub_category",
    "iftah-sub-categories", "iftah_sub_categories",
}

GROUPED_KEYS = (
    "articles", "blogs", "courses", "awlyaa", "tasawwuf",
    "authors", "books", "events", "darul-ifta",
)

# type -> (path prefix, whether the slug is preferred over the id)
URL_RULES = {
    "article": ("/articles", True),
    "blog": ("/blogs", True),
    "course": ("/courses", True),
    "author": ("/authors", False),
    "book": ("/book", False),
    "event": ("/event", True),
    "fatwa": ("/iftah", True),
    "awlyaa": ("/awlayaa", False),
    "tasawwuf": ("/tasawwuf", True),
}


def map_result_type(raw_type: Optional[str]) -> str:
    """Map an upstream model/type name onto one of the nine result types."""
    if not raw_type:
        return DEFAULT_RESULT_TYPE
    return TYPE_MAP.get(str(raw_type).lower(), DEFAULT_RESULT_TYPE)


def _first(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def _text(value: Any) -> Optional[str]:
    """Stripped string form of a scalar; None for blanks and nested objects."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value).strip() or None


def _full_name(person: Any) -> str:
    if not isinstance(person, dict):
        return ""
    return f"{person.get('first_name') or ''} {person.get('last_name') or ''}".strip()


def generate_url(result_type: str, data: dict, raw_type: Optional[str] = None) -> str:
    raw = str(raw_type or "").lower()

    if raw in TAG_TYPES:
        ref = _first(data.get("name"), data.get("id"), data.get("tag_id"))
        return f"/iftah/category/{encode_uri_component(ref)}" if ref else "/iftah"

    if raw in SUB_CATEGORY_TYPES:
        ref = _first(data.get("id"), data.get("sub_category_id"), data.get("iftah_sub_category_id"))
        return f"/iftah/sub-category/{ref}" if ref else "/iftah"

    prefix, prefer_slug = URL_RULES.get(result_type, ("", False))
    ref = _first(_text(data.get("slug")), data.get("id")) if prefer_slug else data.get("id")
    if not ref:
        return prefix or "/"
    return f"{prefix}/{ref}"


def extract_title(data: dict) -> str:
    candidates = (_text(data.get(key)) for key in ("title", "name", "question"))
    return _first(*candidates, _full_name(data)) or ""


def extract_description(data: dict) -> Optional[str]:
    value = _first(data.get("description"), data.get("excerpt"), data.get("answer"), data.get("bio"))
    return str(value) if value else None


def extract_author(data: dict) -> Optional[str]:
    author = data.get("author")
    if isinstance(author, str):
        return author.strip() or None
    if isinstance(author, dict):
        name = author.get("name") or _full_name(author)
        if name:
            return str(name)
    return _full_name(data.get("recorded_by")) or None


def extract_date(data: dict) -> Optional[str]:
    value = _first(data.get("created_at"), data.get("publishedAt"), data.get("date"), data.get("written_year"))
    return str(value) if value else None


def extract_image(data: dict) -> Optional[str]:
    for key in ("image", "featuredImage", "photo"):
        value = data.get(key)
        if isinstance(value, dict):
            value = value.get("url")
        if isinstance(value, str) and value.strip():
            return value
    return None


def extract_score(data: dict) -> Optional[float]:
    value = _first(data.get("score"), data.get("relevance_score"))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def transform_search_result(item: dict, raw_type: Optional[str]) -> Optional[SearchResult]:
    """Build a SearchResult from one upstream record; None when it has no title or is malformed."""
    try:
        result_type = map_result_type(raw_type)
        title = extract_title(item)
        if not title:
            return None

        return SearchResult(
            type=result_type,
            id=_first(item.get("id"), _text(item.get("slug"))) or uuid.uuid4().hex,
            title=title,
            description=extract_description(item),
            slug=_text(item.get("slug")),
            url=generate_url(result_type, item, raw_type),
            image=extract_image(item),
            date=extract_date(item),
            author=extract_author(item),
            score=extract_score(item),
        )
    except (AttributeError, TypeError, ValueError, ValidationError) as e:
        logger.error(f"Error transforming search result: {e}")
        return None


@dataclass
class ParsedPayload:
    """Raw items with the source type each one was found under (None if unknown)."""
    shape: str
    items: list[tuple[Any, Optional[str]]] = field(default_factory=list)


def _parse_list_under(key: str) -> Callable[[Any], Optional[ParsedPayload]]:
    def parse(payload: Any) -> Optional[ParsedPayload]:
        if isinstance(payload, dict) and isinstance(payload.get(key), list):
            return ParsedPayload(key, [(item, None) for item in payload[key]])
        return None
    return parse


def _parse_bare_list(payload: Any) -> Optional[ParsedPayload]:
    if isinstance(payload, list):
        return ParsedPayload("list", [(item, None) for item in payload])
    return None


def _parse_arrays(payload: Any, shape: str) -> ParsedPayload:
    items = []
    for key, value in payload.items():
        if isinstance(value, list):
            items.extend((item, key) for item in value)
    return ParsedPayload(shape, items)


def _parse_grouped(payload: Any) -> Optional[ParsedPayload]:
    if isinstance(payload, dict) and any(payload.get(k) for k in GROUPED_KEYS):
        return _parse_arrays(payload, "grouped")
    return None


def _parse_unknown(payload: Any) -> Optional[ParsedPayload]:
    if isinstance(payload, dict):
        logger.warning(f"Unknown search response structure. Keys: {list(payload.keys())}")
        return _parse_arrays(payload, "unknown")
    return None


SHAPE_PARSERS = (
    _parse_list_under("data"),
    _parse_list_under("results"),
    _parse_bare_list,
    _parse_grouped,
    _parse_unknown,
)


def parse_payload(payload: Any) -> ParsedPayload:
    """Try each known shape in priority order; the first non-empty one wins."""
    for parser in SHAPE_PARSERS:
        parsed = parser(payload)
        if parsed is not None and parsed.items:
            return parsed
    return ParsedPayload("empty")


def item_source_type(item: dict, group_type: Optional[str], type_hint: Optional[str]) -> Optional[str]:
    return _first(item.get("model_type"), item.get("type"), item.get("model"), group_type, type_hint)


def normalize(payload: Any, type_hint: Optional[str] = None) -> list[SearchResult]:
    """Turn any supported upstream payload into SearchResults, skipping bad items."""
    parsed = parse_payload(payload)
    logger.debug(f"Normalizing search payload | shape={parsed.shape} | items={len(parsed.items)}")

    results = []
    for item, group_type in parsed.items:
        if not isinstance(item, dict):
            logger.debug(f"Skipping non-object search item: {item!r}")
            continue
        result = transform_search_result(item, item_source_type(item, group_type, type_hint))
        if result is not None:
            results.append(result)
    return results
