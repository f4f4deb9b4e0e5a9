"""
Free-text relevance matching for site search.

Both the global-search path and the per-type fallback path filter candidates
through matches_text(), so the two can never disagree for the same query.
"""
import re
from dataclasses import dataclass
from typing import Any, Iterable

# Pashto function words and numerals that carry no search intent
STOP_WORDS = frozenset({
    "د", "دی", "څو", "ته", "وايې", "او", "یا", "چی", "کې", "په", "نه",
    "دا", "دغه", "هغه", "یو", "دوه", "درې", "څلور", "پنځه", "شپږ", "اووم",
    "اتم", "نهم", "لسه", "کول", "کړل", "کړې", "کړي", "کېږي", "کېدل", "کېږې",
    "کېدې", "کېدي", "شو", "شوه", "شوي", "وي", "وو", "وې",
    "؟", "!", ".", ",", ";", ":",
})

PUNCTUATION_RE = re.compile(r"[؟!.,;:]+")
PUNCTUATION_ONLY_RE = re.compile(r"^[؟!.,;:]+$")

PHRASE_SHORTCUT_MIN_LENGTH = 5
SHORT_QUERY_MAX_TERMS = 2
MIN_MATCH_RATIO = 0.6


def clean_text(value: str) -> str:
    """Lower-case and drop the punctuation set."""
    return PUNCTUATION_RE.sub("", value.lower())


@dataclass(frozen=True)
class QueryTerms:
    """A query split into the pieces the matcher needs; build once per request."""
    phrase: str
    words: tuple[str, ...]
    meaningful_words: tuple[str, ...]

    @classmethod
    def parse(cls, query: str) -> "QueryTerms":
        phrase = clean_text(query.strip()).strip()
        words = tuple(w for w in phrase.split() if w)
        meaningful = tuple(
            w for w in words
            if len(w) > 1 and w not in STOP_WORDS and not PUNCTUATION_ONLY_RE.match(w)
        )
        return cls(phrase=phrase, words=words, meaningful_words=meaningful)

    @property
    def terms(self) -> tuple[str, ...]:
        # Stop-word-only queries fall back to every word
        return self.meaningful_words or self.words


def matches_text(
    searchable_text: str,
    terms: QueryTerms,
    phrase_min_length: int = PHRASE_SHORTCUT_MIN_LENGTH,
) -> bool:
    """Decide whether already-cleaned searchable text is relevant to the query."""
    if len(terms.phrase) > phrase_min_length and terms.phrase in searchable_text:
        return True

    match_terms = terms.terms
    if match_terms:
        matched = sum(1 for term in match_terms if term in searchable_text)
        required = 1.0 if len(match_terms) <= SHORT_QUERY_MAX_TERMS else MIN_MATCH_RATIO
        if matched / len(match_terms) >= required:
            return True

    if not terms.meaningful_words and terms.phrase in searchable_text:
        return True

    return False


def build_searchable_text(values: Iterable[Any]) -> str:
    return " ".join(clean_text(str(v)) for v in values if v)


def matches_query(
    candidate_text: str,
    query: str,
    phrase_min_length: int = PHRASE_SHORTCUT_MIN_LENGTH,
) -> bool:
    """Check raw candidate text (title, description, author joined) against a raw query."""
    return matches_text(clean_text(candidate_text), QueryTerms.parse(query), phrase_min_length)


def get_path(item: Any, path: str) -> Any:
    """Resolve a dotted field path ("author.name") on a nested dict."""
    value = item
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def matches_fields(
    item: dict,
    fields: Iterable[str],
    terms: QueryTerms,
    phrase_min_length: int = PHRASE_SHORTCUT_MIN_LENGTH,
) -> bool:
    """Match a raw upstream record, looking only at the given field paths."""
    searchable = " ".join(
        clean_text(str(value)) if value else ""
        for value in (get_path(item, f) for f in fields)
    )
    return matches_text(searchable, terms, phrase_min_length)
