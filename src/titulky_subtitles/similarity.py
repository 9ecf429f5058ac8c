from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .constants import SEQUEL_NUMBER_RE, SEQUEL_WORDS, TITLE_ARTICLES_RE

NON_WORD_RE = re.compile(r"[^\w\s]")
WHITESPACE_RE = re.compile(r"\s+")
NEUTRAL_SIMILARITY = 50.0


def normalize_title(title: Optional[str]) -> str:
    """Lowercase, drop punctuation and English articles, collapse spaces."""
    text = str(title or "").lower()
    text = NON_WORD_RE.sub(" ", text)
    text = TITLE_ARTICLES_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def _significant_words(words: Iterable[str]) -> List[str]:
    return [word for word in words if len(word) > 2]


def has_sequel_markers(normalized: str) -> bool:
    if any(word in SEQUEL_WORDS for word in normalized.split()):
        return True
    return bool(SEQUEL_NUMBER_RE.search(normalized))


def title_similarity(movie_title: Optional[str], candidate_title: Optional[str]) -> float:
    """Score 0-100 how well a subtitle title names the requested movie.

    Sequels of the requested movie ("The Matrix Reloaded" for "The Matrix")
    are capped at 60 even though they contain the full title.
    """
    if not movie_title or not candidate_title:
        return NEUTRAL_SIMILARITY

    movie = normalize_title(movie_title)
    candidate = normalize_title(candidate_title)
    if not movie or not candidate:
        return NEUTRAL_SIMILARITY
    if movie == candidate:
        return 100.0

    candidate_words = candidate.split()
    candidate_is_sequel = has_sequel_markers(candidate)

    if candidate_is_sequel and not has_sequel_markers(movie):
        movie_words = _significant_words(movie.split())
        base_words = {
            word
            for word in _significant_words(candidate_words)
            if word not in SEQUEL_WORDS and not SEQUEL_NUMBER_RE.fullmatch(word)
        }
        if movie_words and all(word in base_words for word in movie_words):
            return 60.0

    if candidate.startswith(movie + " ") and not candidate_is_sequel:
        return 100.0
    if movie in candidate:
        return 60.0 if candidate_is_sequel else 90.0
    if candidate in movie:
        return 85.0

    movie_words = _significant_words(movie.split())
    significant_candidate = _significant_words(candidate_words)
    common = [word for word in movie_words if word in significant_candidate]
    if common:
        ratio = (len(common) * 2) / (len(movie_words) + len(significant_candidate)) * 100
        return min(80.0, max(30.0, ratio))
    return 10.0


__all__ = ["normalize_title", "has_sequel_markers", "title_similarity"]
