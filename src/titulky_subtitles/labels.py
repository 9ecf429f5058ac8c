from __future__ import annotations

import re
from typing import List, Tuple

from .constants import UNKNOWN
from .ranking import RankedSubtitle
from .signature import clean_version_text, extract_source

WHITESPACE_RE = re.compile(r"\s+")

PERFECT_GLYPH = "🏆"
EDITION_GLYPH = "⭐"

# (minimum final score, glyph), checked top to bottom
MATCH_GLYPHS: List[Tuple[float, str]] = [
    (90.0, "🎯"),
    (80.0, "✅"),
    (60.0, "📝"),
    (float("-inf"), "⚠️"),
]
PERFECT_THRESHOLD = 95.0


def match_glyph(final_score: float, is_top_rank: bool = False, is_high_confidence_match: bool = False) -> str:
    if is_top_rank and is_high_confidence_match and final_score >= PERFECT_THRESHOLD:
        return PERFECT_GLYPH
    for threshold, glyph in MATCH_GLYPHS:
        if final_score >= threshold:
            return glyph
    return MATCH_GLYPHS[-1][1]


def compose_label(
    ranked: RankedSubtitle,
    is_top_rank: bool = False,
    is_high_confidence_match: bool = False,
) -> str:
    """Display name for a ranked subtitle: glyph, title and release markers."""
    candidate = ranked.candidate
    name = WHITESPACE_RE.sub(" ", candidate.title or "").strip()

    edition = ranked.signature.special_edition
    if edition:
        name += f" [{edition.upper().replace('-', ' ')}]"

    if candidate.video_version_text:
        source = extract_source(clean_version_text(candidate.video_version_text))
        lowered = name.lower()
        if source != UNKNOWN and source not in lowered and source.replace("-", "") not in lowered:
            name += f" [{source.upper()}]"

    prefix = match_glyph(ranked.final_score, is_top_rank, is_high_confidence_match)
    if ranked.edition_bonus > 0:
        prefix += EDITION_GLYPH
    name = f"{prefix} {name}"

    author = (candidate.author or "").strip()
    if author and author not in name:
        name += f" - {author}"
    return name


__all__ = ["compose_label", "match_glyph"]
