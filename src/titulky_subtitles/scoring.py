"""Compatibility scoring between the watched video and a subtitle release."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from .constants import (
    CODEC_MIN_CONFIDENCE,
    EDITION_KEYWORDS,
    EXPLICIT_BONUS,
    NEUTRAL_SCORE,
    QUALITY_ALIASES,
    SIZE_ESTIMATE,
    SIZE_ESTIMATE_BONUS,
    SIZE_ESTIMATE_BONUS_MIN_CONFIDENCE,
    SOURCE_GROUPS,
    UNKNOWN,
    W_CODEC,
    W_QUALITY,
    W_RELEASE_GROUP,
    W_SOURCE,
    W_TITLE,
)
from .signature import TechnicalSignature
from .similarity import title_similarity

log = logging.getLogger("titulky_subtitles.scoring")


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-dimension sub-scores (0-100) and the weighted total."""

    source: float
    quality: float
    codec: float
    release_group: float
    title: float
    provenance_bonus: float
    total: float


def source_compatibility(target_source: str, candidate_source: str) -> float:
    known_target = bool(target_source) and target_source != UNKNOWN
    known_candidate = bool(candidate_source) and candidate_source != UNKNOWN
    if known_target and target_source == candidate_source:
        return 100.0
    for group in SOURCE_GROUPS:
        if target_source in group and candidate_source in group:
            return 80.0
    if known_target and known_candidate:
        return 40.0
    return 20.0


@lru_cache(maxsize=None)
def _alias_pattern(alias: str) -> re.Pattern:
    return re.compile(rf"(?<![a-z0-9]){re.escape(alias)}(?![a-z0-9])")


def _known(value: Optional[str]) -> bool:
    return bool(value) and value != UNKNOWN


def _provenance_bonus(target: TechnicalSignature) -> float:
    if target.is_explicit:
        return EXPLICIT_BONUS
    if target.data_source == SIZE_ESTIMATE and target.confidence > SIZE_ESTIMATE_BONUS_MIN_CONFIDENCE:
        return SIZE_ESTIMATE_BONUS
    return 0.0


def score_compatibility(
    target: TechnicalSignature,
    candidate: TechnicalSignature,
    movie_title: Optional[str] = "",
    candidate_title: Optional[str] = "",
) -> ScoreBreakdown:
    """Weighted compatibility of ``candidate`` with the ``target`` video.

    Source and quality terms are scaled by the target's confidence; codec is
    only compared for confident targets and release group only for targets
    built from explicit file metadata. Terms that cannot be evaluated fall
    back to a neutral 50.
    """
    multiplier = max(0, min(int(target.confidence or 0), 100)) / 100.0
    candidate_text = (candidate.original_text or "").lower()

    source = source_compatibility(target.source, candidate.source)
    total = source * W_SOURCE * multiplier

    if _known(target.quality):
        wanted = target.quality.lower()
        if wanted in candidate_text:
            quality = 100.0
        elif any(_alias_pattern(alias).search(candidate_text) for alias in QUALITY_ALIASES.get(wanted, ())):
            quality = 80.0
        else:
            quality = 0.0
        total += quality * W_QUALITY * multiplier
    else:
        quality = NEUTRAL_SCORE
        total += quality * W_QUALITY

    if target.confidence > CODEC_MIN_CONFIDENCE and _known(target.codec):
        codec = 100.0 if target.codec.lower() in candidate_text else 0.0
        total += codec * W_CODEC * multiplier
    else:
        codec = NEUTRAL_SCORE
        total += codec * W_CODEC

    if target.is_explicit and _known(target.release_group):
        release_group = 100.0 if target.release_group.lower() in candidate_text else 0.0
    else:
        release_group = NEUTRAL_SCORE
    total += release_group * W_RELEASE_GROUP

    title = title_similarity(movie_title, candidate_title)
    total += title * W_TITLE

    bonus = _provenance_bonus(target)
    total = max(0.0, min(100.0, total + bonus))

    log.debug(
        "Scored %r vs %r: source=%s quality=%s codec=%s group=%s title=%.1f bonus=%s total=%.1f",
        candidate.original_text,
        target.original_text,
        source,
        quality,
        codec,
        release_group,
        title,
        bonus,
        total,
    )
    return ScoreBreakdown(
        source=source,
        quality=quality,
        codec=codec,
        release_group=release_group,
        title=title,
        provenance_bonus=bonus,
        total=total,
    )


def _has_edition_keyword(text: str) -> bool:
    return any(keyword in text for keyword in EDITION_KEYWORDS)


def edition_bonus(target: TechnicalSignature, candidate_text: Optional[str]) -> int:
    """Bonus (or small penalty) for special-edition agreement."""
    text = (candidate_text or "").lower()
    edition = target.special_edition
    if edition:
        if edition in text:
            return 20
        if edition == "extended-cut" and "extended" in text:
            return 15
        if edition == "directors-cut" and ("director" in text or "directors" in text):
            return 15
        if edition == "special-edition" and "special" in text:
            return 10
        if _has_edition_keyword(text):
            return 5
        return 0
    if _has_edition_keyword(text):
        return -5
    return 0


__all__ = ["ScoreBreakdown", "edition_bonus", "score_compatibility", "source_compatibility"]
