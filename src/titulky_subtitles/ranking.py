"""Ranking of subtitle candidates against the signature of the watched video."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Iterable, List, Mapping, Optional

from .constants import NOISE_THRESHOLD
from .scoring import ScoreBreakdown, edition_bonus, score_compatibility
from .signature import TechnicalSignature, clean_version_text, extract_signature

log = logging.getLogger("titulky_subtitles.ranking")

LOG_TOP_N = 6


@dataclass(frozen=True)
class CandidateSubtitle:
    """A subtitle search result as handed over by a candidate provider."""

    id: str
    title: str
    popularity: float = 0
    language_tag: str = ""
    video_version_text: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    provider: str = ""

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "CandidateSubtitle":
        """Build a candidate from a scraper dict (camelCase or snake_case keys)."""

        def pick(*keys: str) -> Any:
            for key in keys:
                value = payload.get(key)
                if value not in (None, ""):
                    return value
            return None

        return cls(
            id=str(pick("id") or ""),
            title=str(pick("title") or ""),
            popularity=_coerce_popularity(pick("popularity", "downloads")),
            language_tag=str(pick("language_tag", "languageTag", "lang") or ""),
            video_version_text=pick("video_version_text", "videoVersionText", "videoVersion"),
            author=pick("author"),
            url=pick("url"),
            provider=str(pick("provider", "source") or ""),
        )


@dataclass(frozen=True)
class RankedSubtitle:
    """A candidate paired with everything the engine computed for it."""

    candidate: CandidateSubtitle
    signature: TechnicalSignature
    breakdown: ScoreBreakdown
    edition_bonus: int
    final_score: float

    @property
    def id(self) -> str:
        return self.candidate.id

    @property
    def source_score(self) -> float:
        return self.breakdown.source


def _coerce_popularity(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def derive_signature(candidate: CandidateSubtitle) -> TechnicalSignature:
    """Signature of the release a subtitle was made for.

    The detail-page version text is preferred over the search-result title.
    """
    version = clean_version_text(candidate.video_version_text) if candidate.video_version_text else ""
    return extract_signature(version or candidate.title)


def score_candidate(
    candidate: CandidateSubtitle,
    target: TechnicalSignature,
    movie_title: Optional[str] = "",
) -> RankedSubtitle:
    try:
        signature = derive_signature(candidate)
    except Exception:  # noqa: BLE001
        log.warning("Could not derive signature for candidate %r", getattr(candidate, "id", None), exc_info=True)
        signature = TechnicalSignature()

    breakdown = score_compatibility(target, signature, movie_title, candidate.title)
    bonus = edition_bonus(target, signature.original_text)
    final_score = min(100.0, breakdown.total + bonus)
    return RankedSubtitle(
        candidate=candidate,
        signature=signature,
        breakdown=breakdown,
        edition_bonus=bonus,
        final_score=final_score,
    )


def _make_comparator(noise_threshold: float):
    def compare(a: RankedSubtitle, b: RankedSubtitle) -> int:
        score_diff = b.final_score - a.final_score
        if abs(score_diff) >= noise_threshold:
            return 1 if score_diff > 0 else -1
        popularity_diff = _coerce_popularity(b.candidate.popularity) - _coerce_popularity(a.candidate.popularity)
        if popularity_diff:
            return 1 if popularity_diff > 0 else -1
        a_id, b_id = str(a.id), str(b.id)
        if a_id == b_id:
            return 0
        return -1 if a_id < b_id else 1

    return compare


def order_ranked(items: Iterable[RankedSubtitle], noise_threshold: float = NOISE_THRESHOLD) -> List[RankedSubtitle]:
    # Canonical pre-order so the result does not depend on provider order.
    pre_ordered = sorted(items, key=lambda item: str(item.id))
    return sorted(pre_ordered, key=cmp_to_key(_make_comparator(noise_threshold)))


def rank_candidates(
    candidates: Iterable[CandidateSubtitle],
    target: TechnicalSignature,
    movie_title: Optional[str] = "",
    *,
    noise_threshold: float = NOISE_THRESHOLD,
) -> List[RankedSubtitle]:
    """Order every candidate by compatibility with ``target``.

    Scores closer than ``noise_threshold`` count as equal and fall through to
    popularity, then to the candidate id, so the ordering is total and
    repeatable. Nothing is dropped; callers slice the window they need.
    """
    scored = [score_candidate(candidate, target, movie_title) for candidate in candidates]
    ranked = order_ranked(scored, noise_threshold=noise_threshold)

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            "Ranked %d candidates for %r (target source=%s quality=%s edition=%s)",
            len(ranked),
            movie_title,
            target.source,
            target.quality,
            target.special_edition,
        )
        for position, item in enumerate(ranked[:LOG_TOP_N], start=1):
            log.debug(
                "%d. %r source=%s source_score=%s title_score=%.1f edition=%+d final=%.1f popularity=%s",
                position,
                item.candidate.title,
                item.signature.source,
                item.source_score,
                item.breakdown.title,
                item.edition_bonus,
                item.final_score,
                item.candidate.popularity,
            )
    return ranked


__all__ = [
    "CandidateSubtitle",
    "RankedSubtitle",
    "derive_signature",
    "order_ranked",
    "rank_candidates",
    "score_candidate",
]
