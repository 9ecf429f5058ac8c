"""Titulky.com subtitles for Stremio, ranked by release compatibility."""

from .labels import compose_label
from .ranking import CandidateSubtitle, RankedSubtitle, rank_candidates
from .scoring import ScoreBreakdown, edition_bonus, score_compatibility
from .signature import TechnicalSignature, build_target_signature, estimate_from_size, extract_signature
from .similarity import title_similarity

__all__ = [
    "CandidateSubtitle",
    "RankedSubtitle",
    "ScoreBreakdown",
    "TechnicalSignature",
    "build_target_signature",
    "compose_label",
    "edition_bonus",
    "estimate_from_size",
    "extract_signature",
    "rank_candidates",
    "score_compatibility",
    "title_similarity",
]
