"""Technical signatures: parsing release names and estimating video sources.

A signature is the structured fingerprint of a video release (source tier,
resolution, codec, audio, release group, special edition). Signatures are
built from free text (file names, subtitle version strings, stream titles)
or, when nothing better is known, from the size of the video file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Optional

from .constants import (
    AUDIO_PATTERNS,
    BYTES_PER_GB,
    CAM_OVERRIDE_CONFIDENCE,
    CAM_OVERRIDE_GBPH,
    CODEC_PATTERNS,
    DEBRID_SOURCE_CONFIDENCE,
    DEFAULT_DURATION_MINUTES,
    DEFAULT_SIZE_QUALITY,
    EDITION_KEYWORDS,
    EXPLICIT_CONFIDENCE,
    EXPLICIT_METADATA,
    MAX_VERSION_TEXT_LENGTH,
    MIN_DURATION_HOURS,
    MIN_RELEASE_GROUP_LENGTH,
    QUALITY_PATTERNS,
    RELEASE_GROUP_PATTERNS,
    REMUX_OVERRIDE_CONFIDENCE,
    REMUX_OVERRIDE_GBPH,
    SIZE_ESTIMATE,
    SIZE_TABLE,
    SOURCE_TAGS,
    TITLE_GUESS,
    TITLE_GUESS_CONFIDENCE,
    UNKNOWN,
)

log = logging.getLogger("titulky_subtitles.signature")

WHITESPACE_RE = re.compile(r"\s+")
VERSION_TEXT_JUNK_RE = re.compile(r"[^\w\.\-\[\]]")


@dataclass(frozen=True)
class TechnicalSignature:
    source: str = UNKNOWN
    quality: str = UNKNOWN
    codec: str = UNKNOWN
    audio: str = UNKNOWN
    release_group: str = UNKNOWN
    special_edition: Optional[str] = None
    original_text: str = ""
    confidence: int = 0
    data_source: str = TITLE_GUESS

    @property
    def is_explicit(self) -> bool:
        return self.data_source == EXPLICIT_METADATA


@dataclass(frozen=True)
class SizeEstimate:
    source: str = UNKNOWN
    confidence: float = 0.0


UNKNOWN_ESTIMATE = SizeEstimate()


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", "ignore")
    return value if isinstance(value, str) else str(value)


def extract_source(text: str) -> str:
    lowered = _as_text(text).lower()
    for tag in SOURCE_TAGS:
        if tag in lowered or tag.replace("-", "") in lowered:
            return tag
    return UNKNOWN


def extract_quality(text: str) -> str:
    value = _as_text(text)
    for quality, pattern in QUALITY_PATTERNS:
        if pattern.search(value):
            return quality
    return UNKNOWN


def _first_pattern(text: str, patterns) -> str:
    for tag, pattern in patterns:
        if pattern.search(text):
            return tag
    return UNKNOWN


def extract_release_group(text: str) -> str:
    value = _as_text(text).strip()
    for pattern in RELEASE_GROUP_PATTERNS:
        match = pattern.search(value)
        if not match:
            continue
        token = match.group(1).strip()
        if len(token) >= MIN_RELEASE_GROUP_LENGTH:
            return token.upper()
    return UNKNOWN


def extract_special_edition(text: str) -> Optional[str]:
    """Return a canonical edition tag, the raw edition keyword, or None."""
    lowered = _as_text(text).lower()
    for keyword in EDITION_KEYWORDS:
        if keyword not in lowered:
            continue
        if "extended" in lowered and "cut" in lowered:
            return "extended-cut"
        if "director" in lowered and ("cut" in lowered or "edition" in lowered):
            return "directors-cut"
        if "special" in lowered and "edition" in lowered:
            return "special-edition"
        if "ultimate" in lowered and "edition" in lowered:
            return "ultimate-edition"
        return keyword
    return None


def extract_signature(
    text: object,
    *,
    confidence: int = 0,
    data_source: str = TITLE_GUESS,
) -> TechnicalSignature:
    """Parse a release name / version string into a technical signature.

    Unrecognised fields stay ``unknown``; the function never raises and the
    result only depends on ``text`` (plus the provenance arguments).
    """
    value = _as_text(text)
    return TechnicalSignature(
        source=extract_source(value),
        quality=extract_quality(value),
        codec=_first_pattern(value, CODEC_PATTERNS),
        audio=_first_pattern(value, AUDIO_PATTERNS),
        release_group=extract_release_group(value),
        special_edition=extract_special_edition(value),
        original_text=value,
        confidence=confidence,
        data_source=data_source,
    )


def clean_version_text(text: object) -> str:
    """Normalize a scraped "video version" string before it is parsed."""
    value = WHITESPACE_RE.sub(" ", _as_text(text))
    value = VERSION_TEXT_JUNK_RE.sub(" ", value)
    value = WHITESPACE_RE.sub(" ", value).strip()
    return value[:MAX_VERSION_TEXT_LENGTH]


def _to_float(value: object) -> Optional[float]:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def estimate_from_size(
    size_bytes: object,
    quality: Optional[str] = None,
    duration_minutes: object = None,
    *,
    cam_threshold: float = CAM_OVERRIDE_GBPH,
    remux_threshold: float = REMUX_OVERRIDE_GBPH,
) -> SizeEstimate:
    """Guess the video source from its bitrate expressed in GB per hour.

    Every source whose range (for the given resolution) contains the
    size-per-hour is weighted by how close the value sits to the middle of
    the range; the best weighted candidate wins. Extreme bitrates are forced
    to ``cam`` (below ``cam_threshold``) or ``remux`` (above
    ``remux_threshold``).
    """
    size = _to_float(size_bytes)
    if size is None or size <= 0:
        return UNKNOWN_ESTIMATE

    minutes = _to_float(duration_minutes)
    if minutes is None or minutes <= 0:
        minutes = float(DEFAULT_DURATION_MINUTES)
    hours = max(minutes / 60.0, MIN_DURATION_HOURS)
    size_per_hour = (size / BYTES_PER_GB) / hours

    if size_per_hour < cam_threshold:
        return SizeEstimate("cam", CAM_OVERRIDE_CONFIDENCE)
    if size_per_hour > remux_threshold:
        return SizeEstimate("remux", REMUX_OVERRIDE_CONFIDENCE)

    table = SIZE_TABLE.get((quality or "").lower()) or SIZE_TABLE[DEFAULT_SIZE_QUALITY]
    best = UNKNOWN_ESTIMATE
    for source, (low, high, base_confidence) in table.items():
        if not low <= size_per_hour <= high:
            continue
        width = high - low
        midpoint = (low + high) / 2.0
        adjusted = base_confidence * (1 - abs(size_per_hour - midpoint) / width)
        if adjusted > best.confidence:
            best = SizeEstimate(source, adjusted)

    log.debug(
        "Size estimate: %.2f GB/h at %s -> %s (%.1f)",
        size_per_hour,
        quality or DEFAULT_SIZE_QUALITY,
        best.source,
        best.confidence,
    )
    return best


def build_target_signature(
    filename: Optional[str] = None,
    file_size_bytes: object = None,
    quality: Optional[str] = None,
    duration_minutes: object = None,
    stream_title: Optional[str] = None,
    source_hint: Optional[str] = None,
    *,
    cam_threshold: float = CAM_OVERRIDE_GBPH,
    remux_threshold: float = REMUX_OVERRIDE_GBPH,
) -> TechnicalSignature:
    """Build the signature of the video being watched from whatever is known.

    Provenance priority: an explicit file name, then a source detected by the
    debrid service (``source_hint``), then a size-based estimate, then a guess
    from the stream title.
    """
    filename = _as_text(filename).strip()
    stream_title = _as_text(stream_title).strip()
    quality = _as_text(quality).strip().lower() or None

    if filename:
        explicit = extract_signature(filename, confidence=EXPLICIT_CONFIDENCE, data_source=EXPLICIT_METADATA)
        if explicit.source != UNKNOWN:
            return explicit

    hint = _as_text(source_hint).strip().lower()
    if hint and hint != UNKNOWN:
        return replace(
            extract_signature(filename or stream_title),
            source=hint,
            confidence=DEBRID_SOURCE_CONFIDENCE,
            data_source=EXPLICIT_METADATA,
        )

    text = filename or stream_title
    parsed = extract_signature(text)
    size_quality = quality or (parsed.quality if parsed.quality != UNKNOWN else None)
    estimate = estimate_from_size(
        file_size_bytes,
        size_quality,
        duration_minutes,
        cam_threshold=cam_threshold,
        remux_threshold=remux_threshold,
    )
    if estimate.source != UNKNOWN:
        return replace(
            parsed,
            source=estimate.source,
            quality=parsed.quality if parsed.quality != UNKNOWN else (quality or UNKNOWN),
            confidence=int(round(estimate.confidence)),
            data_source=SIZE_ESTIMATE,
        )

    if filename:
        return replace(parsed, confidence=EXPLICIT_CONFIDENCE, data_source=EXPLICIT_METADATA)
    if stream_title:
        return replace(parsed, confidence=TITLE_GUESS_CONFIDENCE, data_source=TITLE_GUESS)
    return TechnicalSignature(quality=quality or UNKNOWN)


__all__ = [
    "SizeEstimate",
    "TechnicalSignature",
    "build_target_signature",
    "clean_version_text",
    "estimate_from_size",
    "extract_signature",
    "extract_source",
    "extract_special_edition",
]
