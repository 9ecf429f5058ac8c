from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .cache import SearchCache
from .debrid import RealDebridClient
from .labels import compose_label
from .metadata import StremioID, TitleInfo, lookup_title, parse_stremio_id
from .ranking import CandidateSubtitle, RankedSubtitle, rank_candidates
from .settings import settings
from .signature import TechnicalSignature, build_target_signature

log = logging.getLogger("titulky_subtitles.service")

DEFAULT_LANG = "cze"
DEFAULT_PROVIDER = "titulky"

# Stremio extras / query parameters describing the watched file
FILENAME_HINTS = ("filename", "videoName")
SIZE_HINTS = ("videoSize", "fileSize")
TITLE_HINTS = ("streamTitle", "title")


@dataclass(frozen=True)
class SearchQuery:
    media_type: str
    imdb_id: str
    season: Optional[str] = None
    episode: Optional[str] = None
    title: str = ""
    year: str = ""


CandidateProvider = Callable[[SearchQuery], Iterable[object]]

_PROVIDERS: Dict[str, CandidateProvider] = {}
_PROVIDERS_LOCK = threading.Lock()

RESULT_CACHE = SearchCache(
    result_ttl=settings.result_cache_ttl,
    empty_ttl=settings.empty_cache_ttl,
    max_size=settings.cache_max_size,
)


def register_provider(name: str, provider: CandidateProvider) -> None:
    """Plug in a subtitle-site scraper returning candidates for a query."""
    with _PROVIDERS_LOCK:
        _PROVIDERS[name] = provider
    RESULT_CACHE.clear()


def unregister_provider(name: str) -> None:
    with _PROVIDERS_LOCK:
        _PROVIDERS.pop(name, None)
    RESULT_CACHE.clear()


def registered_providers() -> List[str]:
    with _PROVIDERS_LOCK:
        return sorted(_PROVIDERS)


def _first_hint(hints: Mapping[str, object], keys) -> Optional[str]:
    for key in keys:
        value = hints.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def collect_candidates(query: SearchQuery) -> List[CandidateSubtitle]:
    with _PROVIDERS_LOCK:
        providers = sorted(_PROVIDERS.items())

    candidates: List[CandidateSubtitle] = []
    for name, provider in providers:
        try:
            results = list(provider(query) or [])
        except Exception:  # noqa: BLE001
            log.warning("Provider %s failed for %s", name, query.imdb_id, exc_info=True)
            continue
        for item in results:
            if isinstance(item, CandidateSubtitle):
                candidate = item
            elif isinstance(item, Mapping):
                candidate = CandidateSubtitle.from_mapping(item)
            else:
                log.warning("Provider %s returned unsupported item %r", name, type(item).__name__)
                continue
            if not isinstance(candidate.id, str):
                candidate = replace(candidate, id=str(candidate.id))
            if not candidate.provider:
                candidate = replace(candidate, provider=name)
            candidates.append(candidate)
        log.info("Provider %s returned %d candidates", name, len(results))
    return candidates


def resolve_target(hints: Mapping[str, object], runtime_minutes: int = 0) -> TechnicalSignature:
    """Signature of the watched video from request hints or Real-Debrid."""
    filename = _first_hint(hints, FILENAME_HINTS)
    size = _first_hint(hints, SIZE_HINTS)

    source_hint = None
    token = settings.effective_rd_token
    if not filename and token:
        active = RealDebridClient(token).get_current_stream()
        if active is not None:
            filename = active.filename
            size = size or (str(active.size) if active.size else None)
            source_hint = active.detected_source

    target = build_target_signature(
        filename=filename,
        file_size_bytes=size,
        quality=_first_hint(hints, ("quality",)),
        duration_minutes=runtime_minutes or settings.default_duration_minutes,
        stream_title=_first_hint(hints, TITLE_HINTS),
        source_hint=source_hint,
        cam_threshold=settings.cam_override_gbph,
        remux_threshold=settings.remux_override_gbph,
    )
    log.info(
        "Target signature: source=%s quality=%s edition=%s confidence=%s via %s",
        target.source,
        target.quality,
        target.special_edition,
        target.confidence,
        target.data_source,
    )
    return target


def build_entry(ranked: RankedSubtitle, position: int, is_high_confidence_match: bool) -> Dict[str, object]:
    candidate = ranked.candidate
    provider = candidate.provider or DEFAULT_PROVIDER
    return {
        "id": f"{provider}:{candidate.id}",
        "url": candidate.url,
        "lang": candidate.language_tag or DEFAULT_LANG,
        "name": compose_label(ranked, is_top_rank=position == 0, is_high_confidence_match=is_high_confidence_match),
        "score": round(ranked.final_score, 1),
    }


def _cache_key(media_type: str, tokens: StremioID, hints: Mapping[str, object], window: int) -> str:
    hint_part = "&".join(f"{k}={hints[k]}" for k in sorted(hints))
    return f"{media_type}:{tokens.base}:{tokens.season}:{tokens.episode}:{hint_part}:k{window}"


def search_subtitles(
    media_type: str,
    raw_id: str,
    *,
    hints: Optional[Mapping[str, object]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, object]]:
    """Ranked Stremio subtitle entries for a movie or episode id."""
    tokens = parse_stremio_id(raw_id)
    merged: Dict[str, object] = dict(tokens.extra)
    merged.update(hints or {})
    window = limit if limit and limit > 0 else settings.max_results

    cache_key = _cache_key(media_type, tokens, merged, window)
    cached = RESULT_CACHE.get(cache_key)
    if cached is not None:
        return cached

    info: Optional[TitleInfo] = lookup_title(media_type, tokens.base)
    query = SearchQuery(
        media_type=media_type,
        imdb_id=tokens.base,
        season=tokens.season,
        episode=tokens.episode,
        title=info.title if info else "",
        year=info.year if info else "",
    )
    candidates = collect_candidates(query)
    if not candidates:
        RESULT_CACHE.put(cache_key, [])
        return []

    target = resolve_target(merged, info.runtime_minutes if info else 0)
    ranked = rank_candidates(candidates, target, query.title, noise_threshold=settings.noise_threshold)

    downloadable = [item for item in ranked if item.candidate.url]
    if len(downloadable) < len(ranked):
        log.debug("Skipping %d candidates without a download url", len(ranked) - len(downloadable))
    subtitles = [
        build_entry(item, position, target.is_explicit) for position, item in enumerate(downloadable[:window])
    ]

    RESULT_CACHE.put(cache_key, subtitles)
    return subtitles
