from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import parse_qsl, unquote

import requests

from .settings import settings

log = logging.getLogger("titulky_subtitles.metadata")

# Tried in order; a 404 or network error moves on to the next one
CINEMETA_BASES = [
    "https://v3-cinemeta.strem.io",
    "https://cinemeta-live.strem.io",
]

YEAR_RE = re.compile(r"(?:19|20)\d{2}")
RUNTIME_RE = re.compile(r"(\d+)")
MAX_DECODE_ROUNDS = 2


@dataclass
class StremioID:
    base: str
    season: Optional[str] = None
    episode: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TitleInfo:
    title: str
    year: str = ""
    runtime_minutes: int = 0


def _fully_unquote(text: str) -> str:
    # Stremio clients sometimes encode the id twice
    for _ in range(MAX_DECODE_ROUNDS):
        decoded = unquote(text)
        if decoded == text:
            break
        text = decoded
    return text


def parse_extra(raw: Optional[str]) -> Dict[str, str]:
    """Parse a Stremio extras segment such as ``filename=X.mkv&videoSize=123``."""
    text = (raw or "").strip().strip("/")
    if text.endswith(".json"):
        text = text[: -len(".json")]
    if not text:
        return {}
    return dict(parse_qsl(_fully_unquote(text), keep_blank_values=False))


def parse_stremio_id(raw_id: str) -> StremioID:
    """Split a Stremio id into imdb id, season/episode and the extras tail.

    Accepted forms: ``tt0133093``, ``tt0369179:1:2`` (also URL-encoded once or
    twice) and ``tt0133093/filename=...&videoSize=...``.
    """
    head, _, tail = _fully_unquote(raw_id or "").partition("/")
    base, season, episode = (head.split(":") + [None, None])[:3]
    return StremioID(base=base, season=season or None, episode=episode or None, extra=parse_extra(tail))


def normalize_year(raw: object) -> str:
    if not raw:
        return ""
    match = YEAR_RE.search(str(raw))
    return match.group(0) if match else ""


def normalize_runtime_minutes(raw: object) -> int:
    if raw is None:
        return 0
    if isinstance(raw, (int, float)):
        return int(raw) if raw > 0 else 0
    match = RUNTIME_RE.search(str(raw))
    if not match:
        return 0
    return int(match.group(1))


def title_info_from_meta(meta: Optional[dict]) -> Optional[TitleInfo]:
    if not meta or not meta.get("name"):
        return None
    return TitleInfo(
        title=str(meta["name"]),
        year=normalize_year(meta.get("releaseInfo") or meta.get("released") or meta.get("year")),
        runtime_minutes=normalize_runtime_minutes(meta.get("runtime")),
    )


def fetch_title_info(media_type: str, imdb_id: str) -> Optional[TitleInfo]:
    """Ask each Cinemeta endpoint in turn until one knows the title."""
    for base in CINEMETA_BASES:
        url = f"{base}/meta/{media_type}/{imdb_id}.json"
        try:
            resp = requests.get(url, timeout=settings.request_timeout)
            if resp.status_code == 404:
                continue
            resp.raise_for_status()
            info = title_info_from_meta(resp.json().get("meta"))
        except (requests.RequestException, ValueError, AttributeError) as exc:
            log.warning("Cinemeta lookup via %s failed for %s: %s", base, imdb_id, exc)
            continue
        if info is not None:
            return info
    return None


def lookup_title(media_type: str, imdb_id: str) -> Optional[TitleInfo]:
    """Title, year and runtime of a movie/series, or None when unavailable."""
    if not imdb_id:
        return None
    info = fetch_title_info(media_type, imdb_id)
    if info is None:
        log.info("No title found for %s %s", media_type, imdb_id)
        return None
    log.info("Found title %r (%s) for %s", info.title, info.year or "?", imdb_id)
    return info
