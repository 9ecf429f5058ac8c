from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .constants import DEBRID_RESOLUTION_SOURCES, DEBRID_SOURCE_ALIASES, UNKNOWN
from .settings import settings

log = logging.getLogger("titulky_subtitles.debrid")

REAL_DEBRID_BASE = "https://api.real-debrid.com/rest/1.0"


@dataclass(frozen=True)
class DebridFile:
    filename: str
    size: int = 0
    link: str = ""
    detected_source: str = UNKNOWN


def detect_source(filename: str) -> str:
    """Best-effort source of a debrid file name, resolution used as last resort."""
    lowered = (filename or "").lower()
    for source, aliases in DEBRID_SOURCE_ALIASES:
        if any(alias in lowered for alias in aliases):
            return source
    for resolution, source in DEBRID_RESOLUTION_SOURCES:
        if resolution in lowered:
            return source
    return UNKNOWN


class RealDebridClient:
    """Looks up the file the user is currently streaming through Real-Debrid."""

    def __init__(self, api_key: str, base_url: str = REAL_DEBRID_BASE, timeout: Optional[float] = None) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.debrid_timeout

    def get_current_stream(self) -> Optional[DebridFile]:
        try:
            resp = requests.get(
                f"{self.base_url}/streaming/active",
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            log.warning("Real-Debrid active stream lookup failed: %s", exc)
            return None

        if isinstance(payload, dict):
            payload = [payload]
        if not payload:
            log.info("Real-Debrid: no active streams")
            return None

        active = payload[0] or {}
        filename = str(active.get("filename") or "").strip()
        if not filename:
            return None
        try:
            size = int(active.get("filesize") or 0)
        except (TypeError, ValueError):
            size = 0
        detected = detect_source(filename)
        log.info("Real-Debrid active stream: %s (source=%s)", filename, detected)
        return DebridFile(
            filename=filename,
            size=size,
            link=str(active.get("link") or ""),
            detected_source=detected,
        )
