from __future__ import annotations

import datetime
import logging
import time
import uuid
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from .common import REQUEST_ID, configure_logging
from .metadata import parse_extra
from .service import registered_providers, search_subtitles
from .settings import settings

# ---------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------
configure_logging()
log = logging.getLogger("titulky_subtitles.app")

STARTED_AT = time.time()
SUPPORTED_TYPES = {"movie", "series"}

# ---------------------------------------------------------------------
# App + middleware
# ---------------------------------------------------------------------
app = FastAPI(title=settings.addon_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
    token = REQUEST_ID.set(rid)
    try:
        log.info("%s %s", request.method, request.url.path)
        response = await call_next(request)
    finally:
        REQUEST_ID.reset(token)
    response.headers["X-Request-ID"] = rid
    return response


# ---------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------
MANIFEST = {
    "id": "com.titulky.subtitles",
    "version": settings.addon_version,
    "name": settings.addon_name,
    "description": "Czech and Slovak subtitles from Titulky.com ranked by release compatibility",
    "logo": "https://www.titulky.com/favicon.ico",
    "catalogs": [],
    "resources": [
        {
            "name": "subtitles",
            "types": ["movie", "series"],
            "idPrefixes": ["tt"],
            "extra": [{"name": "filename"}, {"name": "videoSize"}, {"name": "videoHash"}],
        },
    ],
    "types": ["movie", "series"],
    "idPrefixes": ["tt"],
    "behaviorHints": {"adult": False, "p2p": False, "configurable": False, "configurationRequired": False},
}


@app.get("/manifest.json")
async def manifest() -> JSONResponse:
    return JSONResponse(MANIFEST)


# ---------------------------------------------------------------------
# Health and metrics
# ---------------------------------------------------------------------
REQ_LATENCY = Histogram("titulky_request_seconds", "Request latency seconds", ["route"])
SEARCH_COUNT = Counter("titulky_search_total", "Subtitle searches", ["media_type"])
RESULT_COUNT = Counter("titulky_results_total", "Subtitles returned", ["media_type"])


@app.get("/ping")
async def ping() -> JSONResponse:
    return JSONResponse(
        {
            "status": "alive",
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "uptime": int(time.time() - STARTED_AT),
            "providers": registered_providers(),
        }
    )


@app.get("/healthz")
async def healthz() -> JSONResponse:
    return JSONResponse({"status": "ok", "version": MANIFEST["version"]})


@app.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# ---------------------------------------------------------------------
# Subtitle search
# ---------------------------------------------------------------------
async def _subtitles_response(
    media_type: str,
    item_id: str,
    request: Request,
    extra: Optional[str] = None,
) -> JSONResponse:
    if media_type not in SUPPORTED_TYPES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unsupported media type")

    t0 = time.time()
    SEARCH_COUNT.labels(media_type=media_type).inc()

    hints: Dict[str, str] = parse_extra(extra)
    hints.update(request.query_params)

    subtitles = await run_in_threadpool(search_subtitles, media_type, item_id, hints=hints)

    RESULT_COUNT.labels(media_type=media_type).inc(len(subtitles))
    REQ_LATENCY.labels(route="subtitles").observe(time.time() - t0)
    log.info("Returning %d subtitles for %s %s", len(subtitles), media_type, item_id)
    return JSONResponse({"subtitles": subtitles})


@app.get("/subtitles/{media_type}/{item_id}.json")
async def subtitles(media_type: str, item_id: str, request: Request) -> JSONResponse:
    return await _subtitles_response(media_type, item_id, request)


@app.get("/subtitles/{media_type}/{item_id}/{extra}.json")
async def subtitles_with_extra(media_type: str, item_id: str, extra: str, request: Request) -> JSONResponse:
    return await _subtitles_response(media_type, item_id, request, extra)
