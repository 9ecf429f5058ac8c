"""Logging setup and per-request context shared by the addon modules."""

from __future__ import annotations

import contextvars
import datetime
import json
import logging
import sys

from .settings import settings

# Per-request context for correlation
REQUEST_ID: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        rid = REQUEST_ID.get("")
        if rid:
            payload["rid"] = rid
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    level_name = (level or settings.log_level or "INFO").upper()
    use_json = settings.json_logs if json_logs is None else json_logs

    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))

    logging.basicConfig(level=level_name, handlers=[handler], force=True)
    logging.getLogger("titulky_subtitles").setLevel(level_name)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
