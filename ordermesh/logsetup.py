"""Process-wide log formatting: JSON records, or text in local mode."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Mapping

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}

DEFAULT_FIELD_MAP = {"level": "level", "time": "time", "msg": "msg"}
SERVICE_FIELD_MAP = {"level": "severity", "time": "time", "msg": "message"}
TEXT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}


class JSONFormatter(logging.Formatter):
    """Renders each record as one JSON object with its extra fields."""

    def __init__(self, field_map: Mapping[str, str] | None = None):
        super().__init__()
        self.field_map = {**DEFAULT_FIELD_MAP, **(field_map or {})}

    def format(self, record: logging.LogRecord) -> str:
        reserved = set(self.field_map.values())
        data: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            data[f"fields.{key}" if key in reserved else key] = value
        if record.exc_info:
            data["error"] = self.formatException(record.exc_info)
        stamp = datetime.fromtimestamp(record.created).astimezone()
        data[self.field_map["time"]] = stamp.isoformat(timespec="seconds")
        data[self.field_map["level"]] = _LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        data[self.field_map["msg"]] = record.getMessage()
        return json.dumps(data, sort_keys=True, default=str)


class _OwnedHandler(logging.StreamHandler):
    """Handler installed by this module, so repeated setup replaces it."""


def _owned_handler(logger: logging.Logger) -> _OwnedHandler:
    for handler in logger.handlers:
        if isinstance(handler, _OwnedHandler):
            return handler
    handler = _OwnedHandler()
    logger.addHandler(handler)
    return handler


def _parse_bool(text: str | None) -> bool:
    return text in _TRUE


def init_logging() -> logging.Logger:
    """Send root log records as JSON and log everything from debug up."""
    root = logging.getLogger()
    _owned_handler(root).setFormatter(JSONFormatter())
    root.setLevel(logging.DEBUG)
    return root


def set_formatter(logger: logging.Logger) -> None:
    """Use service JSON field names; plain text for ``logger`` in LOCAL_MODE."""
    _owned_handler(logging.getLogger()).setFormatter(JSONFormatter(SERVICE_FIELD_MAP))
    if _parse_bool(os.environ.get("LOCAL_MODE")):
        _owned_handler(logger).setFormatter(logging.Formatter(TEXT_FORMAT))