import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import config


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; ``extra={"context": {...}}`` keys are merged in."""

    def format(self, record):
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict):
            payload.update(ctx)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextAdapter(logging.LoggerAdapter):
    """
    Carries a fixed context dict (e.g. dataset paths) into every record,
    merged with any per-call extra={"context": {...}}.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.setdefault("extra", {})
        ctx = dict(self.extra or {})
        ctx.update(extra.get("context") or {})
        extra["context"] = ctx
        return msg, kwargs


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """
    JSON logger for library modules. Writes to stderr so CLI output on
    stdout stays clean.
    """
    log = logging.getLogger(name)
    if not log.handlers:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(JsonLogFormatter())
        log.addHandler(stream)
        log.setLevel((level or config.LOG_LEVEL).upper())
        log.propagate = False
    return log


def bind(logger: logging.Logger, **context: Any) -> ContextAdapter:
    return ContextAdapter(logger, context)
