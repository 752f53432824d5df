"""JSON logging for the exporter.

Each line carries the event name, the poll-loop thread that emitted it and
whatever ``extra`` context the caller attached (``loop``, ``query_id``,
``url`` ...). Keys matching the redaction patterns and credentials embedded
in URLs are masked before the line is written.
"""

from __future__ import annotations

import json
import logging
import os
import re
import socket
import traceback
from datetime import datetime, timezone
from typing import Iterable

# logrus-style level names are accepted next to the stdlib ones.
_LEVEL_ALIASES = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}

_URL_USERINFO = re.compile(r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^/@\s]+@", re.IGNORECASE)


def parse_level(level: str) -> int:
    """Resolve a textual log level, raising ValueError for unknown names."""
    try:
        return _LEVEL_ALIASES[level.strip().lower()]
    except KeyError:
        raise ValueError(f"invalid log level: {level!r}") from None


class Redactor:
    """Masks sensitive keys and ``user:password@`` parts of URLs."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = [p.lower() for p in patterns]

    def apply(self, key: str, value):
        if any(p in key.lower() for p in self.patterns):
            return "[REDACTED]"
        if isinstance(value, str):
            return _URL_USERINFO.sub(r"\g<scheme>[REDACTED]@", value)
        if isinstance(value, dict):
            return {k: self.apply(k, v) for k, v in value.items()}
        return value


class CustomJsonFormatter(logging.Formatter):
    def __init__(
        self,
        service: str,
        environment: str,
        redaction_patterns: Iterable[str],
    ):
        super().__init__()
        self.hostname = socket.gethostname()
        self.pid = os.getpid()
        self.service_name = service
        self.environment = environment
        self.redactor = Redactor(redaction_patterns)

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            "thread": record.threadName,
            "service": self.service_name,
            "environment": self.environment,
            "hostname": self.hostname,
            "pid": self.pid,
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and key not in data:
                data[key] = value
        if record.exc_info:
            data["exception"] = self.format_exception(record.exc_info)
        return json.dumps(
            {k: self.redactor.apply(k, v) for k, v in data.items()}, default=str
        )

    @staticmethod
    def format_exception(exc_info):
        et, ev, tb = exc_info
        return {
            "type": et.__name__,
            "message": str(ev),
            "stack": traceback.format_tb(tb),
        }


def configure_logging(
    service: str,
    environment: str,
    level: str,
    redaction_patterns: Iterable[str],
) -> logging.Logger:
    numeric_level = parse_level(level)
    handler = logging.StreamHandler()
    handler.setFormatter(CustomJsonFormatter(service, environment, redaction_patterns))
    root = logging.getLogger()
    root.handlers = [handler]  # deterministic single handler
    root.setLevel(numeric_level)

    from presto_exporter.core.logger import mark_configured

    mark_configured()
    return root


__all__ = [
    "CustomJsonFormatter",
    "Redactor",
    "configure_logging",
    "parse_level",
]
