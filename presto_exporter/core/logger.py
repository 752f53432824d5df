from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from presto_exporter.core.config import Settings

_configured = False


def configure_from_settings(settings: "Settings") -> logging.Logger:
    """Install the JSON handler using the exporter settings.

    Raises ValueError when ``app_log_level`` is not a known level name.
    """
    from presto_exporter.shared.logging.json import configure_logging

    return configure_logging(
        service=settings.otel_service_name,
        environment=settings.app_environment,
        level=settings.app_log_level,
        redaction_patterns=settings.app_log_redaction_patterns,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; falls back to plain text output until configured."""
    global _configured
    if not _configured:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        _configured = True
    return logging.getLogger(name)


def mark_configured() -> None:
    global _configured
    _configured = True
