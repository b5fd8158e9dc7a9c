"""Logging configuration.

Applies per-category levels from settings so that the engine's own loggers
can be tuned independently of the HTTP server's.

Usage:
    from record_search.obs.logging import setup_logging
    setup_logging()   # once at startup
"""

from __future__ import annotations

import logging
import sys

from record_search.settings import RecordSearchSettings, get_settings

# Settings field -> logger names it controls.
_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_engine": [
        "record_search.engine",
        "record_search.matching",
        "record_search.facets",
        "record_search.highlight",
        "record_search.ingest",
    ],
    "log_level": [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
    ],
}


def setup_logging(settings: RecordSearchSettings | None = None) -> None:
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # Test runners and scripts may start without any handler.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s - %(message)s"))
        root.addHandler(handler)

    for settings_field, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, settings_field, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s engine=%s",
        settings.log_level,
        settings.log_level_engine,
    )


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    if isinstance(level, int):
        return level
    return logging.INFO
