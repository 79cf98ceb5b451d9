"""Process-wide logging setup driven by AppSettings."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from rollcall.core.config import AppSettings

_CONFIGURED = False


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def setup_logging(settings: AppSettings | None = None) -> None:
    """Attach a stdout handler to the ``rollcall`` logger. Safe to call repeatedly."""
    global _CONFIGURED  # pylint: disable=global-statement
    if _CONFIGURED:
        return
    if settings is None:
        settings = AppSettings()

    level_name = settings.log_level.strip().upper() or "INFO"
    level = getattr(logging, level_name, logging.INFO)

    formatter: logging.Formatter
    if settings.log_json:
        formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    app_logger = logging.getLogger("rollcall")
    app_logger.handlers.clear()
    app_logger.addHandler(handler)
    app_logger.setLevel(level)
    app_logger.propagate = False

    logging.getLogger(__name__).info(
        "Logging configured. level=%s json=%s environment=%s",
        level_name,
        str(settings.log_json).lower(),
        settings.environment,
    )
    _CONFIGURED = True
