# src/hlskey/utils/logger.py
from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Optional

LOGGER_NAME = "hlskey"


class JsonFormatter(logging.Formatter):
    """Jeden obiekt JSON na linię (JSON-lines)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "where": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "WARNING", json_path: Optional[str] = None) -> logging.Logger:
    """
    Handler na stderr dla loggera "hlskey" i opcjonalnie plik JSON-lines.
    Wielokrotne wywołanie podmienia handlery zamiast je dublować.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(level.upper())

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(stream)

    if json_path:
        fh = logging.FileHandler(json_path, encoding="utf-8")
        fh.setFormatter(JsonFormatter())
        logger.addHandler(fh)
    return logger
