from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(
    level: int | Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = logging.INFO,
    log_file: Optional[str] = None,
) -> None:
    """Configure root logging for the route optimizer.

    When ``log_file`` is given, a size-rotated file handler is attached next to
    the console handler so request logs survive a terminal session.
    """

    if isinstance(level, str):
        level = level.upper()  # type: ignore[assignment]

    logging.basicConfig(level=level, format=LOG_FORMAT)

    if log_file is None:
        return

    root = logging.getLogger()
    target = Path(log_file).resolve()
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == target:
            return

    target.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        target,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
