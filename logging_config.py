"""
logging_config.py — YTManager Logging Configuration
=====================================================
Action results go to stdout as JSON, so every log line goes elsewhere:
  - stderr: bare messages, LOG_LEVEL and up (DEBUG with --verbose)
  - LOG_FILE_PATH (~/.ytmanager/ytmanager.log): everything, timestamped

Modules log under the "ytmanager" tree:
    logger = logging.getLogger("ytmanager.stream_library")
"""

from __future__ import annotations

import logging
from pathlib import Path


YTMANAGER_DIR = Path.home() / ".ytmanager"

DEFAULT_LOG_FILE = YTMANAGER_DIR / "ytmanager.log"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Attach the stderr and file handlers to the "ytmanager" logger (once)."""
    root_logger = logging.getLogger("ytmanager")
    root_logger.setLevel(logging.DEBUG)

    if root_logger.handlers:
        return

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    log_path = Path(log_file) if log_file else DEFAULT_LOG_FILE
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root_logger.addHandler(file_handler)
    except OSError:
        root_logger.warning(f"⚠️  No log file: cannot write {log_path}")


def set_console_level(level: str) -> None:
    for handler in logging.getLogger("ytmanager").handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(getattr(logging, level.upper(), logging.INFO))
