"""
Logging setup for hisaab using loguru.

Library code only ever does ``from loguru import logger``. Applications (the
CLI, a cron wrapper) call ``setup_logging()`` once to pick the console level
and, optionally, a rotating file sink:

    setup_logging("INFO", log_dir="~/.hisaab-data/logs")   # -> logs/hisaab.log
"""

import os
import sys
from pathlib import Path

from loguru import logger

LOG_FILE_NAME = "hisaab.log"

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def resolve_log_file(log_file: str | Path | None = None, log_dir: str | Path | None = None) -> Path | None:
    """Pick the file sink path: an explicit file wins over ``<log_dir>/hisaab.log``."""
    if log_file:
        return Path(os.path.expanduser(str(log_file)))
    if log_dir:
        return Path(os.path.expanduser(str(log_dir))) / LOG_FILE_NAME
    return None


def setup_logging(
    level: str = "WARNING",
    log_file: str | Path | None = None,
    log_dir: str | Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> Path | None:
    """
    Replace loguru's sinks with a stderr sink and an optional file sink.

    Args:
        level: Minimum level for both sinks (case-insensitive).
        log_file: Explicit log file path.
        log_dir: Directory for ``hisaab.log`` when ``log_file`` is not given;
            created if missing.
        rotation: Size or interval at which the file sink rotates.
        retention: How long rotated files are kept.

    Returns:
        The file sink path, or None when logging to stderr only.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    path = resolve_log_file(log_file, log_dir)
    if path is None:
        return None

    path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(path, level=level, format=FILE_FORMAT, rotation=rotation, retention=retention)
    logger.debug(f"Logging to {path} at {level}")
    return path
