"""
Logging setup for drive-mover.

Every module logs through logging.getLogger(__name__). Move outcomes are
logged at INFO (MOVED old => new, TRASHED path), recovered failures
(update errors and timeouts, cache misses, destination problems) at
WARNING, and Drive API calls and cache writes at DEBUG. The thread name
is part of the format so moves running side by side, and the
drive-update-<file id> threads carrying their remote updates, can be
told apart.
"""

import logging
import sys
from pathlib import Path

from .config import LogConfig

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(threadName)s - %(message)s"


def setup_logging(config: LogConfig) -> None:
    """
    Configure the root logger from a LogConfig.

    A FileHandler is added when config.file is set and a stderr
    StreamHandler when config.console is True. Existing handlers are
    replaced so repeated calls do not duplicate output.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if config.file:
        log_path = Path(config.file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
