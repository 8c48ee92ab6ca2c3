"""
Logging handle for inkbox.

The handle is built once in `main()` and passed to whatever needs it.
It never touches the root logger, so nothing ends up on the screen.
"""
import logging
import os
from typing import Optional

LOG_FORMAT = "%(levelname)s - %(message)s"


class _QuietFileHandler(logging.FileHandler):
    # a failed write must never reach stderr while the UI owns the terminal
    def handleError(self, record):
        pass

    def flush(self):
        try:
            super().flush()
        except (OSError, ValueError):
            pass


def open_log(path: str, level: str = "INFO", name: Optional[str] = None) -> logging.Logger:
    """
    Open `path` in append mode and return a logger writing only there.
    Raises OSError if the file (or its directory) can't be created.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    handler = _QuietFileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(name or f"inkbox.{os.path.abspath(path)}")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    close_log(logger)
    logger.addHandler(handler)
    return logger


def close_log(logger: logging.Logger):
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
