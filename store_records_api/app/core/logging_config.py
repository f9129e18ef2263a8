"""
Logging configuration for the application.

``setup_logging`` attaches a console handler (and optionally a file
handler) to the root logger.  Modules obtain their own logger with
``logging.getLogger(__name__)``.  Remote calls log at DEBUG, entry
points and completed write phases at INFO, failures at ERROR.  The
tabular store access key is never part of a log record.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``).  Case insensitive; an
        unknown name falls back to ``INFO``.
    logfile : Optional[str]
        Path of an additional log file.  Resolved relative to the
        current working directory.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # create_app may run several times in one process (tests).
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # urllib3 logs every connection at DEBUG, including request lines.
    logging.getLogger("urllib3").setLevel(max(logger.level, logging.INFO))
