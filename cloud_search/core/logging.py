"""
Logging Configuration Module
============================

Centralized logging setup for Cloud-Search.

Audit output goes to stdout; log records go to stderr through a Rich
handler so the two never interleave. An optional plain-text file handler
captures the same records for later inspection.

Functions
---------
setup_logging
    Configure application-wide logging.

Example
-------
>>> import logging
>>> from cloud_search.core.logging import setup_logging
>>>
>>> setup_logging(level="INFO", log_file="cloud-search.log")
>>> logger = logging.getLogger(__name__)
>>> logger.info("Starting scan")

See Also
--------
logging : Python standard library logging module.
rich.logging : Rich library's logging handler.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LEVEL = "WARNING"
DEFAULT_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries whose DEBUG/INFO chatter drowns out scan progress
NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def _resolve_level(level: Union[str, int]) -> int:
    """Turn a level name or number into a logging level number."""
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.WARNING)


def setup_logging(
    level: Union[str, int] = DEFAULT_LEVEL,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Configure application-wide logging.

    Replaces any handlers on the root logger with a Rich console handler
    (stderr) and, when requested, a file handler.

    Parameters
    ----------
    level : str or int, default="WARNING"
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    log_file : str, optional
        Path to a log file. Records are appended in plain text.
    console : Console, optional
        Rich Console for the handler. Defaults to a stderr console.

    Examples
    --------
    >>> setup_logging(level="DEBUG")
    >>> setup_logging(level="INFO", log_file="cloud-search.log")
    """
    level = _resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)
        )
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.debug(
        "Logging configured: level=%s, file=%s",
        logging.getLevelName(level),
        log_file or "None",
    )
