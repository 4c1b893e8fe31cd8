"""
Logging setup for hosts embedding the codec.

Library modules only call logging.getLogger(__name__); nothing is printed
unless the host configures logging. setup_logging() is the standard way
to do that: a rich console handler for warnings and up, plus an optional
DEBUG file log with the same line format as the rest of the toolchain.
"""

from __future__ import annotations
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

__all__ = ['setup_logging']


def setup_logging(
    name: str = "c64_basic",
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_dir: Optional[Path] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return a logger.

    Log files (only when log_dir is given): ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log``

    Calling it again for the same name returns the logger untouched.
    """
    logger = logging.getLogger(name)
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return logger
    logger.setLevel(level)

    # ── File handler: captures everything (DEBUG+) ──
    log_file = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name}_{ts}.log"
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(fh)

    # ── Console handler: only important stuff (WARNING+ default) ──
    if rich_console:
        ch = RichHandler(
            level=console_level,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S",
        ))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.info("Logger initialized: %s", name)
    if log_file is not None:
        logger.info("Log file: %s", log_file)
    return logger
