#!/usr/bin/env python3
"""
Logging configuration for wiki2git.

Logs to the console and to a rotating file per article import.

Usage:
    from wiki2git.logging_config import setup_logging

    logger = setup_logging(
        article="Berlin",
        language="de",
        log_dir="./logs",  # Optional, defaults to WIKI2GIT_LOG_DIR or ./logs
    )
    logger.info("Starting import...")
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from wiki2git.filename_utils import sanitize_name

ROOT_LOGGER = "wiki2git"
LOG_DIR_ENV = "WIKI2GIT_LOG_DIR"


def setup_logging(
    article: Optional[str] = None,
    language: Optional[str] = None,
    log_dir: Optional[str] = None,
    level: int = logging.INFO,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the "wiki2git" logger for console and file output.

    All module loggers ("wiki2git.export", "wiki2git.git", ...) propagate to
    it, so one call covers the whole pipeline.

    Args:
        article: Article being imported (used in the log filename)
        language: Wiki language code (used in the log filename)
        log_dir: Directory for log files (default: WIKI2GIT_LOG_DIR or ./logs)
        level: Logging level (default: INFO)
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated log files to keep
        console: Whether to also log to stdout

    Returns:
        Configured logger instance

    Log files are named {language}-{article}.log (e.g., de-Berlin.log), or
    wiki2git.log without an article.
    """
    log_path = Path(log_dir) if log_dir is not None else get_log_dir()
    log_path.mkdir(parents=True, exist_ok=True)

    if article:
        stem = sanitize_name(article)
        log_filename = f"{language}-{stem}.log" if language else f"{stem}.log"
    else:
        log_filename = f"{ROOT_LOGGER}.log"

    log_file = log_path / log_filename

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Clear any existing handlers (for re-initialization)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.debug(f"Logging initialized: {log_file}")
    return logger


def get_log_dir(default: str = "./logs") -> Path:
    """
    Get the log directory from environment or default.

    Checks WIKI2GIT_LOG_DIR environment variable first.
    """
    return Path(os.environ.get(LOG_DIR_ENV, default))
