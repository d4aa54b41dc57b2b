#!/usr/bin/env python3
"""
Command line entry point for wiki2git.

Usage:
    wiki2git Berlin --lang de              # import (or continue importing) Berlin
    wiki2git Berlin --lang de --start 500  # force the start revision index
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from wiki2git.config import load_settings
from wiki2git.errors import Wiki2GitError
from wiki2git.logging_config import setup_logging
from wiki2git.pipeline import ArticleImporter, Cancellation, ImportStatus

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert the revision history of a wiki article into git commits"
    )
    parser.add_argument("article", help="Article name, e.g. Berlin")
    parser.add_argument("--lang", default="en", help="Wiki language code (default: en)")
    parser.add_argument("--out", help="Output directory (overrides config)")
    parser.add_argument("--start", type=int, help="Revision index to start at")
    parser.add_argument("--config", help="Path to config.json")
    parser.add_argument("--log-dir", help="Directory for log files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger = setup_logging(
        article=args.article,
        language=args.lang,
        log_dir=args.log_dir,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    importer = None
    try:
        settings = load_settings(args.config)
        if args.out:
            settings.output_dir = Path(args.out)

        cancel = Cancellation()
        importer = ArticleImporter(args.article, args.lang, settings, cancel=cancel)
        cancel.install()

        result = importer.run(start_index=args.start)
    except Wiki2GitError as e:
        details = e.to_dict()
        position = importer.position if importer is not None else args.start
        logger.error(f"Import of {args.article} failed ({details['error_type']}): {details['message']}")
        work_dir = importer.work_dir if importer is not None else os.getcwd()
        logger.error(f"Working directory: {work_dir}")
        logger.error(f"Last resume index: {position}")
        for key, value in details["context"].items():
            if value:
                logger.error(f"  {key}: {value}")
        return EXIT_FAILURE

    if result.status is ImportStatus.INTERRUPTED:
        logger.warning(f"Stopped at revision index {result.next_index} of {result.total}; rerun to continue")
        return EXIT_INTERRUPTED
    if result.status is ImportStatus.MISSING:
        logger.info(f"Nothing to import for {args.article}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
