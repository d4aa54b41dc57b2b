#!/usr/bin/env python3
"""
Writes the segments of a revision into the git work tree.

Segment i of the article is stored as <stem><i>. Before each revision all
segment files are removed, so files of segments that no longer exist never
survive into the next commit.
"""

import logging
import re
import time
from pathlib import Path
from typing import Callable, Optional, TypeVar

from wiki2git.errors import TransientIOFailure
from wiki2git.models import Revision
from wiki2git.reflow import ReflowPolicy, reflow

T = TypeVar("T")


def retry_io(
    action: Callable[[], T],
    description: str,
    attempts: int = 3,
    delay: float = 1.0,
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Run a file operation, retrying on OSError.

    Files can be locked for a moment by git or a virus scanner.

    Args:
        action: Zero-argument callable doing the I/O
        description: Human-readable description for logging
        attempts: Number of attempts before giving up
        delay: Seconds to wait between attempts

    Returns:
        Whatever action returns

    Raises:
        TransientIOFailure: when every attempt failed
    """
    logger = logger or logging.getLogger("wiki2git.io")
    last_error: Optional[OSError] = None

    for attempt in range(attempts):
        try:
            return action()
        except OSError as e:
            last_error = e
            logger.warning(f"Attempt {attempt + 1}/{attempts} failed for {description}: {e}")
            if attempt < attempts - 1:
                time.sleep(delay)

    raise TransientIOFailure(description, attempts, last_error) from last_error


class ContentMaterializer:
    """Reconciles the work tree's segment files with a revision."""

    def __init__(
        self,
        work_dir: Path,
        stem: str,
        policy: Optional[ReflowPolicy] = None,
        attempts: int = 3,
        retry_delay: float = 1.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.work_dir = Path(work_dir)
        self.stem = stem
        self.policy = policy
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.logger = logger or logging.getLogger("wiki2git.materializer")
        self._segment_file = re.compile(re.escape(stem) + r"\d+")

    def segment_path(self, index: int) -> Path:
        return self.work_dir / f"{self.stem}{index}"

    def segment_files(self) -> list[Path]:
        """Segment files currently in the work tree."""
        return sorted(
            p for p in self.work_dir.iterdir()
            if p.is_file() and self._segment_file.fullmatch(p.name)
        )

    def materialize(self, revision: Revision) -> int:
        """
        Replace the work tree's segment files with those of revision.

        Returns:
            Number of segment files written
        """
        retry_io(
            self._remove_segment_files,
            f"cleanup of {self.work_dir} for {revision.id}",
            self.attempts,
            self.retry_delay,
            self.logger,
        )

        counter = 0
        for segment in revision.segments:
            if segment.present:
                path = self.segment_path(counter)
                retry_io(
                    lambda: self._write_segment(path, segment.value),
                    f"write of {path.name}",
                    self.attempts,
                    self.retry_delay,
                    self.logger,
                )
            else:
                # Deleted segment: later segments move up one position
                counter -= 1
            counter += 1

        return counter

    def _remove_segment_files(self) -> None:
        for path in self.segment_files():
            path.unlink(missing_ok=True)

    def _write_segment(self, path: Path, value: str) -> None:
        lines = [line.text for line in reflow(value, self.policy)]
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write("\n".join(lines))
            f.write("\n")
