#!/usr/bin/env python3
"""
Detection of where a previous import stopped.

Every commit message ends with a link of the form
<canonical url>?oldid=<revision id>&diff=prev. The newest commit carrying
that link tells which revision was imported last; the import continues with
the revision after it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from wiki2git.git_driver import CommitDriver
from wiki2git.models import Revision

logger = logging.getLogger("wiki2git.resume")


@dataclass(frozen=True)
class ResumePoint:
    start_index: int
    total: int
    revision_id: Optional[str] = None

    @property
    def complete(self) -> bool:
        """True when every revision is already committed."""
        return self.start_index >= self.total


def revision_link_base(canonical_url: str) -> str:
    return f"{canonical_url}?oldid="


def revision_link(canonical_url: str, revision_id: str) -> str:
    return f"{revision_link_base(canonical_url)}{revision_id}&diff=prev"


def extract_revision_id(message: str, marker: str) -> Optional[str]:
    """
    Return the text between the last marker and the next '&' in message.

    The revision link always ends the message, so an earlier copy of the
    marker quoted in the edit comment is skipped.
    """
    start = message.rfind(marker)
    if start < 0:
        return None
    start += len(marker)
    end = message.find("&", start)
    if end <= start:
        return None
    return message[start:end]


def locate_resume_point(
    revisions: list[Revision],
    marker: str,
    driver: CommitDriver,
    start_index: Optional[int] = None,
    fresh: bool = False,
) -> ResumePoint:
    """
    Work out the index of the first revision still to be committed.

    Args:
        revisions: All revisions of the article, oldest first
        marker: Revision link base embedded in commit messages
        driver: Commit driver for the article's repository
        start_index: Explicit start index; used unmodified when given
        fresh: True when the repository has no commits

    Returns:
        ResumePoint for the revision list
    """
    total = len(revisions)
    if start_index is not None:
        logger.info(f"Starting at requested index {start_index}")
        return ResumePoint(start_index, total)

    if fresh:
        return ResumePoint(0, total)

    message = driver.last_message_containing(marker)
    if message is None:
        logger.warning("No previous import found in commit history; starting from the first revision")
        return ResumePoint(0, total)

    revision_id = extract_revision_id(message, marker)
    if revision_id is None:
        logger.warning(f"Could not read revision id after {marker}; starting from the first revision")
        return ResumePoint(0, total)

    for index, revision in enumerate(revisions):
        if revision.id == revision_id:
            logger.info(f"Detected existing import. Continue after revision {revision_id} at index {index + 1}")
            return ResumePoint(index + 1, total, revision_id)

    logger.warning(f"Last imported revision {revision_id} is not in the history; starting from the first revision")
    return ResumePoint(0, total, revision_id)
