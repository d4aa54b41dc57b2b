#!/usr/bin/env python3
"""
Git commit driver for wiki2git.

One CommitDriver is created per article import. It remembers the identity
and segment count of the previous commit so that a long run of revisions by
the same author does not reconfigure git before every commit, and an
unchanged file set is staged by `commit --all` instead of a separate add.

Usage:
    from wiki2git.git_driver import CommitDriver

    driver = CommitDriver(Path("out/Berlin/git"))
    fresh = driver.ensure_repository()
    driver.commit_revision(revision, segment_count=1, message="...",
                           author="Alice", author_id="42")
"""

import logging
from pathlib import Path
from typing import Optional

from wiki2git.commands import CommandResult, CommandRunner
from wiki2git.errors import ExternalCommandFailure
from wiki2git.models import Revision


def build_commit_message(comment: str, revision_link: str) -> str:
    return f"{comment}\n\n{revision_link}"


class CommitDriver:
    """Stages and commits revisions in a git work tree."""

    def __init__(
        self,
        work_dir: Path,
        runner: Optional[CommandRunner] = None,
        email_domain: str = "wikipedia.org",
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the commit driver.

        Args:
            work_dir: Git work tree (created if missing)
            runner: Command runner (a real CommandRunner if not provided)
            email_domain: Domain used for synthesized author e-mails
            logger: Logger instance (creates one if not provided)
        """
        self.work_dir = Path(work_dir)
        self.runner = runner or CommandRunner()
        self.email_domain = email_domain
        self.logger = logger or logging.getLogger("wiki2git.git")

        self.last_author: Optional[str] = None
        self.last_author_id: Optional[str] = None
        self.last_segment_count: Optional[int] = None

    def git(self, *args: str, env: Optional[dict[str, str]] = None, check: bool = True) -> CommandResult:
        """Run git in the work tree; raises ExternalCommandFailure on failure if check."""
        command = ["git", *args]
        result = self.runner.run(command, cwd=self.work_dir, env=env)
        if check and not result.ok:
            raise ExternalCommandFailure(
                command,
                result.returncode,
                result.stdout,
                result.stderr,
                str(self.work_dir),
            )
        return result

    def ensure_repository(self) -> bool:
        """
        Create the work tree and repository if needed.

        Returns:
            True when the repository has no commits yet
        """
        self.work_dir.mkdir(parents=True, exist_ok=True)
        if not (self.work_dir / ".git").exists():
            self.logger.info(f"Initializing repository in {self.work_dir}")
            self.git("init")
            return True
        return not self.has_commits()

    def has_commits(self) -> bool:
        return self.git("rev-parse", "--verify", "--quiet", "HEAD", check=False).ok

    def last_message_containing(self, marker: str) -> Optional[str]:
        """Return the message of the newest commit that contains marker."""
        result = self.git("log", "-1", "--fixed-strings", f"--grep={marker}", "--format=%B")
        message = result.stdout.strip()
        return message or None

    def commit_revision(
        self,
        revision: Revision,
        segment_count: int,
        message: str,
        author: str,
        author_id: str,
    ) -> None:
        """
        Commit the materialized files of one revision.

        Args:
            revision: Revision being committed (supplies the date)
            segment_count: Number of segment files written for it
            message: Full commit message
            author: Sanitized author name
            author_id: Sanitized author id
        """
        stage_all = []
        if segment_count != self.last_segment_count:
            # File set changed: stage additions and removals explicitly
            self.git("add", "--all", ".")
        else:
            stage_all = ["--all"]
        self.last_segment_count = segment_count

        email = f"{author_id}@{self.email_domain}"
        if author != self.last_author:
            self.git("config", "--local", "user.name", author)
            self.last_author = author
        if author_id != self.last_author_id:
            self.git("config", "--local", "user.email", email)
            self.last_author_id = author_id

        self.git(
            "commit",
            *stage_all,
            f"--date={revision.timestamp}",
            f"--author={author} <{email}>",
            "-m",
            message,
            "--allow-empty",
            env={"GIT_COMMITTER_DATE": revision.timestamp},
        )
        self.logger.debug(f"Committed revision {revision.id} by {author}")
