#!/usr/bin/env python3
"""
Import of one article's history into a git repository.

    export batches -> revision list -> resume point -> for each revision:
        write segment files -> escape comment/identity -> git commit
    -> ledger update

Output layout below settings.output_dir:

    <article>/<article>0.xml, <article>1.xml, ...   cached export batches
    <article>/git/                                  the repository
    ledger.json                                     imported articles

Usage:
    from wiki2git.config import load_settings
    from wiki2git.pipeline import ArticleImporter

    importer = ArticleImporter("Berlin", "de", load_settings())
    result = importer.run()
"""

import enum
import logging
import signal
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import requests

from wiki2git.commands import CommandRunner
from wiki2git.config import Settings
from wiki2git.export_api import ExportClient, FetchCancelled
from wiki2git.filename_utils import sanitize_name
from wiki2git.git_driver import CommitDriver, build_commit_message
from wiki2git.ledger import ArticleLedger
from wiki2git.materializer import ContentMaterializer
from wiki2git.models import ArticleRecord
from wiki2git.resume import locate_resume_point, revision_link, revision_link_base
from wiki2git.sanitizer import CommitSanitizer, ShellFlavor

PROGRESS_EVERY = 10


class ImportStatus(enum.Enum):
    IMPORTED = "imported"
    UP_TO_DATE = "up_to_date"
    MISSING = "missing"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True)
class ImportResult:
    status: ImportStatus
    next_index: int = 0
    total: int = 0
    committed: int = 0


class Cancellation:
    """Stop request observed between export downloads and between revisions."""

    def __init__(self):
        self._event = threading.Event()

    def set(self, *_) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def install(self) -> None:
        """Route SIGINT and SIGTERM to this cancellation."""
        signal.signal(signal.SIGINT, self.set)
        signal.signal(signal.SIGTERM, self.set)


class ArticleImporter:
    """Imports the revision history of one article."""

    def __init__(
        self,
        article: str,
        language: str,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        session: Optional[requests.Session] = None,
        cancel: Optional[Cancellation] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the importer. Fails before any network or file access.

        Args:
            article: Article name as used by the wiki
            language: Wiki language code (must be configured in settings.wikis)
            settings: Loaded settings
            runner: Command runner for git (a real CommandRunner if not provided)
            session: requests session for the export client
            cancel: Cancellation checked between batches and revisions
            logger: Logger instance (creates one if not provided)

        Raises:
            UnsupportedLanguage: no base URL for language
            PlatformNotSupported: no escaping rules for the configured shell
        """
        self.article = article
        self.language = language
        self.settings = settings
        self.logger = logger or logging.getLogger("wiki2git.pipeline")
        self.cancel = cancel or Cancellation()

        base_url = settings.wiki_url(language)
        self.sanitizer = CommitSanitizer(ShellFlavor.from_setting(settings.shell))

        self.canonical_url = base_url + article
        self.stem = sanitize_name(article) or "_unnamed_"
        self.article_dir = Path(settings.output_dir) / self.stem
        self.work_dir = self.article_dir / "git"

        self.client = ExportClient(
            base_url,
            batch_size=settings.batch_size,
            timeout=settings.timeout_seconds,
            user_agent=settings.user_agent,
            session=session,
        )
        self.driver = CommitDriver(self.work_dir, runner, settings.email_domain)
        self.materializer = ContentMaterializer(
            self.work_dir,
            self.stem,
            policy=settings.reflow,
            attempts=settings.io_attempts,
            retry_delay=settings.io_retry_delay,
        )

        # Index of the next revision to commit
        self.position = 0

    def run(self, start_index: Optional[int] = None) -> ImportResult:
        """
        Import all revisions not yet in the repository.

        Args:
            start_index: Revision index to start at, overriding detection

        Returns:
            ImportResult describing how the run ended
        """
        self.logger.info(f"Importing {self.language} article {self.article}")

        try:
            revisions = self.client.fetch_history(self.article, self.article_dir, cancel=self.cancel)
        except FetchCancelled as e:
            self.logger.warning(f"Interrupted before export batch {e.batch}; downloaded batches stay cached")
            return ImportResult(ImportStatus.INTERRUPTED, self.position)
        if revisions is None:
            return ImportResult(ImportStatus.MISSING)

        total = len(revisions)
        fresh = self.driver.ensure_repository()
        resume = locate_resume_point(
            revisions,
            revision_link_base(self.canonical_url),
            self.driver,
            start_index=start_index,
            fresh=fresh,
        )
        self.position = resume.start_index

        if resume.complete:
            self.logger.info(f"All {total} revisions of {self.article} are already imported")
            self._update_ledger(total)
            return ImportResult(ImportStatus.UP_TO_DATE, self.position, total)

        committed = 0
        try:
            for revision in revisions[resume.start_index:]:
                if self.cancel.is_set():
                    self.logger.warning(f"Interrupted; next revision index is {self.position}")
                    return ImportResult(ImportStatus.INTERRUPTED, self.position, total, committed)

                if self.position % PROGRESS_EVERY == 0:
                    self.logger.info(f"Git importing revision {self.position} of {total}...")

                segment_count = self.materializer.materialize(revision)
                author, author_id = self.sanitizer.identity(revision.contributor)
                message = build_commit_message(
                    self.sanitizer.comment(revision.comment),
                    revision_link(self.canonical_url, revision.id),
                )
                self.driver.commit_revision(revision, segment_count, message, author, author_id)

                self.position += 1
                committed += 1
        finally:
            self._update_ledger(total)

        self.logger.info(f"=== IMPORT COMPLETE === {committed} commits, {total} revisions")
        return ImportResult(ImportStatus.IMPORTED, self.position, total, committed)

    def _update_ledger(self, total: int) -> None:
        ledger = ArticleLedger.load(self.settings.ledger_path)
        record = ledger.get(self.canonical_url) or ArticleRecord(
            name=self.article,
            language=self.language,
            url=self.canonical_url,
        )
        record.last_import = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        record.stored_revisions = total
        ledger.upsert(record)
