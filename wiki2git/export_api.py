#!/usr/bin/env python3
"""
Special:Export client for wiki2git.

Downloads the full revision history of one article in batches:
- Each batch is a POST to <wiki base>Special:Export
- Batches after the first continue at the timestamp of the last revision
- Every batch is cached on disk and never downloaded again
- A batch smaller than batch_size is the last one

Usage:
    from wiki2git.export_api import ExportClient

    client = ExportClient(base_url="https://en.wikipedia.org/wiki/")
    revisions = client.fetch_history("Berlin", Path("out/Berlin"))
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from wiki2git.errors import DownloadFailure
from wiki2git.export_document import parse_export
from wiki2git.filename_utils import format_file_size, sanitize_name
from wiki2git.models import Revision

EDIT_TOKEN = "+\\"
CHUNK_SIZE = 64 * 1024


class FetchCancelled(Exception):
    """A stop request arrived before the next batch was downloaded."""

    def __init__(self, article: str, batch: int):
        super().__init__(f"Download of {article} cancelled before batch {batch}")
        self.article = article
        self.batch = batch


class ExportClient:
    """Paginated history download via Special:Export with an on-disk cache."""

    def __init__(
        self,
        base_url: str,
        batch_size: int = 1000,
        timeout: float = 300.0,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the export client.

        Args:
            base_url: Article URL prefix of the wiki (e.g., https://en.wikipedia.org/wiki/)
            batch_size: Revisions per export batch; a shorter batch ends the history
            timeout: Request timeout in seconds
            user_agent: Custom user agent string
            session: requests session to use (creates one if not provided)
            logger: Logger instance (creates one if not provided)
        """
        self.base_url = base_url
        self.export_url = base_url + "Special:Export"
        self.batch_size = batch_size
        self.timeout = timeout

        self.logger = logger or logging.getLogger("wiki2git.export")

        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or "wiki2git/1.0 (article history import)",
        })

    def form_data(self, article: str, offset: Optional[str] = None) -> dict:
        """Build the POST body for one batch."""
        data = {
            "pages": article,
            "wpEditToken": EDIT_TOKEN,
            "title": "Special:Export",
        }
        if offset is not None:
            data["offset"] = offset
        return data

    def cache_path(self, article: str, cache_dir: Path, batch: int) -> Path:
        return Path(cache_dir) / f"{sanitize_name(article)}{batch}.xml"

    def download_batch(self, article: str, batch: int, offset: Optional[str], target: Path) -> None:
        """
        Download one batch and stream it into target.

        Raises:
            DownloadFailure: on a transport error or any non-200 response
        """
        if offset is not None:
            self.logger.info(f"Downloading {article} batch {batch} from offset {offset}...")
        else:
            self.logger.info(f"Downloading {article} batch {batch}...")

        try:
            response = self.session.post(
                self.export_url,
                data=self.form_data(article, offset),
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as e:
            self.logger.error(f"Export request failed: {e}")
            raise DownloadFailure(article, batch, offset) from e

        with response:
            if response.status_code != 200:
                raise DownloadFailure(article, batch, offset, response.status_code)

            written = 0
            try:
                with open(target, "xb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
            except requests.RequestException as e:
                # Never leave a truncated batch behind; it would be read as cached
                target.unlink(missing_ok=True)
                raise DownloadFailure(article, batch, offset) from e
            except BaseException:
                target.unlink(missing_ok=True)
                raise

        self.logger.info(f"Saved {format_file_size(written)} to {target.name}")

    def fetch_history(self, article: str, cache_dir: Path, cancel=None) -> Optional[list[Revision]]:
        """
        Fetch all revisions of an article, oldest first.

        Args:
            article: Article name as used by the wiki
            cache_dir: Directory holding the cached export batches
            cancel: Object with is_set(), checked before each download

        Returns:
            List of revisions, or None when the article does not exist

        Raises:
            FetchCancelled: cancel was set before a batch had to be downloaded
        """
        cache_dir = Path(cache_dir)
        cache_dir.mkdir(parents=True, exist_ok=True)

        revisions: list[Revision] = []
        offset: Optional[str] = None
        batch = 0

        while True:
            path = self.cache_path(article, cache_dir, batch)
            if path.exists():
                self.logger.info(f"Batch {batch} of {article} already cached in {path.name}")
            else:
                if cancel is not None and cancel.is_set():
                    raise FetchCancelled(article, batch)
                self.download_batch(article, batch, offset, path)

            page = parse_export(path)
            if page is None:
                if batch == 0:
                    self.logger.warning(f"Page {article} does not exist.")
                    return None
                # History ended exactly at a batch boundary
                break

            revisions.extend(page.revisions)
            self.logger.debug(f"Retrieved {len(revisions)} revisions so far...")

            if len(page.revisions) < self.batch_size:
                break

            offset = page.revisions[-1].timestamp
            batch += 1

        self.logger.info(f"Total revisions of {article}: {len(revisions)}")
        return revisions
