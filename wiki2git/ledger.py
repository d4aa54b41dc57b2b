#!/usr/bin/env python3
"""
Ledger of imported articles.

A JSON list of ArticleRecord entries keyed by canonical URL, rewritten as a
whole after every change.
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from wiki2git.models import ArticleRecord

logger = logging.getLogger("wiki2git.ledger")


class ArticleLedger:
    def __init__(self, path: Path, records: Optional[dict[str, ArticleRecord]] = None):
        self.path = Path(path)
        self.records = records or {}

    @classmethod
    def load(cls, path: Path) -> "ArticleLedger":
        """
        Load the ledger; a missing or unreadable file gives an empty one.

        An unreadable file is renamed to <name>.corrupt first, so the next
        save cannot overwrite the records it still holds.
        """
        path = Path(path)
        records: dict[str, ArticleRecord] = {}
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    for entry in json.load(f):
                        record = ArticleRecord(**entry)
                        records[record.url] = record
            except (OSError, ValueError, TypeError) as e:
                backup = path.with_name(path.name + ".corrupt")
                logger.error(f"Could not read ledger {path}, moving it to {backup.name} and starting empty: {e}")
                path.replace(backup)
                records = {}
        return cls(path, records)

    def get(self, url: str) -> Optional[ArticleRecord]:
        return self.records.get(url)

    def upsert(self, record: ArticleRecord) -> None:
        """Insert or replace a record and persist the whole ledger."""
        self.records[record.url] = record
        self.save()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(
                [asdict(r) for r in self.records.values()],
                f,
                indent=2,
                ensure_ascii=False,
            )
