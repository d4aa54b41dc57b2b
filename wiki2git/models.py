#!/usr/bin/env python3
"""
Records shared across the import pipeline.

Only the subset of the MediaWiki export schema that the importer consumes is
modelled here.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Contributor:
    """Author of a revision: a registered user (username + id) or an IP."""

    username: Optional[str] = None
    user_id: Optional[str] = None
    ip: Optional[str] = None


@dataclass(frozen=True)
class Segment:
    """One content slot of a revision. value is None when it was deleted."""

    index: int
    value: Optional[str]

    @property
    def present(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class Revision:
    id: str
    timestamp: str
    contributor: Contributor
    comment: Optional[str] = None
    segments: tuple[Segment, ...] = ()


@dataclass(frozen=True)
class ExportPage:
    """The page element of one export batch."""

    title: str
    revisions: list[Revision] = field(default_factory=list)


@dataclass
class ArticleRecord:
    """Ledger entry for one imported article, keyed by its canonical URL."""

    name: str
    language: str
    url: str
    last_import: Optional[str] = None
    stored_revisions: int = 0
