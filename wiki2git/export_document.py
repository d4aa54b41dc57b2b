#!/usr/bin/env python3
"""
Parser for Special:Export documents.

Reads only the fields the importer needs:

    <mediawiki>
      <page>
        <title>...</title>
        <revision>
          <id>..</id> <timestamp>..</timestamp> <comment>..</comment>
          <contributor><username>..</username><id>..</id> | <ip>..</ip></contributor>
          <text>..</text>
        </revision>
      </page>
    </mediawiki>
"""

from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup, Tag

from wiki2git.errors import MalformedExport
from wiki2git.models import Contributor, ExportPage, Revision, Segment


def _child_text(parent: Tag, name: str) -> Optional[str]:
    child = parent.find(name, recursive=False)
    if child is None or child.get("deleted"):
        return None
    return child.get_text()


def parse_contributor(tag: Optional[Tag]) -> Contributor:
    if tag is None or tag.get("deleted"):
        return Contributor()
    return Contributor(
        username=_child_text(tag, "username"),
        user_id=_child_text(tag, "id"),
        ip=_child_text(tag, "ip"),
    )


def parse_segments(revision: Tag) -> tuple[Segment, ...]:
    segments = []
    for index, text in enumerate(revision.find_all("text", recursive=False)):
        if text.get("deleted") or not text.contents:
            value = None
        else:
            value = text.get_text()
        segments.append(Segment(index=index, value=value))
    return tuple(segments)


def parse_revision(tag: Tag, source: str) -> Revision:
    revision_id = _child_text(tag, "id")
    timestamp = _child_text(tag, "timestamp")
    if not revision_id or not timestamp:
        raise MalformedExport(source, "revision without id or timestamp")

    return Revision(
        id=revision_id.strip(),
        timestamp=timestamp.strip(),
        contributor=parse_contributor(tag.find("contributor", recursive=False)),
        comment=_child_text(tag, "comment"),
        segments=parse_segments(tag),
    )


def parse_export(path: Path) -> Optional[ExportPage]:
    """
    Parse one cached export batch.

    Args:
        path: Export XML file

    Returns:
        ExportPage, or None when the document has no page element
        (the article does not exist)
    """
    with open(path, "rb") as f:
        soup = BeautifulSoup(f, "xml")

    page = soup.find("page")
    if page is None:
        return None

    title = _child_text(page, "title") or ""
    revisions = [
        parse_revision(tag, str(path))
        for tag in page.find_all("revision", recursive=False)
    ]
    return ExportPage(title=title, revisions=revisions)
