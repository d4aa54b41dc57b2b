#!/usr/bin/env python3
"""
Name sanitizing for wiki2git.

Article names become directory names, cache file stems and segment file
stems; user names become git identities. Both go through sanitize_name().
"""

import unicodedata
from typing import Optional

# Characters invalid in file names on Windows or POSIX
INVALID_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(c) for c in range(32))

REPLACEMENTS = {
    "*": "_STAR_",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "'": "~",
    '"': "~",
    "‘": "~",
    "’": "~",
    "‚": "~",
    "“": "~",
    "”": "~",
    "„": "~",
}


def sanitize_name(value: Optional[str]) -> Optional[str]:
    """
    Make a string safe to use as a file name or git identity.

    Args:
        value: Article or user name (e.g., "Café/Bar*")

    Returns:
        Sanitized name (e.g., "Cafe_Bar_STAR_"), or None for empty input
    """
    if not value:
        return None

    parts = []
    for c in unicodedata.normalize("NFD", value):
        if unicodedata.category(c) == "Mn":
            # Drop combining accents left over from decomposition
            continue
        if c in REPLACEMENTS:
            parts.append(REPLACEMENTS[c])
        elif c in INVALID_CHARS:
            parts.append("_")
        else:
            parts.append(c)
    return "".join(parts)


def format_file_size(size_in_bytes: int) -> str:
    """
    Format a byte count for log output.

    Args:
        size_in_bytes: Non-negative size

    Returns:
        Size with unit (e.g., "1.5 KB")
    """
    if size_in_bytes < 0:
        raise ValueError(f"Size must be a non-negative number: {size_in_bytes}")

    size = float(size_in_bytes)
    units = ["B", "KB", "MB", "GB", "TB"]
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1

    text = f"{size:.1f}".rstrip("0").rstrip(".")
    return f"{text} {units[index]}"
