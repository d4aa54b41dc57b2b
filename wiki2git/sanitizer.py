#!/usr/bin/env python3
"""
Escaping of commit comments and author identities.

Values end up inside a double-quoted argument of a shell-style git command
line, so every character that could close the quote or start a new command
is escaped according to the target shell.

Usage:
    from wiki2git.sanitizer import CommitSanitizer, ShellFlavor

    sanitizer = CommitSanitizer(ShellFlavor.POSIX)
    message = sanitizer.comment('fix "typo" & more')  # fix \\"typo\\" \\& more
"""

import enum
import os
from typing import Optional

from wiki2git.errors import PlatformNotSupported
from wiki2git.filename_utils import sanitize_name
from wiki2git.models import Contributor

POSIX_SPECIAL = frozenset('"&|()<>^\\$`')
WINDOWS_SPECIAL = frozenset("&|()<>^")

NO_AUTHOR = "_no_author_"
NO_AUTHOR_ID = "_no_authorid_"


class ShellFlavor(enum.Enum):
    POSIX = "posix"
    WINDOWS = "windows"

    @classmethod
    def detect(cls, os_name: Optional[str] = None) -> "ShellFlavor":
        """Map os.name to a flavor; raises PlatformNotSupported otherwise."""
        os_name = os_name if os_name is not None else os.name
        if os_name == "posix":
            return cls.POSIX
        if os_name == "nt":
            return cls.WINDOWS
        raise PlatformNotSupported(os_name)

    @classmethod
    def from_setting(cls, value: str) -> "ShellFlavor":
        """Resolve a configured shell name ("auto", "posix" or "windows")."""
        if value == "auto":
            return cls.detect()
        try:
            return cls(value)
        except ValueError:
            raise PlatformNotSupported(value) from None


def escape_shell(text: str, flavor: ShellFlavor) -> str:
    """Escape text for use inside a double-quoted argument of the given shell."""
    parts = []
    if flavor is ShellFlavor.POSIX:
        for c in text:
            if c in POSIX_SPECIAL:
                parts.append("\\")
            parts.append(c)
    elif flavor is ShellFlavor.WINDOWS:
        for c in text:
            if c in WINDOWS_SPECIAL:
                parts.append("^")
            elif c == '"':
                parts.append('"')
            parts.append(c)
    else:
        raise PlatformNotSupported(str(flavor))
    return "".join(parts)


class CommitSanitizer:
    """Produces shell-safe commit comments and author identities."""

    def __init__(self, flavor: ShellFlavor):
        if not isinstance(flavor, ShellFlavor):
            raise PlatformNotSupported(str(flavor))
        self.flavor = flavor

    def comment(self, text: Optional[str]) -> str:
        if text is None:
            return ""
        return escape_shell(text, self.flavor)

    def identity(self, contributor: Contributor) -> tuple[str, str]:
        """
        Build the (author name, author id) pair for a contributor.

        Registered users are named by their sanitized username and identified
        by their numeric id; anonymous edits use the IP for both.
        """
        author = sanitize_name(contributor.username) or contributor.ip or NO_AUTHOR
        author_id = contributor.user_id or contributor.ip or NO_AUTHOR_ID
        return escape_shell(author, self.flavor), escape_shell(author_id, self.flavor)
