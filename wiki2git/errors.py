#!/usr/bin/env python3
"""
Exception hierarchy for wiki2git.

Every fatal condition of an import raises a subclass of Wiki2GitError carrying
enough context to print a useful diagnostic before the process exits.
A missing article is not an error; see ImportStatus.MISSING.
"""

from typing import Any, Optional


class Wiki2GitError(Exception):
    """Base exception for all wiki2git errors."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class DownloadFailure(Wiki2GitError):
    """Export endpoint answered with a non-success status."""

    def __init__(self, article: str, batch: int, offset: Optional[str], status: Optional[int] = None):
        message = f"Failed download for {article} at batch {batch} ({offset})"
        if status is not None:
            message += f": HTTP {status}"
        super().__init__(
            message,
            context={"article": article, "batch": batch, "offset": offset, "status": status},
        )


class TransientIOFailure(Wiki2GitError):
    """A file write or delete kept failing after all retry attempts."""

    def __init__(self, description: str, attempts: int, original_error: Exception):
        message = f"{description} failed after {attempts} attempts: {original_error}"
        super().__init__(
            message,
            context={"attempts": attempts, "original_error": str(original_error)},
        )


class ExternalCommandFailure(Wiki2GitError):
    """An external command (git) exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stdout: str, stderr: str, cwd: str):
        message = f"{' '.join(args[:3])} failed in {cwd} with exit code {returncode}"
        super().__init__(
            message,
            context={
                "args": args,
                "returncode": returncode,
                "stdout": stdout,
                "stderr": stderr,
                "cwd": cwd,
            },
        )
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.cwd = cwd


class UnsupportedLanguage(Wiki2GitError):
    """No wiki base URL is configured for the requested language."""

    def __init__(self, language: str, available: list[str]):
        message = f"Language {language} not supported. Available languages: {', '.join(available)}"
        super().__init__(message, context={"language": language, "available": available})


class PlatformNotSupported(Wiki2GitError):
    """Shell escaping rules cannot be determined for this platform."""

    def __init__(self, platform: str):
        super().__init__(f"OS platform not supported: {platform}", context={"platform": platform})


class MalformedExport(Wiki2GitError):
    """Export document has a page but a revision lacks required fields."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Malformed export {path}: {reason}", context={"path": path, "reason": reason})
