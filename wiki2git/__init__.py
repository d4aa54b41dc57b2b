"""
wiki2git: import the revision history of a wiki article into git.

Provides:
- ArticleImporter: the import pipeline for one article
- ExportClient: paginated Special:Export download with an on-disk cache
- CommitDriver: git staging and commits with identity caching
- reflow: diff-friendly line splitting of article text
- setup_logging: Logging configuration for console and file output
"""

from wiki2git.config import Settings, load_settings
from wiki2git.export_api import ExportClient
from wiki2git.git_driver import CommitDriver
from wiki2git.logging_config import setup_logging
from wiki2git.pipeline import ArticleImporter, ImportResult, ImportStatus
from wiki2git.reflow import ReflowPolicy, reflow

__all__ = [
    "ArticleImporter",
    "ImportResult",
    "ImportStatus",
    "ExportClient",
    "CommitDriver",
    "ReflowPolicy",
    "reflow",
    "Settings",
    "load_settings",
    "setup_logging",
]
