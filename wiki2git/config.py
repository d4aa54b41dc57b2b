#!/usr/bin/env python3
"""
Configuration for wiki2git.

Settings come from a JSON file (config.json at the project root by default)
with a few environment overrides:

- WIKI2GIT_OUTPUT_DIR: output directory
- WIKI2GIT_SHELL: shell flavor for escaping ("auto", "posix", "windows")

Usage:
    from wiki2git.config import load_settings

    settings = load_settings()
    settings.wiki_url("en")  # https://en.wikipedia.org/wiki/
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from wiki2git.errors import UnsupportedLanguage
from wiki2git.reflow import ReflowPolicy

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.json"

DEFAULT_WIKIS = {
    "en": "https://en.wikipedia.org/wiki/",
    "de": "https://de.wikipedia.org/wiki/",
}


@dataclass
class Settings:
    wikis: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_WIKIS))
    output_dir: Path = Path("./wiki2git-out")
    ledger_name: str = "ledger.json"
    batch_size: int = 1000
    timeout_seconds: float = 300.0
    user_agent: Optional[str] = None
    io_attempts: int = 3
    io_retry_delay: float = 1.0
    email_domain: str = "wikipedia.org"
    shell: str = "auto"
    reflow: ReflowPolicy = field(default_factory=ReflowPolicy)

    @property
    def ledger_path(self) -> Path:
        return self.output_dir / self.ledger_name

    def wiki_url(self, language: str) -> str:
        """Base article URL for a language; raises UnsupportedLanguage."""
        try:
            return self.wikis[language]
        except KeyError:
            raise UnsupportedLanguage(language, sorted(self.wikis)) from None


def settings_from_dict(config: dict) -> Settings:
    """Build Settings from a parsed config document; missing keys keep defaults."""
    defaults = Settings()
    output = config.get("output", {})
    export = config.get("export", {})
    io = config.get("io", {})
    git = config.get("git", {})
    reflow = config.get("reflow", {})

    return Settings(
        wikis=config.get("wikis", defaults.wikis),
        output_dir=Path(output.get("dir", defaults.output_dir)),
        ledger_name=output.get("ledger", defaults.ledger_name),
        batch_size=int(export.get("batch_size", defaults.batch_size)),
        timeout_seconds=float(export.get("timeout_seconds", defaults.timeout_seconds)),
        user_agent=export.get("user_agent", defaults.user_agent),
        io_attempts=int(io.get("attempts", defaults.io_attempts)),
        io_retry_delay=float(io.get("retry_delay_seconds", defaults.io_retry_delay)),
        email_domain=git.get("email_domain", defaults.email_domain),
        shell=git.get("shell", defaults.shell),
        reflow=ReflowPolicy(
            line_length=int(reflow.get("line_length", defaults.reflow.line_length)),
            break_after=reflow.get("break_after", defaults.reflow.break_after),
            keywords=tuple(reflow.get("keywords", defaults.reflow.keywords)),
        ),
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from a JSON config file and the environment.

    Args:
        path: Config file (default: config.json at the project root).
              A missing file yields the built-in defaults.

    Returns:
        Settings instance
    """
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)

    settings = settings_from_dict(config)

    if "WIKI2GIT_OUTPUT_DIR" in os.environ:
        settings.output_dir = Path(os.environ["WIKI2GIT_OUTPUT_DIR"])
    if "WIKI2GIT_SHELL" in os.environ:
        settings.shell = os.environ["WIKI2GIT_SHELL"]

    return settings
