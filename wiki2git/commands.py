#!/usr/bin/env python3
"""
Synchronous execution of external commands with captured output.

CommitDriver talks to git only through a CommandRunner, so tests can pass a
fake runner and never need a git binary.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs commands with subprocess.run and captures stdout/stderr."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("wiki2git.commands")

    def run(
        self,
        args: list[str],
        cwd: Path,
        env: Optional[dict[str, str]] = None,
    ) -> CommandResult:
        """
        Run a command and wait for it to finish.

        Args:
            args: Program and arguments
            cwd: Working directory
            env: Variables set on top of the current environment

        Returns:
            CommandResult with exit code and decoded output
        """
        full_env = None
        if env:
            full_env = {**os.environ, **env}

        self.logger.debug(f"Running {args[:2]} in {cwd}")
        result = subprocess.run(
            args,
            cwd=str(cwd),
            env=full_env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        return CommandResult(
            args=list(args),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
