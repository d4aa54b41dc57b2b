"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from unittest.mock import MagicMock
from xml.sax.saxutils import escape

import pytest

# Add project root to path for all tests
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wiki2git.commands import CommandResult

EXPORT_HEADER = '<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.10/" version="0.10" xml:lang="en">'


def build_export_xml(title, revisions):
    """
    Build a Special:Export document.

    Each revision is a dict with id, timestamp and optional comment,
    username, user_id, ip and texts (list of str or None).
    """
    if title is None:
        return EXPORT_HEADER + "<siteinfo><sitename>Wikipedia</sitename></siteinfo></mediawiki>"

    parts = [EXPORT_HEADER, "<page>", f"<title>{escape(title)}</title>", "<ns>0</ns>", "<id>1</id>"]
    for rev in revisions:
        parts.append("<revision>")
        parts.append(f"<id>{rev['id']}</id>")
        parts.append(f"<timestamp>{rev['timestamp']}</timestamp>")
        parts.append("<contributor>")
        if rev.get("ip"):
            parts.append(f"<ip>{escape(rev['ip'])}</ip>")
        else:
            parts.append(f"<username>{escape(rev.get('username', 'Alice'))}</username>")
            parts.append(f"<id>{rev.get('user_id', '1')}</id>")
        parts.append("</contributor>")
        if rev.get("comment") is not None:
            parts.append(f"<comment>{escape(rev['comment'])}</comment>")
        for text in rev.get("texts", [f"text of {rev['id']}"]):
            if text is None:
                parts.append('<text bytes="0" />')
            else:
                parts.append(f'<text bytes="{len(text)}" xml:space="preserve">{escape(text)}</text>')
        parts.append("</revision>")
    parts.append("</page></mediawiki>")
    return "".join(parts)


def make_revisions(count, start_id=1000):
    """Revision dicts with increasing ids and timestamps."""
    return [
        {
            "id": str(start_id + i),
            "timestamp": f"2001-01-{1 + i // 1440:02d}T{(i // 60) % 24:02d}:{i % 60:02d}:00Z",
            "comment": f"edit {i}",
            "username": f"User{i % 3}",
            "user_id": str(i % 3 + 1),
        }
        for i in range(count)
    ]


class FakeGit:
    """
    In-memory stand-in for the git binary.

    Understands the commands CommitDriver issues and keeps the list of
    commits, so resume detection can be exercised without git.
    """

    def __init__(self):
        self.calls = []
        self.commits = []
        self.config = {}
        self.fail_on = None

    def run(self, args, cwd, env=None):
        self.calls.append(list(args))
        sub = args[1]
        if self.fail_on and sub == self.fail_on:
            return CommandResult(list(args), 1, "out", "fatal: simulated failure")

        if sub == "init":
            (Path(cwd) / ".git").mkdir(parents=True, exist_ok=True)
        elif sub == "rev-parse":
            return CommandResult(list(args), 0 if self.commits else 1)
        elif sub == "config":
            self.config[args[3]] = args[4]
        elif sub == "log":
            marker = next(a for a in args if a.startswith("--grep="))[len("--grep="):]
            for commit in reversed(self.commits):
                if marker in commit["message"]:
                    return CommandResult(list(args), 0, commit["message"] + "\n")
            return CommandResult(list(args), 0, "")
        elif sub == "commit":
            message = args[args.index("-m") + 1]
            author = next(a for a in args if a.startswith("--author="))[len("--author="):]
            date = next(a for a in args if a.startswith("--date="))[len("--date="):]
            self.commits.append({
                "message": message,
                "author": author,
                "date": date,
                "committer_date": (env or {}).get("GIT_COMMITTER_DATE"),
                "all": "--all" in args,
                "files": sorted(p.name for p in Path(cwd).iterdir() if p.is_file()),
            })
        return CommandResult(list(args), 0)

    def subcommands(self):
        return [c[1] for c in self.calls]


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def temp_log_dir(tmp_path):
    """Provide a temporary directory for log files."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir


@pytest.fixture
def export_xml():
    return build_export_xml


def make_response(body, status=200):
    """Mock requests response usable as a context manager with iter_content."""
    response = MagicMock()
    response.status_code = status
    data = body.encode("utf-8") if isinstance(body, str) else body
    response.iter_content.side_effect = lambda chunk_size=1: [
        data[i:i + chunk_size] for i in range(0, len(data), chunk_size)
    ]
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


@pytest.fixture
def fake_session():
    """Mock requests session whose post() results are set by the test."""
    session = MagicMock()
    session.headers = {}
    return session
