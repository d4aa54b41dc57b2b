#!/usr/bin/env python3
"""
Wiki article history -> git repository

Downloads the complete history of one article via Special:Export and turns
every revision into a git commit. Interrupted or repeated runs continue
where the previous run stopped.

Usage:
    python scripts/wiki2git.py Berlin --lang de
    python scripts/wiki2git.py "Albert Einstein" --lang en --out ./repos
    python scripts/wiki2git.py Berlin --lang de --start 500   # manual recovery
"""

import sys
from pathlib import Path

# Add project root to path for the wiki2git package
SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wiki2git.cli import main


if __name__ == "__main__":
    sys.exit(main())
