#!/usr/bin/env python3
"""Import a CSV or JSON backup into the local Bucks2Bar store.

Usage::

    python scripts/import_backup.py path/to/backup.json [--yes] [--dry-run]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bucks2bar.errors import Bucks2BarError
from bucks2bar.ingestion import confirmation_prompt, import_file, parse_and_validate
from bucks2bar.logging_setup import configure_logging
from bucks2bar.store import open_session


def _ask(count: int) -> bool:
    answer = input(f"{confirmation_prompt(count)} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", type=Path, help="CSV or JSON file to import")
    parser.add_argument("--yes", action="store_true", help="skip the confirmation prompt")
    parser.add_argument("--dry-run", action="store_true", help="validate only, do not import")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        content = args.path.read_bytes()
    except OSError as e:
        print(f"Cannot read {args.path}: {e}")
        return 1

    try:
        if args.dry_run:
            candidates = parse_and_validate(content, args.path.name)
            print(f"{candidates.accepted} of {candidates.attempted} record(s) would be imported.")
            for line in candidates.diagnostics:
                print(f"  - {line}")
            return 0
        store = open_session()
        report = import_file(store, content, args.path.name, (lambda _count: True) if args.yes else _ask)
    except Bucks2BarError as e:
        print(f"Import failed: {e}")
        for line in getattr(e, "issues", []):
            print(f"  - {line}")
        return 1

    print(report.message)
    return 0 if report.committed else 1


if __name__ == "__main__":
    raise SystemExit(main())
