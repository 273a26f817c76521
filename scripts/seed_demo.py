"""
CLI helper to seed the demo company and board into the configured storage.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from feedboard.config import get_settings
from feedboard.demo import setup_demo_board
from feedboard.dependencies import build_key_value_storage
from feedboard.persistence import SnapshotPersistence
from feedboard.store import FeedbackStore


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the demo feedback board")
    parser.add_argument(
        "-p",
        "--key-prefix",
        type=str,
        default=None,
        help="Override the storage key prefix",
    )
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s:%(message)s")

    persistence = SnapshotPersistence(
        build_key_value_storage(settings),
        key_prefix=args.key_prefix or settings.storage_key_prefix,
    )
    store = FeedbackStore(persistence)
    store.load()
    company, board = setup_demo_board(store)
    print(f"/board/{company.slug}/{board.slug}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
