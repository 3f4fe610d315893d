#!/usr/bin/env python3
"""
Void the rating changes of one or more matches.

Use after a match is disputed, cancelled or entered against the wrong
players. Reversing a match twice is harmless: the second run finds nothing
left to reverse.

Usage:
    python scripts/reverse_match_ratings.py m-42
    python scripts/reverse_match_ratings.py m-42 m-43 --sport PADEL
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from deuce.config import settings
from deuce.db import get_session_factory
from deuce.rating import DMRRatingService

logger = logging.getLogger("reverse_match_ratings")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reverse the rating changes of matches.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("match_ids", nargs="+", help="Match IDs to reverse.")
    parser.add_argument(
        "--sport",
        default=settings.default_sport,
        help=f"Sport the matches were rated in (default: {settings.default_sport}).",
    )
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(level=settings.log_level, format=settings.log_format)

    try:
        service = DMRRatingService(get_session_factory(), sport=args.sport)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    missing = 0
    for match_id in args.match_ids:
        reversed_count = service.reverse_match_ratings(match_id)
        if reversed_count == 0:
            missing += 1
        else:
            logger.info("Match %s: reversed %d rating changes", match_id, reversed_count)

    # Non-zero exit so schedulers notice matches that had nothing to reverse
    return 2 if missing else 0


if __name__ == "__main__":
    raise SystemExit(main())
