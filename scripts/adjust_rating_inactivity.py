#!/usr/bin/env python3
"""
Raise the rating deviation of players who have not played recently.

Intended to run once a day (cron or scheduler).

Normal usage (default sport, all seasons):
    python scripts/adjust_rating_inactivity.py

One sport and season:
    python scripts/adjust_rating_inactivity.py --sport TENNIS --season 2026-fall

Write a JSON summary for the scheduler:
    python scripts/adjust_rating_inactivity.py --metrics-json logs/inactivity.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from deuce.config import settings
from deuce.db import get_session_factory
from deuce.rating import DMRRatingService

logger = logging.getLogger("adjust_rating_inactivity")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Apply inactivity RD growth to stale ratings.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--sport",
        default=settings.default_sport,
        help=f"Sport to sweep (default: {settings.default_sport}).",
    )
    parser.add_argument(
        "--season",
        default=None,
        help="Only adjust ratings in this season.",
    )
    parser.add_argument(
        "--params-name",
        default=settings.rating_params_name,
        help="Persisted parameter set to use instead of the active one.",
    )
    parser.add_argument(
        "--metrics-json",
        default=None,
        help="Write a JSON summary to this path on completion.",
    )
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(level=settings.log_level, format=settings.log_format)

    started_at = datetime.now(timezone.utc).isoformat()
    t_start = perf_counter()

    try:
        service = DMRRatingService.from_session_factory(
            get_session_factory(),
            sport=args.sport,
            params_name=args.params_name,
        )
    except (ValueError, LookupError) as exc:
        logger.error("Cannot start inactivity sweep: %s", exc)
        return 1

    adjusted = service.adjust_for_inactivity(season_id=args.season)
    elapsed = perf_counter() - t_start

    logger.info(
        "Inactivity sweep done: sport=%s season=%s adjusted=%d params=%s elapsed=%.2fs",
        service.sport, args.season or "all", adjusted, service.params_version, elapsed,
    )

    if args.metrics_json:
        payload = {
            "status": "success",
            "sport": service.sport,
            "season": args.season,
            "params_version": service.params_version,
            "started_at": started_at,
            "elapsed_s": round(elapsed, 3),
            "adjusted": adjusted,
        }
        metrics_path = Path(args.metrics_json)
        metrics_path.parent.mkdir(parents=True, exist_ok=True)
        metrics_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
