#!/usr/bin/env python3
"""
One-shot schedule fetch.

Pulls the league schedule once, stores it in the configured database and
optionally writes the current standings to JSON. Suited to cron jobs where
the web app is not running its own sync thread.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from league_tracker import LeagueService
from league_tracker.config import Settings
from league_tracker.errors import StoreError

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch the league schedule and update the local cache.")
    parser.add_argument(
        "--standings-output",
        default=None,
        help="Optional path to write the computed standings JSON.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Number of spaces for JSON indentation (default: 2).",
    )
    parser.add_argument(
        "--seed-fallback",
        action="store_true",
        help="Insert the demo schedule when the store is still empty after the fetch (independent of SEED_FALLBACK).",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")

    service = LeagueService.from_settings(settings)
    try:
        return run(service, args)
    finally:
        service.store.close()


def run(service: LeagueService, args: argparse.Namespace) -> int:
    try:
        result = service.scheduler.refresh_now()
    except StoreError as exc:
        logger.error("Could not store schedule: %s", exc)
        return 1

    if not result.ok:
        logger.warning("Fetch failed (%s); previous snapshot kept", result.error)
    if args.seed_fallback and service.store.is_empty():
        service.seed_fallback()

    if args.standings_output:
        output_path = Path(args.standings_output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        standings = [division.as_dict() for division in service.get_standings()]
        with output_path.open("w", encoding="utf-8") as handle:
            json.dump(standings, handle, indent=args.indent)
            handle.write("\n")
        logger.info("Standings written to %s (%d divisions)", output_path, len(standings))

    return 0 if result.ok else 2


if __name__ == "__main__":
    sys.exit(main())
