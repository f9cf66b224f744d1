"""Command line entrypoint for the Beauty Tracker."""

import argparse
import json
from typing import List, Optional

from beauty_app.app import BeautyTrackerApp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cosmetics inventory and usage tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    stats = sub.add_parser("stats", help="Print usage statistics as JSON")
    stats.add_argument("--range", choices=["week", "month"], default="week", dest="stats_range")

    sub.add_parser("reset", help="Delete every cosmetic, look and usage entry")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app = BeautyTrackerApp()

    if args.command == "stats":
        print(json.dumps(app.statistics_payload(args.stats_range), indent=2, ensure_ascii=False))
    elif args.command == "reset":
        app.store.reset_all()
        print("All cosmetics, looks and usage were removed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
