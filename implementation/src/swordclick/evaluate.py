"""Headless game evaluation.

Simulates a play session without a UI and prints a progression report
useful for judging pacing and balance.

Usage:
  swordclick-evaluate
  swordclick-evaluate --minutes 90 --strategy optimal --clicks 3
  swordclick-evaluate --minutes 30 --strategy idle
  swordclick-evaluate --minutes 120 --strategy cheapest --prestiges 2
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import List, Optional

from swordclick.catalog import default_catalog, load_catalog
from swordclick.errors import CatalogError
from swordclick.headless import STRATEGIES, SimConfig, simulate
from swordclick.report import build_report
from swordclick.rng import DEFAULT_SEED


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="swordclick-evaluate",
                                 description="Simulate a Sword Art Click session and print a pacing report.")
    ap.add_argument("--minutes", type=float, default=60, help="simulated session length (default 60)")
    ap.add_argument("--strategy", choices=STRATEGIES, default="optimal")
    ap.add_argument("--clicks", type=float, default=3, help="manual actions per second (default 3)")
    ap.add_argument("--prestiges", type=int, default=1, help="maximum prestiges to perform (default 1)")
    ap.add_argument("--seed", type=lambda s: int(s, 0), default=DEFAULT_SEED,
                    help="RNG seed for the human strategy")
    ap.add_argument("--catalog", type=Path, default=None, help="replacement catalog JSON")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        config = SimConfig(
            minutes=args.minutes,
            strategy=args.strategy,
            clicks_per_second=args.clicks,
            max_prestiges=args.prestiges,
            seed=args.seed,
        )
    except ValueError as e:
        ap.error(str(e))

    try:
        catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
    except CatalogError as e:
        print(f"[catalog] {e}", file=sys.stderr)
        return 1

    result = simulate(config, catalog)
    print(build_report(result, catalog))
    return 0


if __name__ == "__main__":
    sys.exit(main())
