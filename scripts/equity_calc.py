from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from holdem.helpers.equity import simulate_equity


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Monte Carlo equity of a hand vs a combo or range")
    ap.add_argument("hero", type=str, help="hero hole cards, e.g. AhKh")
    ap.add_argument("opponent", type=str, help="opponent combo (2c2d) or range (22+,AJs+,KQo)")
    ap.add_argument("--board", type=str, default="", help="0-5 known board cards, e.g. 7c8d9h")
    ap.add_argument("--iters", type=int, default=5000)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--workers", type=int, default=1)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    res = simulate_equity(
        args.hero,
        args.opponent,
        board=args.board,
        iterations=args.iters,
        seed=args.seed,
        workers=args.workers,
    )
    print(json.dumps(res.to_dict(), indent=2))
    return 0 if res.ok else 1


if __name__ == "__main__":
    sys.exit(main())
