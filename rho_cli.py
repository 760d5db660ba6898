"""
Command line front end: rho-race N [WORKERS]

Prints one factor of N (or "none") and exits 0; bad input exits 1.
"""
import argparse
import logging
import re
import sys

from rho_race import CHECK_INTERVAL, DEFAULT_WORKERS, RhoRaceError, race

log = logging.getLogger(__name__)

NO_FACTOR = "none"

_DECIMAL = re.compile(r"[+-]?[0-9]+")


class _Parser(argparse.ArgumentParser):
    """argparse exits 2 on usage errors; every input error here exits 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _parse_int(text: str) -> int | None:
    text = text.strip()
    if not _DECIMAL.fullmatch(text):
        return None
    return int(text, 10)


def build_parser() -> argparse.ArgumentParser:
    ap = _Parser(prog="rho-race",
                 description="Find one non-trivial factor with parallel Pollard's Rho workers.")
    ap.add_argument("n", metavar="N", help="base-10 integer to factor")
    ap.add_argument("workers", metavar="WORKERS", nargs="?", default=str(DEFAULT_WORKERS),
                    help=f"number of racing workers (default {DEFAULT_WORKERS})")
    ap.add_argument("--check-interval", type=int, default=CHECK_INTERVAL,
                    help="iterations between checks for another worker's result")
    ap.add_argument("--max-iterations", type=int, default=None,
                    help="give up a walk after this many iterations")
    ap.add_argument("--seed", type=int, default=None, help="rng seed for reproducible starts")
    ap.add_argument("--check-prime", action="store_true",
                    help="report none at once when N is prime")
    ap.add_argument("-v", "--verbose", action="store_true", help="log race progress to stderr")
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s")

    n = _parse_int(args.n)
    if n is None:
        print(f"error: {args.n!r} is not a valid base 10 number", file=sys.stderr)
        return 1
    workers = _parse_int(args.workers)
    if workers is None or workers < 1:
        print("error: must have at least one worker", file=sys.stderr)
        return 1
    if args.check_interval < 1:
        print("error: --check-interval must be positive", file=sys.stderr)
        return 1
    if args.max_iterations is not None and args.max_iterations < 0:
        print("error: --max-iterations must not be negative", file=sys.stderr)
        return 1

    try:
        result = race(n, workers, seed=args.seed, check_interval=args.check_interval,
                      max_iterations=args.max_iterations, check_prime=args.check_prime)
    except RhoRaceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(NO_FACTOR if result.factor is None else result.factor)
    return 0


if __name__ == "__main__":
    sys.exit(main())
