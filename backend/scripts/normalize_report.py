"""CLI wrapper for broker report normalization."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from equity_tracker.errors import EquityTrackerError
from equity_tracker.normalizer import normalize_report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Convert a broker activity report to the simplified trade CSV")
    parser.add_argument("report", type=Path)
    parser.add_argument("--output", "-o", type=Path, help="Write here instead of stdout")
    args = parser.parse_args(argv)

    try:
        csv_text = normalize_report(args.report.read_text(encoding="utf-8-sig"))
    except EquityTrackerError as exc:
        print(exc, file=sys.stderr)
        return 1
    if args.output:
        args.output.write_text(csv_text, encoding="utf-8")
        print(f"Wrote {csv_text.count(chr(10)) - 1} transactions to {args.output}")
    else:
        sys.stdout.write(csv_text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
