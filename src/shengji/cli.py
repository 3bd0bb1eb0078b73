from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from shengji.errors import RulesError
from shengji.operations import OPERATIONS, dispatch

log = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Shengji rules engine: run one operation on a JSON request")
    parser.add_argument("operation", type=str, choices=sorted(OPERATIONS))
    parser.add_argument(
        "--request",
        type=str,
        default="-",
        help="Path to the JSON request ('-' reads stdin).",
    )
    parser.add_argument("--indent", type=int, default=None, help="Pretty-print the response.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.request == "-":
            raw = sys.stdin.read()
        else:
            raw = Path(args.request).read_text(encoding="utf-8")
        request = json.loads(raw)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read request: {e}", file=sys.stderr)
        return 1

    log.debug("Running %s", args.operation)
    try:
        response = dispatch(args.operation, request)
    except RulesError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(json.dumps(response, indent=args.indent))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
