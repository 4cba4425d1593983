"""Deterministic stand-in test command for runner integration tests."""

from __future__ import annotations

import argparse
import sys
import time


def main(argv: list[str] | None = None) -> int:
    """Pretend to run the test file given as last argument."""

    parser = argparse.ArgumentParser()
    parser.add_argument("--fail-on", default=None, help="Fail when the path contains this text.")
    parser.add_argument("--sleep", type=float, default=0.0, help="Seconds to wait before exiting.")
    parser.add_argument("--stderr", action="store_true", help="Also write a line to stderr.")
    parser.add_argument("--read-stdin", action="store_true", help="Read stdin to end first.")
    parser.add_argument("path")
    args = parser.parse_args(argv)

    if args.sleep > 0:
        time.sleep(args.sleep)

    if args.read_stdin:
        print(f"stdin bytes: {len(sys.stdin.buffer.read())}", flush=True)
    print(f"checked {args.path}", flush=True)
    if args.stderr:
        print(f"diagnostics for {args.path}", file=sys.stderr, flush=True)
    if args.fail_on and args.fail_on in args.path:
        print(f"FAILED {args.path}", flush=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
