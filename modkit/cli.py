#!/usr/bin/env python3
"""modkit unified CLI.

This CLI intentionally delegates argument parsing to the individual tool modules.
That keeps each tool usable both as:
- `modkit <tool> ...`
- `python -m modkit.tools.<tool> ...`

Commands:
- transpile     Rewrite .rbm sources into plain Ruby
- parse         Show the parser's diagnostics for a source
- version       Show current version

Example:
  modkit transpile lib/point.rbm
"""

from __future__ import annotations

import sys
from typing import List, Optional

from modkit.tools import diagnose, transpile


def _help() -> str:
    return (
        "modkit CLI\n\n"
        "Usage:\n"
        "  modkit <command> [args...]\n\n"
        "Commands:\n"
        "  transpile     Rewrite .rbm sources into plain Ruby\n"
        "  parse         Show parser diagnostics for a source\n"
        "  version       Show current version\n"
    )


def _version() -> str:
    try:
        from importlib.metadata import version

        return version("modkit")
    except Exception:
        return "unknown"


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in {"-h", "--help", "help"}:
        sys.stdout.write(_help())
        return 0

    cmd, rest = argv[0], argv[1:]
    if cmd in {"version", "--version", "-V"}:
        print(_version())
        return 0
    if cmd == "transpile":
        return transpile.main(rest)
    if cmd == "parse":
        return diagnose.main(rest)

    sys.stderr.write(f"Unknown command: {cmd}\n\n")
    sys.stderr.write(_help())
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
