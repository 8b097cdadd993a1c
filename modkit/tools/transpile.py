"""Transpile `.rbm` sources into plain Ruby.

CLI:
  modkit transpile lib/point.rbm [more.rbm ...] [--out FILE] [--stdout] [--check]

Each input is rewritten and written next to itself with a `.rb` suffix,
unless --out (single input only) or --stdout is given.

Exit codes:
  0 OK
  1 --check: a target file is missing or out of date
  2 unrecoverable syntax error / internal invariant violation
  3 IO, parser or config error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from modkit.engine import ModKitEngine, target_path
from modkit.tools.config import RewriteConfig, load_config
from modkit.tools.errors import ConfigError, InvariantViolation, OracleError, UnrecoveredSyntaxError

LOG = logging.getLogger("modkit.cli")


def add_engine_arguments(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--config", help="Path to a modkit JSON config file")
    ap.add_argument("--oracle", choices=["prism", "cmd"], help="Parser oracle (default: prism)")
    ap.add_argument("--cmd", help="Command for the cmd oracle")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every correction pass")


def engine_from_args(args: argparse.Namespace) -> ModKitEngine:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config = load_config(args.config) if args.config else RewriteConfig()
    if args.oracle:
        config.oracle = args.oracle
    if args.cmd:
        config.oracle_cmd = args.cmd
    return ModKitEngine(config=config)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="modkit transpile")
    ap.add_argument("paths", nargs="+", help="Paths to .rbm sources")
    ap.add_argument("--out", help="Write the result to this file (single input only)")
    ap.add_argument("--stdout", action="store_true", help="Print results instead of writing files")
    ap.add_argument("--check", action="store_true", help="Exit 1 if a target is missing or differs")
    add_engine_arguments(ap)
    args = ap.parse_args(argv)

    if args.out and len(args.paths) != 1:
        print("--out requires exactly one input path", file=sys.stderr)
        return 3

    try:
        engine = engine_from_args(args)
    except (ConfigError, ValueError) as e:
        print(f"config error: {e}", file=sys.stderr)
        return 3

    stale = False
    for raw in args.paths:
        src = Path(raw)
        try:
            text = engine.load_path(src)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Failed to read {src}: {e}", file=sys.stderr)
            return 3

        try:
            out_text = engine.rewrite(text)
        except UnrecoveredSyntaxError as e:
            for report in e.reports:
                print(f"{src}{report.render()}", file=sys.stderr)
            return 2
        except InvariantViolation as e:
            print(f"{src}: internal error: {e}", file=sys.stderr)
            return 2
        except OracleError as e:
            print(f"{src}: parser error: {e}", file=sys.stderr)
            return 3

        if args.stdout:
            sys.stdout.write(out_text)
            continue

        dst = Path(args.out) if args.out else target_path(src)
        if args.check:
            try:
                current = dst.read_text(encoding="utf-8")
            except OSError:
                current = None
            if current != out_text:
                print(f"{dst}: out of date", file=sys.stderr)
                stale = True
            continue

        dst.write_text(out_text, encoding="utf-8")
        LOG.info("transpiled %s -> %s", src, dst)

    return 1 if stale else 0


if __name__ == "__main__":
    raise SystemExit(main())
