"""Show what the parser oracle reports for a source file.

CLI:
  modkit parse lib/point.rbm [--json]

Useful when a file fails to transpile: the output lists every diagnostic the
parser emits for the file as written, recognized or not.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from modkit.tools.classify import pattern_of
from modkit.tools.correct import render_diagnostics
from modkit.tools.errors import ConfigError, OracleError
from modkit.tools.transpile import add_engine_arguments, engine_from_args


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="modkit parse")
    ap.add_argument("path", help="Path to a .rbm source")
    ap.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")
    add_engine_arguments(ap)
    args = ap.parse_args(argv)

    try:
        engine = engine_from_args(args)
        result = engine.parse(engine.load_path(args.path))
    except OSError as e:
        print(f"Failed to read {args.path}: {e}", file=sys.stderr)
        return 3
    except (ConfigError, OracleError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 3

    if args.json:
        out = [
            {
                "kind": d.kind,
                "recognized": pattern_of(d) is not None,
                "start": d.start_offset,
                "length": d.length,
                "line": d.line,
                "column": d.column,
                "message": d.message,
            }
            for d in result.diagnostics
        ]
        print(json.dumps(out, indent=2, ensure_ascii=False))
    else:
        name = Path(args.path).name
        for report in render_diagnostics(result):
            print(f"{name}{report.render()}")

    return 0 if not result.diagnostics else 2


if __name__ == "__main__":
    raise SystemExit(main())
