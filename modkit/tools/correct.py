"""Diagnostic-driven correction loop.

Pipeline:
1) Parse the buffer
2) If the parse is clean, stop
3) Otherwise classify every diagnostic (applying its rewrite), synthesize
   overload dispatchers (first pass only), move pending missions into the new
   coordinates, and go back to 1

The loop fails with UnrecoveredSyntaxError when a pass does not strictly
reduce the diagnostic count of the pass before it. The first pass only sets
the baseline.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from modkit.tools.classify import PassContext, classify
from modkit.tools.config import RewriteConfig
from modkit.tools.errors import DiagnosticReport, UnrecoveredSyntaxError
from modkit.tools.missions import MissionQueue, perform_missions
from modkit.tools.offsets import EditBuffer
from modkit.tools.oracle import ParseResult, ParserOracle
from modkit.tools.overload import OverloadGroups, synthesize
from modkit.tools.syntax import AstIndex

LOG = logging.getLogger("modkit.correct")


def render_diagnostics(result: ParseResult) -> List[DiagnosticReport]:
    reports: List[DiagnosticReport] = []
    for d in result.diagnostics:
        underline = " " * d.column + "^" + "~" * max(d.length - 1, 0)
        reports.append(
            DiagnosticReport(
                line=d.line,
                line_text=result.index.line_text(d.line),
                underline=underline,
                message=d.message,
                kind=d.kind,
            )
        )
    return reports


def correct(
    text: str,
    oracle: ParserOracle,
    queue: MissionQueue,
    config: Optional[RewriteConfig] = None,
) -> Tuple[EditBuffer, ParseResult]:
    """Run passes until ``text`` parses cleanly.

    Returns the buffer holding the clean text and the clean parse result.
    Missions recorded along the way are left in ``queue``, anchored in the
    clean text's coordinates.
    """
    config = config or RewriteConfig()
    buffer = EditBuffer(text)
    previous_error_count = 0
    passes = 0

    while True:
        result = oracle.parse(buffer.text)
        buffer.reset()
        passes += 1
        error_count = len(result.diagnostics)
        LOG.debug("pass %d: %d diagnostics, %d missions pending", passes, error_count, len(queue))
        if error_count == 0:
            return buffer, result

        if config.max_passes is not None and passes > config.max_passes:
            LOG.info("giving up after %d passes", config.max_passes)
            raise UnrecoveredSyntaxError(render_diagnostics(result))

        ctx = PassContext(
            buffer=buffer,
            index=AstIndex(result.tree),
            result=result,
            queue=queue,
            overloads=OverloadGroups() if passes == 1 else None,
        )
        handled = sum(1 for d in result.diagnostics if classify(d, ctx))
        if ctx.overloads is not None:
            synthesize(ctx.overloads, buffer, ctx.index, result, queue, config.overload_names)
        queue.retranslate(buffer.translate)
        LOG.debug("pass %d: rewrote %d of %d diagnostics", passes, handled, error_count)

        if 0 < previous_error_count <= error_count:
            raise UnrecoveredSyntaxError(render_diagnostics(result))
        previous_error_count = error_count


def rewrite(text: str, oracle: ParserOracle, config: Optional[RewriteConfig] = None) -> str:
    queue = MissionQueue()
    buffer, clean = correct(text, oracle, queue, config)
    if queue:
        perform_missions(queue, buffer, clean)
    return buffer.text
