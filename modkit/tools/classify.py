"""Diagnostic classifier: the closed catalogue of recognized extensions.

Each diagnostic of the current parse is looked at once, in emission order.
Recognized patterns:

- argument_formal_ivar: ``def initialize(@name)``. The parameter becomes
  ``name`` and an IVAR_ASSIGN mission adds ``@name = name`` to the body.
- unexpected_token_ignore on ``=>``: ``def foo(Integer => a)``. The type text
  in front of the last parameter is cut out of the signature and kept as a
  TYPE_ANNOTATION mission (and, on the first pass, as an overload group entry).

Everything else is skipped; it either disappears once the other edits land
or it is reported when the loop stalls.

All offsets read from the parse result are original coordinates for this
pass. Writes go through the EditBuffer, which translates them.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Optional, Set

from modkit.tools.errors import InvariantViolation
from modkit.tools.missions import MissionKind, MissionQueue
from modkit.tools.offsets import EditBuffer
from modkit.tools.oracle import Diagnostic, ParseResult
from modkit.tools.overload import OverloadGroups
from modkit.tools.syntax import BODY_KINDS, DEF_NODE, PARAMETERS_NODE, AstIndex

IVAR_SIGIL = "@"
TYPE_MARKER = "=>"

_TRAILING_MARKER = re.compile(r"\s*=>\s*\Z")


class Pattern(enum.Enum):
    IVAR_PARAMETER = "argument_formal_ivar"
    TYPED_PARAMETER = "unexpected_token_ignore"


def pattern_of(diagnostic: Diagnostic) -> Optional[Pattern]:
    try:
        return Pattern(diagnostic.kind)
    except ValueError:
        return None


@dataclass
class PassContext:
    """Everything one pass of the correction loop shares between diagnostics."""

    buffer: EditBuffer
    index: AstIndex
    result: ParseResult
    queue: MissionQueue
    # only set on the first pass
    overloads: Optional[OverloadGroups] = None
    typed_parameter_offsets: Set[int] = field(default_factory=set)


def _ivar_parameter(diagnostic: Diagnostic, ctx: PassContext) -> bool:
    token = ctx.result.slice(diagnostic.location)
    name = token[len(IVAR_SIGIL) :]
    if not token.startswith(IVAR_SIGIL) or not name:
        raise InvariantViolation(f"Expected ivar but {token!r}")

    ctx.buffer.replace(diagnostic.start_offset, diagnostic.length, name)
    ctx.queue.push(diagnostic.start_offset, MissionKind.IVAR_ASSIGN, f"{IVAR_SIGIL}{name} = {name}")
    return True


def _typed_parameter(diagnostic: Diagnostic, ctx: PassContext) -> bool:
    if ctx.result.slice(diagnostic.location) != TYPE_MARKER:
        return False

    index = ctx.index
    def_id = index.lookup(diagnostic.start_offset, DEF_NODE)
    if def_id is None:
        return False

    parent_id = index.parent(def_id)
    parameters_id = index.child_of_kind(def_id, PARAMETERS_NODE)
    body_id = index.child_of_kind(def_id, *BODY_KINDS)
    if parent_id is None or parameters_id is None or body_id is None:
        return False
    parameter_ids = index.children(parameters_id)
    if not parameter_ids:
        return False

    last_parameter_offset = max(index.location(p).start for p in parameter_ids)
    if last_parameter_offset in ctx.typed_parameter_offsets:
        return False
    ctx.typed_parameter_offsets.add(last_parameter_offset)

    right_id = next(
        (c for c in index.children(body_id) if index.location(c).start >= diagnostic.end_offset),
        None,
    )
    if right_id is None:
        return False
    right_offset = index.location(right_id).start

    fragment = _TRAILING_MARKER.sub("", ctx.buffer.slice(last_parameter_offset, right_offset))
    ctx.buffer.delete(last_parameter_offset, right_offset - last_parameter_offset)
    mission = ctx.queue.push(last_parameter_offset, MissionKind.TYPE_ANNOTATION, fragment)

    if ctx.overloads is not None:
        name = index.node(def_id).name
        if not name:
            raise InvariantViolation(f"Definition at offset {index.location(def_id).start} has no name")
        ctx.overloads.add((index.location(parent_id).start, name), def_id, fragment, mission)
    return True


def classify(diagnostic: Diagnostic, ctx: PassContext) -> bool:
    """Apply the rewrite for ``diagnostic``; False when it is not a recognized pattern."""
    pattern = pattern_of(diagnostic)
    if pattern is Pattern.IVAR_PARAMETER:
        return _ivar_parameter(diagnostic, ctx)
    if pattern is Pattern.TYPED_PARAMETER:
        return _typed_parameter(diagnostic, ctx)
    return False
