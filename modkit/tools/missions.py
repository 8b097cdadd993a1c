"""Deferred, AST-dependent edits.

Some rewrites can only be placed once the source parses cleanly: "assign the
field at the top of this definition's body" needs to know where the body
starts, which the broken parse cannot tell reliably. The correction loop
records such edits as missions anchored at an offset, re-translates the
anchors after every pass, and the queue performs them against the clean
parse.

Mission kinds:
- IVAR_ASSIGN: payload is a statement (``@name = name``) inserted as the first
  line of the enclosing definition's body.
- TYPE_ANNOTATION: payload is a type fragment; an ``# @rbs <param>: <type>``
  comment naming the parameter at the anchor is inserted above the definition.
"""

from __future__ import annotations

import bisect
import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, List

from modkit.tools.errors import InvariantViolation
from modkit.tools.offsets import EditBuffer
from modkit.tools.oracle import ParseResult
from modkit.tools.syntax import DEF_NODE, AstIndex

LOG = logging.getLogger("modkit.missions")


class MissionKind(enum.Enum):
    IVAR_ASSIGN = "ivar_assign"
    TYPE_ANNOTATION = "type_annotation"


@dataclass(order=True)
class Mission:
    offset: int
    sequence: int
    kind: MissionKind = field(compare=False)
    payload: str = field(compare=False)


class MissionQueue:
    """Missions ordered by ``(offset, sequence)``; sequence is the insertion order."""

    def __init__(self) -> None:
        self._missions: List[Mission] = []
        self._next_sequence = 0

    def __len__(self) -> int:
        return len(self._missions)

    def __bool__(self) -> bool:
        return bool(self._missions)

    def __iter__(self) -> Iterator[Mission]:
        return iter(list(self._missions))

    def push(self, offset: int, kind: MissionKind, payload: str) -> Mission:
        mission = Mission(offset, self._next_sequence, kind, payload)
        self._next_sequence += 1
        bisect.insort(self._missions, mission)
        return mission

    def discard(self, mission: Mission) -> None:
        self._missions.remove(mission)

    def retranslate(self, translate: Callable[[int], int]) -> None:
        """Move every anchor into the coordinates produced by this pass's edits."""
        self._missions = sorted(replace(m, offset=translate(m.offset)) for m in self._missions)

    def drain(self) -> List[Mission]:
        out, self._missions = self._missions, []
        return out


def _perform_ivar_assign(mission: Mission, buffer: EditBuffer, index: AstIndex, result: ParseResult) -> None:
    def_id = index.lookup(mission.offset, DEF_NODE)
    if def_id is None:
        raise InvariantViolation(f"Definition not found for mission at offset {mission.offset}")
    def_node = index.node(def_id)

    if def_node.body_location is not None:
        indent = def_node.body_location.column
        at = def_node.body_location.start - indent
    elif def_node.end_keyword_location is not None:
        indent = def_node.end_keyword_location.column + 2
        at = def_node.end_keyword_location.start - indent + 2
    else:
        raise InvariantViolation(f"Definition at offset {def_node.location.start} has neither body nor end keyword")

    buffer.insert(at, f"{' ' * indent}{mission.payload}\n")


def _perform_type_annotation(mission: Mission, buffer: EditBuffer, index: AstIndex, result: ParseResult) -> None:
    def_id = index.lookup(mission.offset, DEF_NODE)
    if def_id is None:
        raise InvariantViolation(f"Definition not found for mission at offset {mission.offset}")
    param_id = index.lookup(mission.offset)
    name = index.node(param_id).name if param_id is not None else None
    if param_id is None or param_id == def_id or not name:
        raise InvariantViolation(f"Parameter not found at offset {mission.offset}")

    def_loc = index.location(def_id)
    line_start = result.line_start_offsets[def_loc.line - 1]
    indent = def_loc.start - line_start
    buffer.insert(line_start, f"{' ' * indent}# @rbs {name}: {mission.payload}\n")


def perform(mission: Mission, buffer: EditBuffer, index: AstIndex, result: ParseResult) -> None:
    if mission.kind is MissionKind.IVAR_ASSIGN:
        _perform_ivar_assign(mission, buffer, index, result)
    elif mission.kind is MissionKind.TYPE_ANNOTATION:
        _perform_type_annotation(mission, buffer, index, result)
    else:
        raise InvariantViolation(f"Unexpected mission kind {mission.kind!r}")


def perform_missions(queue: MissionQueue, buffer: EditBuffer, result: ParseResult) -> None:
    """Drain ``queue`` against the clean parse ``result`` of ``buffer``'s text."""
    index = AstIndex(result.tree)
    buffer.reset()
    for mission in queue.drain():
        LOG.debug("mission %s at %d: %r", mission.kind.value, mission.offset, mission.payload)
        perform(mission, buffer, index, result)
