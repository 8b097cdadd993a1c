"""Overload dispatch synthesis.

On the first pass, every typed-parameter rewrite also records its fragment in
an overload group keyed by ``(parent node offset, method name)``. When a group
ends the pass with more than one definition, the definitions are renamed
``<prefix>__overload<i>`` and a dispatcher taking ``*args`` is inserted above
the first one:

    # @rbs (Integer) -> untyped
    #    | (String) -> untyped
    def add(*args)
      case args
      in [Integer]
        add__overload0(*args)
      in [String]
        add__overload1(*args)
      end
    end

Clauses keep first-encountered order; the first matching pattern wins. The
grouped definitions' type annotation missions are dropped, the dispatcher's
signature comment carries their types instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Tuple

from modkit.tools.errors import InvariantViolation
from modkit.tools.missions import Mission, MissionQueue
from modkit.tools.offsets import EditBuffer
from modkit.tools.oracle import ParseResult
from modkit.tools.syntax import AstIndex
from modkit.tools.textpos import indent_lines

LOG = logging.getLogger("modkit.overload")

GroupKey = Tuple[int, str]


@dataclass
class OverloadEntry:
    def_id: int
    fragments: List[str] = field(default_factory=list)
    missions: List[Mission] = field(default_factory=list)


class OverloadGroups:
    """Per-pass groups; definition order within a group is encounter order."""

    def __init__(self) -> None:
        self._groups: Dict[GroupKey, Dict[int, OverloadEntry]] = {}

    def __len__(self) -> int:
        return len(self._groups)

    def add(self, key: GroupKey, def_id: int, fragment: str, mission: Mission) -> None:
        entry = self._groups.setdefault(key, {}).setdefault(def_id, OverloadEntry(def_id))
        entry.fragments.append(fragment)
        entry.missions.append(mission)

    def items(self) -> Iterator[Tuple[GroupKey, List[OverloadEntry]]]:
        for key, entries in self._groups.items():
            yield key, list(entries.values())


def overload_name(name: str, ordinal: int, rename_table: Mapping[str, str]) -> str:
    prefix = rename_table.get(name, name)
    return f"{prefix}__overload{ordinal}"


def dispatch_script(name: str, entries: List[OverloadEntry], rename_table: Mapping[str, str]) -> str:
    out: List[str] = []
    for i, entry in enumerate(entries):
        lead = "# @rbs" if i == 0 else "#    |"
        out.append(f"{lead} ({', '.join(entry.fragments)}) -> untyped\n")
    out.append(f"def {name}(*args)\n")
    out.append("  case args\n")
    for i, entry in enumerate(entries):
        out.append(f"  in [{', '.join(entry.fragments)}]\n")
        out.append(f"    {overload_name(name, i, rename_table)}(*args)\n")
    out.append("  end\n")
    out.append("end\n\n")
    return "".join(out)


def synthesize(
    groups: OverloadGroups,
    buffer: EditBuffer,
    index: AstIndex,
    result: ParseResult,
    queue: MissionQueue,
    rename_table: Mapping[str, str],
) -> int:
    """Merge every multi-definition group into one dispatcher. Returns the number of dispatchers."""
    count = 0
    for (_, name), entries in groups.items():
        if len(entries) <= 1:
            continue

        for i, entry in enumerate(entries):
            name_loc = index.node(entry.def_id).name_location
            if name_loc is None:
                raise InvariantViolation(f"Definition {name!r} has no name location")
            buffer.replace(name_loc.start, name_loc.length, overload_name(name, i, rename_table))
            for mission in entry.missions:
                queue.discard(mission)

        first_loc = index.location(entries[0].def_id)
        line_start = result.line_start_offsets[first_loc.line - 1]
        indent = first_loc.start - line_start
        buffer.insert(line_start, indent_lines(dispatch_script(name, entries, rename_table), indent))
        LOG.debug("synthesized dispatcher %r over %d definitions", name, len(entries))
        count += 1
    return count
