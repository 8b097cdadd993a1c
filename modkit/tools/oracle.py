"""Parser oracle: error-tolerant parsing of Ruby source.

modkit has no grammar of its own. It asks an external parser for a best-effort
syntax tree plus typed diagnostics and drives every rewrite from those.

Oracles:
- prism: runs `ruby` with the `prism` gem; the source goes in on stdin and a
  JSON parse result comes back on stdout. The gem must report diagnostic
  types (`Prism::ParseError#type`). Ruby 3.4 bundles such a prism; Ruby 3.3
  bundles prism 0.19, which does not, so run `gem install prism` there. An
  older prism makes the script exit non-zero with a message naming its version.
- cmd: any command that speaks the same JSON wire format.

Wire format (validated against ``modkit/schema/parse_result.schema.v1.json``):

    {
      "tree": {"kind": "program_node", "location": {...}, "children": [...]},
      "diagnostics": [{"kind": "argument_formal_ivar", "location": {...}, "message": "..."}]
    }

A location is ``{"start", "end", "line", "column"}`` in character offsets,
``end`` exclusive, ``line`` 1-based, ``column`` 0-based.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from modkit.tools.errors import OracleError
from modkit.tools.schemas import PARSE_RESULT_SCHEMA, format_errors, load_schema, validate
from modkit.tools.syntax import Location, SyntaxNode
from modkit.tools.textpos import TextIndex

LOG = logging.getLogger("modkit.oracle")


PRISM_DUMP_SCRIPT = r"""
require "prism"
require "json"

unless Prism::ParseError.method_defined?(:type) && Prism::Location.method_defined?(:start_character_offset)
  abort "modkit: prism #{Prism::VERSION} does not report diagnostic types; run `gem install prism`"
end

def loc(l)
  return nil unless l
  {
    "start" => l.start_character_offset,
    "end" => l.end_character_offset,
    "line" => l.start_line,
    "column" => l.start_character_column,
  }
end

def dump(node)
  out = { "kind" => node.type.to_s, "location" => loc(node.location) }
  if node.respond_to?(:name) && node.name.is_a?(Symbol)
    out["name"] = node.name.to_s
  end
  if node.respond_to?(:name_loc) && node.name_loc.is_a?(Prism::Location)
    out["name_location"] = loc(node.name_loc)
  end
  if node.is_a?(Prism::DefNode)
    out["body_location"] = loc(node.body&.location)
    out["end_keyword_location"] = loc(node.end_keyword_loc)
  end
  out["children"] = node.compact_child_nodes.map { |child| dump(child) }
  out
end

$stdin.set_encoding(Encoding::UTF_8)
src = $stdin.read
result = Prism.parse(src)
diagnostics = result.errors.map do |e|
  { "kind" => e.type.to_s, "location" => loc(e.location), "message" => e.message }
end
$stdout.write(JSON.generate({ "tree" => dump(result.value), "diagnostics" => diagnostics }))
"""


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    location: Location
    message: str

    @property
    def start_offset(self) -> int:
        return self.location.start

    @property
    def end_offset(self) -> int:
        return self.location.end

    @property
    def length(self) -> int:
        return self.location.length

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column


@dataclass
class ParseResult:
    text: str
    tree: SyntaxNode
    diagnostics: Tuple[Diagnostic, ...] = field(default_factory=tuple)

    @cached_property
    def index(self) -> TextIndex:
        return TextIndex(self.text)

    @property
    def source_lines(self) -> List[str]:
        return self.index.lines

    @property
    def line_start_offsets(self) -> List[int]:
        return self.index.starts

    def slice(self, location: Location) -> str:
        return self.text[location.start : location.end]


class ParserOracle(Protocol):
    def parse(self, text: str) -> ParseResult:
        ...


def _location(raw: Dict[str, Any]) -> Location:
    return Location(start=raw["start"], end=raw["end"], line=raw["line"], column=raw["column"])


def _optional_location(raw: Optional[Dict[str, Any]]) -> Optional[Location]:
    return _location(raw) if raw is not None else None


def _node(raw: Dict[str, Any]) -> SyntaxNode:
    return SyntaxNode(
        kind=raw["kind"],
        location=_location(raw["location"]),
        children=[_node(c) for c in raw.get("children", []) or []],
        name=raw.get("name"),
        name_location=_optional_location(raw.get("name_location")),
        body_location=_optional_location(raw.get("body_location")),
        end_keyword_location=_optional_location(raw.get("end_keyword_location")),
    )


def from_wire(text: str, data: Any) -> ParseResult:
    errors = validate(data, load_schema(PARSE_RESULT_SCHEMA))
    if errors:
        raise OracleError(f"Parser output does not match schema: {format_errors(errors)}")
    diagnostics = tuple(
        Diagnostic(kind=d["kind"], location=_location(d["location"]), message=d.get("message", ""))
        for d in data["diagnostics"]
    )
    return ParseResult(text=text, tree=_node(data["tree"]), diagnostics=diagnostics)


@dataclass
class CmdOracle:
    """Run an external parser command.

    The command receives the source on stdin and must print the JSON wire
    format on stdout.
    """

    command: Sequence[str]
    timeout_s: int = 60

    def parse(self, text: str) -> ParseResult:
        try:
            proc = subprocess.run(
                list(self.command),
                input=text.encode("utf-8"),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout_s,
            )
        except FileNotFoundError as e:
            raise OracleError(f"Parser command not found: {self.command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise OracleError(f"Parser command timed out after {self.timeout_s}s") from e
        if proc.returncode != 0:
            raise OracleError(
                f"Parser command failed: rc={proc.returncode} stderr={proc.stderr.decode('utf-8', errors='replace')}"
            )
        out = proc.stdout.decode("utf-8", errors="replace")
        try:
            data = json.loads(out)
        except json.JSONDecodeError as e:
            raise OracleError(f"Parser command printed invalid JSON: {e}") from e
        result = from_wire(text, data)
        LOG.debug("parsed %d chars: %d diagnostics", len(text), len(result.diagnostics))
        return result


@dataclass
class PrismOracle(CmdOracle):
    command: Sequence[str] = ("ruby", "-e", PRISM_DUMP_SCRIPT)


def make_oracle(kind: str, *, cmd: Optional[str] = None, timeout_s: int = 60) -> ParserOracle:
    kind = kind.lower().strip()
    if kind == "prism":
        return PrismOracle(timeout_s=timeout_s)
    if kind == "cmd":
        if not cmd:
            raise ValueError("cmd oracle requires --cmd")
        return CmdOracle(cmd.split(), timeout_s=timeout_s)
    raise ValueError(f"Unknown oracle kind: {kind}")
