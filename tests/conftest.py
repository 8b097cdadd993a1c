"""Shared fixtures: a scripted parser oracle and helpers to build syntax trees.

The scripted oracle maps exact buffer texts to hand-built parse results, so
every pass of the correction loop is spelled out in the test that drives it.
Locations are computed from snippets of the text so tests stay readable.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from modkit.tools.oracle import Diagnostic, ParseResult
from modkit.tools.syntax import Location, SyntaxNode


def span(text: str, start: int, end: int) -> Location:
    line = text.count("\n", 0, start) + 1
    column = start - (text.rfind("\n", 0, start) + 1)
    return Location(start=start, end=end, line=line, column=column)


def loc(text: str, snippet: str, occurrence: int = 0, length: Optional[int] = None) -> Location:
    """Location of the ``occurrence``-th ``snippet`` in ``text``."""
    start = -1
    for _ in range(occurrence + 1):
        start = text.index(snippet, start + 1)
    return span(text, start, start + (len(snippet) if length is None else length))


def node(kind: str, location: Location, *children: SyntaxNode, **fields) -> SyntaxNode:
    return SyntaxNode(kind=kind, location=location, children=list(children), **fields)


def program(text: str, *children: SyntaxNode) -> SyntaxNode:
    whole = span(text, 0, len(text))
    return node("program_node", whole, node("statements_node", whole, *children))


def diag(kind: str, location: Location, message: str = "unexpected token") -> Diagnostic:
    return Diagnostic(kind=kind, location=location, message=message)


class ScriptedOracle:
    def __init__(self) -> None:
        self.results: Dict[str, ParseResult] = {}
        self.calls: List[str] = []

    def add(self, text: str, tree: SyntaxNode, *diagnostics: Diagnostic) -> "ScriptedOracle":
        self.results[text] = ParseResult(text=text, tree=tree, diagnostics=tuple(diagnostics))
        return self

    def parse(self, text: str) -> ParseResult:
        self.calls.append(text)
        if text not in self.results:
            raise AssertionError(f"unscripted parse of:\n{text}")
        return self.results[text]


@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()
