"""Syntax nodes and the position index built over them.

The parser oracle hands back a tree of ``SyntaxNode``. ``AstIndex`` flattens
it into an arena: every node gets an integer id, children are id lists and the
parent link is an id as well, so walking outward never needs a back pointer
on the node itself. Node identity within one parse is the arena id.

Ranges are inclusive of both endpoints: an offset equal to a node's (exclusive)
end offset is still "inside" the node, matching how diagnostics anchored just
after a token are attributed to the node that token closes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple


DEF_NODE = "def_node"
PARAMETERS_NODE = "parameters_node"
BODY_KINDS = ("statements_node", "begin_node")


@dataclass(frozen=True)
class Location:
    start: int
    end: int
    line: int = 1
    column: int = 0

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end


@dataclass
class SyntaxNode:
    kind: str
    location: Location
    children: List["SyntaxNode"] = field(default_factory=list)
    name: Optional[str] = None
    name_location: Optional[Location] = None
    body_location: Optional[Location] = None
    end_keyword_location: Optional[Location] = None


class AstIndex:
    def __init__(self, root: SyntaxNode) -> None:
        self.nodes: List[SyntaxNode] = []
        self._parents: List[Optional[int]] = []
        self._children: List[List[int]] = []
        self.root = self._add(root, None)

    def _add(self, node: SyntaxNode, parent: Optional[int]) -> int:
        # explicit stack; ids come out in preorder
        root_id = len(self.nodes)
        stack: List[Tuple[SyntaxNode, Optional[int]]] = [(node, parent)]
        while stack:
            cur, par = stack.pop()
            nid = len(self.nodes)
            self.nodes.append(cur)
            self._parents.append(par)
            self._children.append([])
            if par is not None:
                self._children[par].append(nid)
            for child in reversed([c for c in cur.children if c is not None]):
                stack.append((child, nid))
        return root_id

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, nid: int) -> SyntaxNode:
        return self.nodes[nid]

    def kind(self, nid: int) -> str:
        return self.nodes[nid].kind

    def location(self, nid: int) -> Location:
        return self.nodes[nid].location

    def parent(self, nid: int) -> Optional[int]:
        return self._parents[nid]

    def children(self, nid: int) -> List[int]:
        return list(self._children[nid])

    def ancestors(self, nid: int) -> Iterator[int]:
        cur = self._parents[nid]
        while cur is not None:
            yield cur
            cur = self._parents[cur]

    def walk(self, nid: Optional[int] = None) -> Iterator[int]:
        stack = [self.root if nid is None else nid]
        while stack:
            cur = stack.pop()
            yield cur
            stack.extend(reversed(self._children[cur]))

    def lookup(self, offset: int, kind: Optional[str] = None) -> Optional[int]:
        """Innermost node containing ``offset``.

        With ``kind``, the nearest node of that kind among the innermost node
        and its ancestors, or None.
        """
        if not self.location(self.root).contains(offset):
            return None
        cur = self.root
        while True:
            nxt = next((c for c in self._children[cur] if self.location(c).contains(offset)), None)
            if nxt is None:
                break
            cur = nxt
        if kind is None or self.kind(cur) == kind:
            return cur
        return next((a for a in self.ancestors(cur) if self.kind(a) == kind), None)

    def child_of_kind(self, nid: int, *kinds: str) -> Optional[int]:
        return next((c for c in self._children[nid] if self.kind(c) in kinds), None)
