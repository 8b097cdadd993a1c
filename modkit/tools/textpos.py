"""Line/column bookkeeping for source buffers.

Offsets throughout modkit are Python string indices (codepoints). The parser
oracle is asked for character offsets, so no byte conversion is needed here.
"""

from __future__ import annotations

from typing import List


class TextIndex:
    """Precomputed line starts for one snapshot of a buffer.

    ``line`` numbers are 1-based to match the parser's diagnostics.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.starts: List[int] = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self.starts.append(i + 1)

        self.ends: List[int] = []
        for s in self.starts:
            nl = text.find("\n", s)
            self.ends.append(nl if nl != -1 else len(text))

    def line_text(self, line: int) -> str:
        """Text of ``line`` without its newline; empty when out of range."""
        if line < 1 or line > len(self.starts):
            return ""
        return self.text[self.starts[line - 1] : self.ends[line - 1]]

    @property
    def lines(self) -> List[str]:
        return [self.text[s:e] for s, e in zip(self.starts, self.ends)]


def indent_lines(text: str, indent: int) -> str:
    """Prefix every non-empty line of ``text`` with ``indent`` spaces."""
    if indent <= 0:
        return text
    pref = " " * indent
    return "".join(pref + ln if ln.strip("\n") else ln for ln in text.splitlines(keepends=True))
