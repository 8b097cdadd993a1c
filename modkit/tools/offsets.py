"""Edit log, offset translation and the editable source buffer.

All writes during a pass are expressed in *original* coordinates: the offsets
of the text the current parse result was produced from. The buffer translates
each write through the edit log before touching the text, so edits can be
applied in any order as long as their original ranges do not overlap.

Translation rule (break-on-overtake): walk edits in ``(offset, sequence)``
order and add each ``delta`` until an edit lies beyond the query offset, or
sits exactly on it with a negative delta. A deletion anchored at the query
point therefore does not move that point, while an insertion there does.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from modkit.tools.errors import InvariantViolation


@dataclass(frozen=True, order=True)
class Edit:
    offset: int
    sequence: int
    delta: int


class EditLog:
    """Ordered edits of one pass, keyed by ``(offset, sequence)``."""

    def __init__(self) -> None:
        self._edits: List[Edit] = []
        self._next_sequence = 0

    def __len__(self) -> int:
        return len(self._edits)

    def __iter__(self) -> Iterator[Edit]:
        return iter(self._edits)

    def record(self, offset: int, delta: int) -> Edit:
        edit = Edit(offset, self._next_sequence, delta)
        self._next_sequence += 1
        bisect.insort(self._edits, edit)
        return edit

    def clear(self) -> None:
        self._edits.clear()
        self._next_sequence = 0

    def translate(self, offset: int) -> int:
        out = offset
        for edit in self._edits:
            if edit.offset > offset:
                break
            if edit.offset == offset and edit.delta < 0:
                break
            out += edit.delta
        return out


class EditBuffer:
    """Mutable text plus the edit log needed to address it in original coordinates."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.log = EditLog()
        # original-coordinate ranges written this pass, for overlap checks
        self._ranges: List[Tuple[int, int]] = []

    def translate(self, offset: int) -> int:
        return self.log.translate(offset)

    def slice(self, start: int, end: int) -> str:
        """Current text between two original offsets."""
        return self.text[self.translate(start) : self.translate(end)]

    def replace(self, offset: int, length: int, new_text: str) -> None:
        if offset < 0 or length < 0:
            raise InvariantViolation(f"Invalid edit range ({offset}, {length})")
        self._check_overlap(offset, length)
        cur = self.translate(offset)
        self.text = self.text[:cur] + new_text + self.text[cur + length :]
        self.log.record(offset, len(new_text) - length)
        self._ranges.append((offset, offset + length))

    def insert(self, offset: int, new_text: str) -> None:
        self.replace(offset, 0, new_text)

    def delete(self, offset: int, length: int) -> None:
        self.replace(offset, length, "")

    def reset(self) -> None:
        """Start a new coordinate space: the current text becomes the original."""
        self.log.clear()
        self._ranges.clear()

    def _check_overlap(self, offset: int, length: int) -> None:
        end = offset + length
        for s, e in self._ranges:
            if length == 0 and s == e:
                continue
            if length == 0:
                hit = s < offset < e
            elif s == e:
                hit = offset < s < end
            else:
                hit = offset < e and s < end
            if hit:
                raise InvariantViolation(
                    f"Overlapping edits in one pass: [{offset}, {end}) and [{s}, {e})"
                )
