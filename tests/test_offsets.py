"""Tests for modkit.tools.offsets: edit log translation and the edit buffer."""
from __future__ import annotations

import pytest

from modkit.tools.errors import InvariantViolation
from modkit.tools.offsets import Edit, EditBuffer, EditLog


class TestEditLog:
    def test_empty_log_is_identity(self) -> None:
        log = EditLog()
        assert [log.translate(o) for o in range(5)] == [0, 1, 2, 3, 4]

    def test_sequence_is_insertion_order(self) -> None:
        log = EditLog()
        log.record(10, 3)
        log.record(2, -1)
        log.record(10, 2)
        assert list(log) == [Edit(2, 1, -1), Edit(10, 0, 3), Edit(10, 2, 2)]

    def test_edits_before_query_accumulate(self) -> None:
        log = EditLog()
        log.record(2, 5)
        log.record(4, -1)
        assert log.translate(1) == 1
        assert log.translate(3) == 8
        assert log.translate(6) == 10

    def test_insertion_at_query_applies(self) -> None:
        log = EditLog()
        log.record(4, 3)
        assert log.translate(4) == 7

    def test_deletion_at_query_does_not_apply(self) -> None:
        log = EditLog()
        log.record(4, -2)
        assert log.translate(4) == 4
        assert log.translate(6) == 4

    def test_break_stops_later_edits_at_same_offset(self) -> None:
        log = EditLog()
        log.record(4, -2)
        log.record(4, 5)
        # the deletion overtakes the query first, so the insertion behind it is not counted
        assert log.translate(4) == 4
        assert log.translate(5) == 8

    def test_clear_resets_sequence(self) -> None:
        log = EditLog()
        log.record(1, 1)
        log.clear()
        assert len(log) == 0
        assert log.record(0, 1).sequence == 0


class TestEditBuffer:
    def test_replace_in_original_coordinates(self) -> None:
        buf = EditBuffer("abc def ghi")
        buf.replace(4, 3, "XYZW")
        buf.replace(0, 3, "A")
        buf.replace(8, 3, "")
        assert buf.text == "A XYZW "

    def test_non_overlapping_edits_are_order_independent(self) -> None:
        src = "def initialize(@w)\ndef scale(Integer => k)\n"
        ivar = (src.index("@w"), 2, "w")
        typed = (src.index("Integer"), len("Integer => "), "")
        header = (0, 0, "# top\n")

        first = EditBuffer(src)
        for edit in (ivar, typed, header):
            first.replace(*edit)
        second = EditBuffer(src)
        for edit in (header, typed, ivar):
            second.replace(*edit)

        assert first.text == second.text == "# top\ndef initialize(w)\ndef scale(k)\n"

    def test_translation_matches_buffer_contents(self) -> None:
        src = "0123456789"
        buf = EditBuffer(src)
        buf.replace(2, 2, "abcd")
        buf.insert(7, "++")
        buf.delete(8, 1)
        # 2, 3 and 8 sit inside replaced ranges
        for original in (0, 1, 4, 5, 6, 7, 9):
            assert buf.text[buf.translate(original)] == src[original]

    def test_slice_reads_current_text(self) -> None:
        buf = EditBuffer("def foo(a)")
        buf.replace(4, 3, "bar")
        assert buf.slice(4, 7) == "bar"

    def test_insert_then_replace_at_same_offset(self) -> None:
        buf = EditBuffer("@x")
        buf.insert(0, "# c\n")
        buf.replace(0, 2, "x")
        assert buf.text == "# c\nx"

    @pytest.mark.parametrize(
        "first,second",
        [
            ((2, 4, "-"), (3, 1, "+")),
            ((2, 4, "-"), (4, 0, "+")),
            ((4, 0, "+"), (2, 4, "-")),
            ((2, 4, "-"), (0, 3, "+")),
        ],
    )
    def test_overlapping_edits_are_rejected(self, first, second) -> None:
        buf = EditBuffer("0123456789")
        buf.replace(*first)
        with pytest.raises(InvariantViolation):
            buf.replace(*second)

    def test_adjacent_edits_are_allowed(self) -> None:
        buf = EditBuffer("0123456789")
        buf.replace(2, 2, "ab")
        buf.replace(4, 2, "cd")
        buf.insert(2, "<")
        buf.insert(6, ">")
        assert buf.text == "01<abcd>6789"

    def test_reset_starts_new_coordinates(self) -> None:
        buf = EditBuffer("abc")
        buf.replace(0, 1, "xyz")
        buf.reset()
        buf.replace(0, 3, "")
        assert buf.text == "bc"
        assert len(buf.log) == 1
