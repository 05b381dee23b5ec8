"""Tests for zhuyin_typer.core.session – keystroke-level typing session."""

from __future__ import annotations

import time

import pytest

from zhuyin_typer.core.parser import ExerciseItem, TypingUnit, parse_item
from zhuyin_typer.core.session import KeyResult, TypingSession, next_typeable_index


def _item(segment: str, n: int = 0) -> ExerciseItem:
    return parse_item(segment, f"item-0-{n}", "康軒", "一年級", "第 1 課")


def _type(session: TypingSession, keys) -> list:
    return [session.press(key) for key in keys]


# ---------------------------------------------------------------------------
# KeyResult dataclass
# ---------------------------------------------------------------------------

class TestKeyResult:
    def test_defaults(self):
        r = KeyResult(correct=True, expected="a", pressed="a")
        assert r.unit_completed is False
        assert r.item_completed is False

    def test_equality(self):
        assert KeyResult(False, "a", "b") == KeyResult(False, "a", "b")


# ---------------------------------------------------------------------------
# next_typeable_index
# ---------------------------------------------------------------------------

class TestNextTypeableIndex:
    def test_skips_pre_context(self):
        assert next_typeable_index(_item("一個(蘋)ㄆㄧㄥˊ果")) == 2

    def test_none_after_target(self):
        assert next_typeable_index(_item("一個(蘋)ㄆㄧㄥˊ果"), 3) == -1

    def test_item_without_typeable_units(self):
        item = ExerciseItem("x", "x", (TypingUnit("a", is_context=True),), "p", "g", "l")
        assert next_typeable_index(item) == -1


# ---------------------------------------------------------------------------
# TypingSession – initial state
# ---------------------------------------------------------------------------

class TestSessionStart:
    def test_cursor_starts_on_target(self):
        s = TypingSession([_item("老(師)ㄕ")])
        assert s.item_index == 0
        assert s.unit_index == 1
        assert s.key_index == 0
        assert s.current_unit().glyph == "師"
        assert s.expected_key() == "g"

    def test_total_items(self):
        s = TypingSession([_item("(天)ㄊㄧㄢ空"), _item("(花)ㄏㄨㄚ朵", 1)])
        assert s.total_items == 2

    def test_untypeable_items_dropped(self):
        empty = ExerciseItem("x", "x", (TypingUnit("a", is_context=True),), "p", "g", "l")
        s = TypingSession([empty, _item("(天)ㄊㄧㄢ空")])
        assert s.total_items == 1

    def test_empty_session_is_complete(self):
        s = TypingSession([])
        assert s.is_complete()
        assert s.expected_key() is None
        assert s.press("a") is None

    def test_start_time_is_recent(self):
        before = time.time()
        s = TypingSession([])
        after = time.time()
        assert before <= s.start_time <= after


# ---------------------------------------------------------------------------
# TypingSession – press
# ---------------------------------------------------------------------------

class TestPress:
    def test_correct_key_advances(self):
        s = TypingSession([_item("(天)ㄊㄧㄢ空")])
        r = s.press("w")
        assert r == KeyResult(correct=True, expected="w", pressed="w")
        assert s.key_index == 1

    def test_wrong_key_does_not_advance(self):
        s = TypingSession([_item("(天)ㄊㄧㄢ空")])
        r = s.press("q")
        assert r == KeyResult(correct=False, expected="w", pressed="q")
        assert s.key_index == 0
        assert s.total_errors == 1

    def test_uppercase_input_lowered(self):
        s = TypingSession([_item("(天)ㄊㄧㄢ空")])
        assert s.press("W").correct

    @pytest.mark.parametrize("key", ["Shift", "Control", "Alt", "Meta"])
    def test_modifiers_ignored(self, key: str):
        s = TypingSession([_item("(天)ㄊㄧㄢ空")])
        assert s.press(key) is None
        assert s.total_errors == 0

    def test_first_tone_needs_space(self):
        s = TypingSession([_item("(天)ㄊㄧㄢ空")])
        results = _type(s, ["w", "u", "0"])
        assert not any(r.unit_completed for r in results)
        assert s.expected_key() == " "
        last = s.press(" ")
        assert last.unit_completed and last.item_completed

    def test_space_alias(self):
        s = TypingSession([_item("(花)ㄏㄨㄚ朵")])
        _type(s, ["c", "j", "8"])
        assert s.press("Space").correct

    def test_moves_to_next_item(self):
        s = TypingSession([_item("(天)ㄊㄧㄢ空"), _item("老(師)ㄕ", 1)])
        _type(s, ["w", "u", "0", " "])
        assert s.item_index == 1
        assert s.unit_index == 1
        assert s.expected_key() == "g"

    def test_completion(self):
        s = TypingSession([_item("老(師)ㄕ")])
        results = _type(s, ["g", " "])
        assert results[-1].item_completed
        assert s.is_complete()
        assert s.press("g") is None


# ---------------------------------------------------------------------------
# TypingSession – aggregates
# ---------------------------------------------------------------------------

class TestAggregates:
    def test_accuracy_perfect(self):
        s = TypingSession([_item("老(師)ㄕ")])
        _type(s, ["g", " "])
        assert s.aggregate_accuracy() == pytest.approx(100.0)

    def test_accuracy_with_errors(self):
        s = TypingSession([_item("老(師)ㄕ")])
        _type(s, ["x", "g", "x", " "])
        assert s.total_correct == 2
        assert s.total_errors == 2
        assert s.aggregate_accuracy() == pytest.approx(50.0)

    def test_accuracy_no_input(self):
        assert TypingSession([]).aggregate_accuracy() == 0.0

    def test_kpm_positive_after_typing(self):
        s = TypingSession([_item("老(師)ㄕ")])
        _type(s, ["g", " "])
        assert s.aggregate_kpm() > 0

    def test_kpm_zero_without_typing(self):
        assert TypingSession([]).aggregate_kpm() == 0.0
