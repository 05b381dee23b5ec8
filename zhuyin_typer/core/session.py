from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from zhuyin_typer.core.parser import ExerciseItem, TypingUnit
from zhuyin_typer.core.symbols import DEFAULT_TONE_KEY

MODIFIER_KEYS = frozenset({"shift", "control", "alt", "meta"})
KEY_ALIASES = {"space": DEFAULT_TONE_KEY}


@dataclass
class KeyResult:
    """Outcome of a single key press."""

    correct: bool
    expected: str
    pressed: str
    unit_completed: bool = False
    item_completed: bool = False


def next_typeable_index(item: ExerciseItem, start: int = 0) -> int:
    """Index of the first typeable unit at or after ``start``, or -1."""
    for idx in range(start, len(item.units)):
        if item.units[idx].is_typeable:
            return idx
    return -1


class TypingSession:
    """Walks a list of exercise items keystroke by keystroke.

    Context units are skipped. A wrong key is counted as an error and the
    cursor stays where it is. Speed is reported as correct keystrokes per
    minute since the session started.
    """

    def __init__(self, items: list[ExerciseItem]) -> None:
        self._items = [item for item in items if next_typeable_index(item) != -1]
        self._item_index = 0
        self._unit_index = next_typeable_index(self._items[0]) if self._items else -1
        self._key_index = 0
        self._start_time = time.time()
        self._total_correct = 0
        self._total_errors = 0

    @property
    def item_index(self) -> int:
        return self._item_index

    @property
    def unit_index(self) -> int:
        return self._unit_index

    @property
    def key_index(self) -> int:
        return self._key_index

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def total_correct(self) -> int:
        return self._total_correct

    @property
    def total_errors(self) -> int:
        return self._total_errors

    def is_complete(self) -> bool:
        return self._item_index >= len(self._items)

    def current_item(self) -> ExerciseItem:
        return self._items[self._item_index]

    def current_unit(self) -> TypingUnit:
        return self.current_item().units[self._unit_index]

    def expected_key(self) -> Optional[str]:
        if self.is_complete():
            return None
        return self.current_unit().keystrokes[self._key_index]

    def press(self, key: str) -> Optional[KeyResult]:
        """Apply one key press; modifier keys and presses after completion return None."""
        pressed = key.lower()
        if pressed in MODIFIER_KEYS or self.is_complete():
            return None
        pressed = KEY_ALIASES.get(pressed, pressed)
        expected = self.current_unit().keystrokes[self._key_index]

        if pressed != expected:
            self._total_errors += 1
            return KeyResult(correct=False, expected=expected, pressed=pressed)

        self._total_correct += 1
        result = KeyResult(correct=True, expected=expected, pressed=pressed)
        if self._key_index < len(self.current_unit().keystrokes) - 1:
            self._key_index += 1
            return result

        result.unit_completed = True
        self._key_index = 0
        next_unit = next_typeable_index(self.current_item(), self._unit_index + 1)
        if next_unit != -1:
            self._unit_index = next_unit
            return result

        result.item_completed = True
        self._item_index += 1
        if not self.is_complete():
            self._unit_index = next_typeable_index(self.current_item())
        return result

    def aggregate_accuracy(self) -> float:
        """Correct presses as a percentage of all presses."""
        total = max(self._total_correct + self._total_errors, 1)
        return (self._total_correct / total) * 100.0

    def aggregate_kpm(self) -> float:
        """Correct keystrokes per minute."""
        elapsed_minutes = max((time.time() - self._start_time) / 60.0, 1e-6)
        return self._total_correct / elapsed_minutes
