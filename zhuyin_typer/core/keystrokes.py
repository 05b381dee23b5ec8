"""Conversion of Zhuyin annotations into Dachen keystroke sequences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from zhuyin_typer.core.symbols import DEFAULT_TONE_KEY, is_tone_mark, symbol_to_key


@dataclass(frozen=True)
class Derivation:
    """Keys required for an annotation plus any characters that were skipped."""

    keys: Tuple[str, ...]
    skipped: Tuple[str, ...] = ()


def derive(annotation: str) -> Derivation:
    """Derive the keystrokes for one annotation, in written order.

    A syllable written without a tone mark is first tone, which the input
    method still expects as an explicit space keystroke. Characters outside
    the symbol table are skipped and reported; whitespace is ignored.
    """
    keys: list[str] = []
    skipped: list[str] = []
    has_tone = False

    for char in annotation:
        if is_tone_mark(char):
            has_tone = True
        key = symbol_to_key(char)
        if key is not None:
            keys.append(key)
        elif not char.isspace():
            skipped.append(char)

    if keys and not has_tone:
        keys.append(DEFAULT_TONE_KEY)

    return Derivation(keys=tuple(keys), skipped=tuple(skipped))


def derive_keystrokes(annotation: str) -> Tuple[str, ...]:
    return derive(annotation).keys
