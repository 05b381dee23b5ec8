"""Zhuyin (Bopomofo) symbol table for the standard Dachen keyboard layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

# Key that produces the first tone, which has no written mark.
DEFAULT_TONE_KEY = " "

INITIALS: Dict[str, str] = {
    'ㄅ': '1', 'ㄆ': 'q', 'ㄇ': 'a', 'ㄈ': 'z',
    'ㄉ': '2', 'ㄊ': 'w', 'ㄋ': 's', 'ㄌ': 'x',
    'ㄍ': 'e', 'ㄎ': 'd', 'ㄏ': 'c',
    'ㄐ': 'r', 'ㄑ': 'f', 'ㄒ': 'v',
    'ㄓ': '5', 'ㄔ': 't', 'ㄕ': 'g', 'ㄖ': 'b',
    'ㄗ': 'y', 'ㄘ': 'h', 'ㄙ': 'n',
}

MEDIALS: Dict[str, str] = {
    'ㄧ': 'u', 'ㄨ': 'j', 'ㄩ': 'm',
}

FINALS: Dict[str, str] = {
    'ㄚ': '8', 'ㄛ': 'i', 'ㄜ': 'k', 'ㄝ': ',',
    'ㄞ': '9', 'ㄟ': 'o', 'ㄠ': 'l', 'ㄡ': '.',
    'ㄢ': '0', 'ㄣ': 'p', 'ㄤ': ';', 'ㄥ': '/',
    'ㄦ': '-',
}

TONES: Dict[str, str] = {
    'ˊ': '6',  # 2nd tone
    'ˇ': '3',  # 3rd tone
    'ˋ': '4',  # 4th tone
    '˙': '7',  # neutral tone
}

ZHUYIN_TO_KEY: Dict[str, str] = {**INITIALS, **MEDIALS, **FINALS, **TONES}
KEY_TO_ZHUYIN: Dict[str, str] = {key: symbol for symbol, key in ZHUYIN_TO_KEY.items()}

TONE_MARKS: FrozenSet[str] = frozenset(TONES)
PHONETIC_SYMBOLS: FrozenSet[str] = frozenset(ZHUYIN_TO_KEY)

# CJK characters that authors type by mistake in place of a phonetic symbol.
LOOKALIKES: Dict[str, str] = {
    '一': 'ㄧ',
    '丨': 'ㄧ',
    '八': 'ㄚ',
    '入': 'ㄖ',
    '厶': 'ㄙ',
}


def symbol_to_key(symbol: str) -> Optional[str]:
    """Return the key code for a phonetic symbol, or None if unrecognized."""
    return ZHUYIN_TO_KEY.get(symbol)


def key_to_symbol(key: str) -> Optional[str]:
    """Return the canonical symbol printed on a key, or None (e.g. for space)."""
    return KEY_TO_ZHUYIN.get(key)


def is_tone_mark(symbol: str) -> bool:
    return symbol in TONE_MARKS


def is_phonetic(char: str) -> bool:
    return char in PHONETIC_SYMBOLS


@dataclass(frozen=True)
class KeyConfig:
    """One key of the on-screen keyboard."""

    label: str
    sub_label: str
    code: str
    is_tone: bool = False


def _row(keys: str) -> Tuple[KeyConfig, ...]:
    row: List[KeyConfig] = []
    for key in keys:
        symbol = KEY_TO_ZHUYIN[key]
        row.append(KeyConfig(label=symbol, sub_label=key, code=key, is_tone=is_tone_mark(symbol)))
    return tuple(row)


KEYBOARD_ROWS: Tuple[Tuple[KeyConfig, ...], ...] = (
    _row("1234567890-"),
    _row("qwertyuiop"),
    _row("asdfghjkl;"),
    _row("zxcvbnm,./"),
    (KeyConfig(label="一聲", sub_label="Space", code=DEFAULT_TONE_KEY, is_tone=True),),
)
