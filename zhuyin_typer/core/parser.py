"""Parsing of annotated corpus segments into exercise items.

A segment carries one typing target in either of two shapes::

    Pre(Glyph)AnnotationPost      canonical, e.g. "(紅)ㄏㄨㄥˊ色"
    PreGlyph(Annotation)Post      annotated glyph, e.g. "我(ㄨㄛˇ)愛"

Characters before and after the target are display-only context. Only the
first bracket pair is interpreted; any later brackets stay in the context
text as they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from zhuyin_typer.core.keystrokes import derive
from zhuyin_typer.core.symbols import LOOKALIKES, is_phonetic, is_tone_mark

OPEN_BRACKET = "("
CLOSE_BRACKET = ")"
PLACEHOLDER_GLYPH = "( )"


class UnparseableSegmentError(ValueError):
    """Raised when a segment does not follow the annotation syntax."""

    def __init__(self, reason: str, segment: str) -> None:
        super().__init__(f"{reason}: {segment!r}")
        self.reason = reason
        self.segment = segment


@dataclass(frozen=True)
class TypingUnit:
    """One displayed glyph; context glyphs are never matched against input."""

    glyph: str
    annotation: str = ""
    keystrokes: Tuple[str, ...] = ()
    is_context: bool = False
    skipped: Tuple[str, ...] = ()

    @property
    def is_typeable(self) -> bool:
        return not self.is_context and bool(self.keystrokes)


@dataclass(frozen=True)
class ExerciseItem:
    id: str
    source_text: str
    units: Tuple[TypingUnit, ...]
    publisher: str
    grade: str
    lesson: str

    @property
    def text(self) -> str:
        """Display text with brackets and annotations removed."""
        return "".join(unit.glyph for unit in self.units)

    @property
    def targets(self) -> Tuple[TypingUnit, ...]:
        return tuple(unit for unit in self.units if not unit.is_context)

    @property
    def keystrokes(self) -> Tuple[str, ...]:
        return tuple(key for unit in self.targets for key in unit.keystrokes)

    @property
    def skipped_symbols(self) -> Tuple[str, ...]:
        return tuple(char for unit in self.units for char in unit.skipped)


def scan_annotation(text: str, start: int = 0) -> int:
    """Return the end index of the phonetic run beginning at ``start``.

    The run is the longest stretch of Zhuyin symbols, tone marks and
    whitespace.
    """
    end = start
    while end < len(text) and (is_phonetic(text[end]) or text[end].isspace()):
        end += 1
    return end


def has_sound_symbol(annotation: str) -> bool:
    return any(is_phonetic(char) and not is_tone_mark(char) for char in annotation)


def _is_stray(text: str, at: int) -> bool:
    """True for a typo character that belongs to the annotation, not the context.

    ASCII letters and digits (often a tone typed by its key, such as "3"
    for ˇ) always count. A CJK lookalike only counts when a Zhuyin
    symbol follows it, since it is otherwise ordinary context text.
    """
    char = text[at]
    if char.isascii() and char.isalnum():
        return True
    return char in LOOKALIKES and at + 1 < len(text) and is_phonetic(text[at + 1])


def extend_annotation(text: str, run_end: int) -> int:
    """Extend a phonetic run over stray characters and the Zhuyin after them."""
    end = run_end
    at = run_end
    while at < len(text):
        char = text[at]
        if is_phonetic(char) or _is_stray(text, at):
            at += 1
            end = at
        elif char.isspace():
            at += 1
        else:
            break
    return end


def _context_units(text: str) -> list[TypingUnit]:
    return [TypingUnit(glyph=char, is_context=True) for char in text.strip()]


def _split_segment(text: str) -> Tuple[str, str, str, str]:
    """Split a trimmed segment into (pre, target, annotation, post)."""
    open_at = text.find(OPEN_BRACKET)
    if open_at < 0:
        raise UnparseableSegmentError("missing-bracket", text)
    close_at = text.find(CLOSE_BRACKET, open_at + 1)
    if close_at < 0:
        raise UnparseableSegmentError("unclosed-bracket", text)

    pre = text[:open_at]
    inner = text[open_at + 1:close_at]
    rest = text[close_at + 1:]

    run_end = scan_annotation(rest)
    if has_sound_symbol(rest[:run_end]):
        run_end = extend_annotation(rest, run_end)
        return pre, inner, rest[:run_end], rest[run_end:]

    # Annotated glyph: the bracket holds the reading of the glyph before it.
    if (
        pre
        and not pre[-1].isspace()
        and scan_annotation(inner) == len(inner)
        and has_sound_symbol(inner)
    ):
        return pre[:-1], pre[-1], inner, rest

    raise UnparseableSegmentError("missing-annotation", text)


def parse_item(
    segment: str,
    item_id: str,
    publisher: str,
    grade: str,
    lesson: str,
) -> ExerciseItem:
    """Parse one corpus segment into an :class:`ExerciseItem`.

    Raises:
        UnparseableSegmentError: If the segment is empty, has no bracketed
            target, or the target has no phonetic annotation.
    """
    text = segment.strip()
    if not text:
        raise UnparseableSegmentError("empty-segment", segment)

    pre, target, annotation_run, post = _split_segment(text)
    annotation = annotation_run.strip()
    derivation = derive(annotation)

    target_unit = TypingUnit(
        glyph=target.strip() or PLACEHOLDER_GLYPH,
        annotation=annotation,
        keystrokes=derivation.keys,
        is_context=False,
        skipped=derivation.skipped,
    )
    units = (*_context_units(pre), target_unit, *_context_units(post))

    return ExerciseItem(
        id=item_id,
        source_text=segment,
        units=units,
        publisher=publisher,
        grade=grade,
        lesson=lesson,
    )
