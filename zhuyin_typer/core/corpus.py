"""Corpus loading and indexing.

The corpus is line oriented::

    【康軒 (Kangxuan)】          publisher header
    一年級                       grade header
    • 第 1 課: 我(ㄨㄛˇ)愛、...   lesson line, segments split on "、"
    _ anything                   ignored

Items inherit the most recently seen publisher and grade.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import yaml

from zhuyin_typer.core.parser import ExerciseItem, UnparseableSegmentError, parse_item
from zhuyin_typer.core.symbols import LOOKALIKES

logger = logging.getLogger(__name__)

DEFAULT_TAG = "通用"
PUBLISHER_OPEN = "【"
PUBLISHER_CLOSE = "】"
BULLET = "•"
IGNORE_MARKER = "_"
LESSON_SEPARATORS = (":", "：")
ITEM_DELIMITER = "、"

GRADE_LABELS = ("一年級", "二年級", "三年級", "四年級", "五年級", "六年級")
CUSTOM_PUBLISHER = "自訂題庫"
CUSTOM_GRADE = "自訂等級"
CUSTOM_LESSON = "我的練習"

_NUMBER_RE = re.compile(r"\d+")
_TRANSLITERATION_RE = re.compile(r"[(（]")
_CORPUS_FILE_RE = re.compile(r"^corpus(\d+)$")


@dataclass(frozen=True)
class CorpusIssue:
    """A corpus segment that was rejected or looks suspicious."""

    line_number: int
    segment: str
    reason: str


@dataclass(frozen=True)
class CorpusIndex:
    items: Tuple[ExerciseItem, ...]
    publishers: Tuple[str, ...]
    grades: Tuple[str, ...]
    lessons: Tuple[str, ...]
    issues: Tuple[CorpusIssue, ...] = ()


def lesson_sort_key(label: str) -> Tuple[int, int]:
    """Order lessons by embedded number, with the custom lesson first."""
    if label == CUSTOM_LESSON:
        return (0, 0)
    match = _NUMBER_RE.search(label)
    return (1, int(match.group()) if match else 0)


def parse_publisher(line: str) -> Optional[str]:
    """Return the publisher tag of a header line, or None if it is not one."""
    if not line.startswith(PUBLISHER_OPEN):
        return None
    close_at = line.find(PUBLISHER_CLOSE)
    if close_at < 0:
        return None
    label = _TRANSLITERATION_RE.split(line[len(PUBLISHER_OPEN):close_at])[0].strip()
    if not label:
        return ""
    return label.split()[0]


def parse_grade(line: str) -> Optional[str]:
    for label in (*GRADE_LABELS, CUSTOM_GRADE):
        if line.startswith(label):
            return label
    return None


def split_lesson_line(line: str) -> Tuple[str, str]:
    """Split a bulleted line into (lesson label, content body)."""
    body = line[len(BULLET):]
    positions = [body.find(sep) for sep in LESSON_SEPARATORS if sep in body]
    if not positions:
        return body.strip(), ""
    cut = min(positions)
    return body[:cut].strip(), body[cut + 1:]


def _skipped_reason(item: ExerciseItem) -> Optional[str]:
    """Classify the characters dropped from an item's annotation, if any."""
    skipped = item.skipped_symbols
    if not skipped:
        return None
    if any(char in LOOKALIKES for char in skipped):
        return "lookalike-symbol"
    return "stray-symbol"


def build_index(text: str) -> CorpusIndex:
    """Scan corpus text and index every parseable item.

    Malformed segments never abort the scan; they are collected in
    ``CorpusIndex.issues``.
    """
    items: List[ExerciseItem] = []
    issues: List[CorpusIssue] = []
    publishers: Dict[str, None] = {}
    grades: Dict[str, None] = {}
    lessons: Dict[str, None] = {}

    current_publisher = DEFAULT_TAG
    current_grade = DEFAULT_TAG

    for line_idx, line in enumerate(text.split("\n")):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(IGNORE_MARKER):
            continue

        publisher = parse_publisher(trimmed)
        if publisher is not None:
            if publisher:
                current_publisher = publisher
                publishers[publisher] = None
            continue

        grade = parse_grade(trimmed)
        if grade is not None:
            current_grade = grade
            grades[grade] = None
            continue

        if not trimmed.startswith(BULLET):
            logger.debug("Line %d ignored: %r", line_idx, trimmed)
            continue

        lesson, content = split_lesson_line(trimmed)
        lessons[lesson] = None
        produced = False
        for seg_idx, segment in enumerate(content.split(ITEM_DELIMITER)):
            if not segment.strip():
                continue
            try:
                item = parse_item(
                    segment,
                    item_id=f"item-{line_idx}-{seg_idx}",
                    publisher=current_publisher,
                    grade=current_grade,
                    lesson=lesson,
                )
            except UnparseableSegmentError as e:
                logger.debug("Line %d segment %d skipped: %s", line_idx, seg_idx, e)
                issues.append(CorpusIssue(line_idx, segment, e.reason))
                continue
            reason = _skipped_reason(item)
            if reason is not None:
                logger.debug(
                    "Line %d segment %d skipped symbols %r",
                    line_idx, seg_idx, "".join(item.skipped_symbols),
                )
                issues.append(CorpusIssue(line_idx, segment, reason))
            items.append(item)
            produced = True

        if produced:
            publishers.setdefault(current_publisher, None)
            grades.setdefault(current_grade, None)

    index = CorpusIndex(
        items=tuple(items),
        publishers=tuple(publishers),
        grades=tuple(grades),
        lessons=tuple(sorted(lessons, key=lesson_sort_key)),
        issues=tuple(issues),
    )
    logger.info(
        "Indexed %d items (%d publishers, %d grades, %d lessons, %d issues)",
        len(index.items),
        len(index.publishers),
        len(index.grades),
        len(index.lessons),
        len(index.issues),
    )
    return index


@dataclass(frozen=True)
class CorpusSource:
    key: str
    title: str
    content: str


def _file_order(path: Path) -> Tuple[int, str]:
    """corpus2 before corpus10; unnumbered files last."""
    match = _CORPUS_FILE_RE.match(path.stem)
    return (int(match.group(1)) if match else 10**9, path.stem)


def _content_lines(content: Union[str, list]) -> List[str]:
    if isinstance(content, list):
        return [str(line).rstrip() for line in content]
    return str(content).splitlines()


def read_source(path: Path) -> CorpusSource:
    """Read one ``corpus<N>.yaml`` file.

    Raises:
        ValueError: If the file lacks a title, has no content, or none of
            its lines is a bulleted lesson line.
    """
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected YAML with 'title' and 'content'")

    title = raw.get("title")
    if not title or not isinstance(title, str):
        raise ValueError(f"{path.name}: missing or invalid 'title'")
    content = raw.get("content")
    if content is None:
        raise ValueError(f"{path.name}: missing 'content'")

    lines = _content_lines(content)
    if not any(line.strip() for line in lines):
        raise ValueError(f"{path.name}: 'content' is empty")
    if not any(line.strip().startswith(BULLET) for line in lines):
        raise ValueError(f"{path.name}: 'content' has no lesson lines starting with {BULLET!r}")

    return CorpusSource(key=path.stem, title=title.strip(), content="\n".join(lines))


class CorpusRepository:
    """Static corpus shipped as ``data/corpus/corpus<N>.yaml`` files."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "corpus"
        self._sources = self._load_sources()

    def all(self) -> List[CorpusSource]:
        return list(self._sources.values())

    def get(self, key: str) -> CorpusSource:
        return self._sources[key]

    def text(self) -> str:
        return "\n".join(source.content for source in self._sources.values())

    def _load_sources(self) -> Dict[str, CorpusSource]:
        if not self._base_dir.exists():
            raise FileNotFoundError(f"Corpus directory not found: {self._base_dir}")

        sources: Dict[str, CorpusSource] = {}
        for path in sorted(self._base_dir.glob("corpus*.yaml"), key=_file_order):
            source = read_source(path)
            sources[source.key] = source
            logger.debug("Loaded corpus source %s (%r)", source.key, source.title)

        if not sources:
            raise ValueError(f"No corpus files (corpus*.yaml) found in {self._base_dir}")
        return sources
