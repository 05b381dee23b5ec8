"""User-entered vocabulary, persisted as one delimited string."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from zhuyin_typer.core.corpus import (
    BULLET,
    CUSTOM_GRADE,
    CUSTOM_LESSON,
    CUSTOM_PUBLISHER,
    ITEM_DELIMITER,
)
from zhuyin_typer.core.parser import CLOSE_BRACKET, OPEN_BRACKET

logger = logging.getLogger(__name__)

CUSTOM_STORAGE_KEY = "zhuyin_custom_vocab_v1"

# Section header that files custom entries under their own publisher/grade/lesson.
CUSTOM_HEADER = (
    f"\n【{CUSTOM_PUBLISHER} (Custom)】\n"
    f"{CUSTOM_GRADE} (Custom)\n"
    f"{BULLET} {CUSTOM_LESSON}: "
)

_BATCH_SPLIT_RE = re.compile(r"[\n;；、]")
# One glyph immediately followed by its bracketed Zhuyin reading.
_ANNOTATED_GLYPH_RE = re.compile(r"([^(（\s])[(（]([ ㄅ-ㄩˊˇˋ˙]+)[)）]")
# A canonical target written with full-width brackets.
_FULL_WIDTH_TARGET_RE = re.compile(r"^（([^（）]*)）()")


class JsonFileStorage:
    """Small string key-value store kept in a JSON file.

    File: ~/.zhuyin_typer/storage.json unless another path is given.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".zhuyin_typer" / "storage.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._values = self._load()

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._save()

    def _load(self) -> Dict[str, str]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load storage from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring storage file %s: expected a JSON object", self._file_path)
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._file_path.write_text(
                json.dumps(self._values, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as e:
            logger.warning("Could not save storage to %s: %s", self._file_path, e)


class EntryNormalizer(Protocol):
    """Rewrites a free-form entry into the canonical ``(Glyph)Annotation`` shape."""

    def normalize(self, text: str) -> str:
        ...


class PatternNormalizer:
    """Best-effort rewrite of ``Glyph(Annotation)Rest`` into ``(Glyph)AnnotationRest``.

    Entries already starting with a bracket are kept. Only the matched
    glyph and reading are rewritten; the text around them is left as is.
    Entries the pattern does not recognise are returned trimmed and left
    for the parser to accept or reject.
    """

    def normalize(self, text: str) -> str:
        trimmed = text.strip()
        if not trimmed or trimmed.startswith(OPEN_BRACKET):
            return trimmed
        match = _FULL_WIDTH_TARGET_RE.match(trimmed)
        if match is None:
            match = _ANNOTATED_GLYPH_RE.search(trimmed)
        if match is None:
            return trimmed
        glyph, reading = match.groups()
        return (
            f"{trimmed[:match.start()]}{OPEN_BRACKET}{glyph}{CLOSE_BRACKET}"
            f"{reading}{trimmed[match.end():]}"
        )


class CustomEntryStore:
    """Reads and rewrites the whole custom entry list on every operation."""

    def __init__(
        self,
        storage: JsonFileStorage,
        normalizer: Optional[EntryNormalizer] = None,
    ) -> None:
        self._storage = storage
        self._normalizer = normalizer or PatternNormalizer()
        self._revision = 0

    @property
    def revision(self) -> int:
        """Incremented on every write so cached indexes can tell they are stale."""
        return self._revision

    def normalize(self, text: str) -> str:
        return self._normalizer.normalize(text)

    def raw_items(self) -> List[str]:
        raw = self._storage.get(CUSTOM_STORAGE_KEY)
        if not raw:
            return []
        return [item for item in raw.split(ITEM_DELIMITER) if item.strip()]

    def corpus_text(self) -> str:
        """Return the stored entries wrapped as a corpus section, or ''."""
        raw = self._storage.get(CUSTOM_STORAGE_KEY)
        if not raw or not raw.strip():
            return ""
        return CUSTOM_HEADER + raw

    def save_from_text(self, raw_text: str) -> List[str]:
        """Replace all entries with those found in a pasted block of text."""
        segments = [segment.strip() for segment in _BATCH_SPLIT_RE.split(raw_text)]
        items = [self.normalize(segment) for segment in segments if segment]
        self._write(items)
        return items

    def add_item(self, pre: str, target: str, zhuyin: str, post: str) -> str:
        item = f"{pre}{OPEN_BRACKET}{target}{CLOSE_BRACKET}{zhuyin}{post}"
        items = self.raw_items()
        items.append(item)
        self._write(items)
        return item

    def remove_item(self, index: int) -> None:
        items = self.raw_items()
        if not 0 <= index < len(items):
            logger.debug("No custom entry at index %d (have %d)", index, len(items))
            return
        del items[index]
        self._write(items)

    def _write(self, items: List[str]) -> None:
        self._storage.set(CUSTOM_STORAGE_KEY, ITEM_DELIMITER.join(items))
        self._revision += 1
        logger.info("Saved %d custom entries", len(items))
