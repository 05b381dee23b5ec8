"""Filtered, randomly sampled access to the indexed corpus."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Tuple

from zhuyin_typer.core.corpus import CorpusIndex, CorpusRepository, build_index
from zhuyin_typer.core.custom_store import CustomEntryStore
from zhuyin_typer.core.parser import ExerciseItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameFilters:
    """Accepted tag values per dimension; an empty set accepts everything."""

    publishers: FrozenSet[str] = field(default_factory=frozenset)
    grades: FrozenSet[str] = field(default_factory=frozenset)
    lessons: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        publishers: Iterable[str] = (),
        grades: Iterable[str] = (),
        lessons: Iterable[str] = (),
    ) -> "GameFilters":
        return cls(frozenset(publishers), frozenset(grades), frozenset(lessons))

    def matches(self, item: ExerciseItem) -> bool:
        return (
            _accepts(self.publishers, item.publisher)
            and _accepts(self.grades, item.grade)
            and _accepts(self.lessons, item.lesson)
        )


def _accepts(allowed: FrozenSet[str], tag: Optional[str]) -> bool:
    if not allowed:
        return True
    return bool(tag) and tag in allowed


@dataclass(frozen=True)
class CorpusMetadata:
    publishers: Tuple[str, ...]
    grades: Tuple[str, ...]
    lessons: Tuple[str, ...]


class VocabularyService:
    """Serves metadata and item samples from the static and custom corpus.

    The index is cached and rebuilt only after :meth:`invalidate` or when the
    custom entry store has been written since the last build.
    """

    def __init__(
        self,
        repository: CorpusRepository,
        custom_store: CustomEntryStore,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._static_text = repository.text()
        self._custom_store = custom_store
        self._rng = rng or random.Random()
        self._index: Optional[CorpusIndex] = None
        self._built_revision = -1
        self._dirty = True

    @property
    def custom_store(self) -> CustomEntryStore:
        return self._custom_store

    def invalidate(self) -> None:
        self._dirty = True

    def rebuild(self) -> CorpusIndex:
        revision = self._custom_store.revision
        self._index = build_index(self._static_text + self._custom_store.corpus_text())
        self._built_revision = revision
        self._dirty = False
        return self._index

    def index(self) -> CorpusIndex:
        if self._index is None or self._dirty or self._built_revision != self._custom_store.revision:
            logger.debug("Corpus index stale; rebuilding")
            return self.rebuild()
        return self._index

    def get_metadata(self) -> CorpusMetadata:
        index = self.index()
        return CorpusMetadata(
            publishers=index.publishers,
            grades=index.grades,
            lessons=index.lessons,
        )

    def fetch_items(self, count: int = 10, filters: Optional[GameFilters] = None) -> List[ExerciseItem]:
        """Return up to ``count`` distinct items matching every filter dimension."""
        if count <= 0:
            return []
        items = self.index().items
        pool = [item for item in items if filters.matches(item)] if filters else list(items)
        if not pool:
            logger.info("No items match filters %s", filters)
            return []
        return self._rng.sample(pool, min(count, len(pool)))
