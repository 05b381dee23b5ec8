"""Application wiring for the Zhuyin typing game's vocabulary core."""

import logging
import random
from pathlib import Path
from typing import Optional

from zhuyin_typer.core.corpus import CorpusRepository
from zhuyin_typer.core.custom_store import CustomEntryStore, JsonFileStorage
from zhuyin_typer.core.query import VocabularyService


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_service(
    storage_path: Optional[Path] = None,
    corpus_dir: Optional[Path] = None,
    rng: Optional[random.Random] = None,
) -> VocabularyService:
    """Build the vocabulary service over the shipped corpus and the user's custom entries."""
    repository = CorpusRepository(corpus_dir)
    custom_store = CustomEntryStore(JsonFileStorage(storage_path))
    service = VocabularyService(repository, custom_store, rng=rng)

    sources = repository.all()
    logging.info(
        "Loaded %d corpus sources: %s",
        len(sources),
        ", ".join(source.title for source in sources),
    )
    metadata = service.get_metadata()
    logging.info("Publishers available: %s", ", ".join(metadata.publishers))
    return service
