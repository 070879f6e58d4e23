"""Vocabulary tracking entities used across services and persistence."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class VocabularySource(str, Enum):
    """Where a vocabulary record was first saved from."""

    SCAN = "scan"
    RELATED = "related"
    HUNT = "hunt"


@dataclass
class VocabularyItem:
    id: str
    owner_id: str
    word: str
    reading: str
    meaning: str
    example_sentence: str
    example_translation: str
    proficiency_level: int
    next_review_at: datetime
    source: VocabularySource
    created_at: datetime
    enriched_data: Optional[Dict[str, Any]] = None

    @property
    def is_pending(self) -> bool:
        """True while the record still waits for lesson enrichment."""
        return self.enriched_data is None


@dataclass(frozen=True)
class CaptureVocabularyLink:
    vocabulary_id: str
    capture_id: str
    owner_id: str
