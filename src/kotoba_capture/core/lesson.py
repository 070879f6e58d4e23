"""Lesson entities - normalized enrichment data before and after persistence."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .vocabulary_entities import VocabularyItem


@dataclass(frozen=True)
class LessonDraft:
    """Normalized, not-yet-persisted lesson for one word.

    ``enriched_data`` is None for fallback drafts so that saving one never
    marks a record as enriched.
    """

    word: str
    reading: str = ""
    meaning: str = ""
    example_sentence: str = ""
    example_translation: str = ""
    enriched_data: Optional[Dict[str, Any]] = None
    is_fallback: bool = False

    @property
    def is_enriched(self) -> bool:
        return self.enriched_data is not None


@dataclass(frozen=True)
class ExistingLesson:
    """Lesson already persisted and fully enriched for the owner."""

    item: VocabularyItem

    @property
    def word(self) -> str:
        return self.item.word


@dataclass(frozen=True)
class GeneratedLesson:
    """Lesson produced by the generative backend (or its fallback)."""

    draft: LessonDraft

    @property
    def word(self) -> str:
        return self.draft.word


LessonResult = Union[ExistingLesson, GeneratedLesson]
