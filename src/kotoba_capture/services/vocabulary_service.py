"""Vocabulary Service - idempotent create-or-merge of vocabulary records."""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Union

from kotoba_capture.core import (
    CaptureVocabularyLink,
    ExistingLesson,
    GeneratedLesson,
    LessonDraft,
    VocabularyItem,
    VocabularySource,
)
from kotoba_capture.exceptions import InputError
from kotoba_capture.io import CaptureRepository, VocabularyRepository
from kotoba_capture.services.lessons import FALLBACK_LESSON, FallbackLesson, LessonBatchGenerator
from kotoba_capture.services.text_processing import (
    normalize_word,
    normalize_word_list,
    require_owner,
)

logger = logging.getLogger(__name__)

SaveableLesson = Union[LessonDraft, ExistingLesson, GeneratedLesson]


class VocabularyService:
    """Application service for saving vocabulary.

    ``save`` is safe to repeat: the ``(owner, word)`` key yields one record
    and each ``(record, capture)`` pair yields at most one link, however
    many times or however concurrently it is called.
    """

    def __init__(
        self,
        vocabulary: VocabularyRepository,
        captures: CaptureRepository,
        lessons: LessonBatchGenerator,
        fallback: FallbackLesson = FALLBACK_LESSON,
    ) -> None:
        self._vocabulary = vocabulary
        self._captures = captures
        self._lessons = lessons
        self._fallback = fallback

    def save(
        self,
        owner_id: str,
        lesson: SaveableLesson,
        capture_id: Optional[str] = None,
        source: Union[VocabularySource, str] = VocabularySource.SCAN,
    ) -> VocabularyItem:
        """
        Create or merge the record for a lesson and link it to a capture.

        Args:
            owner_id: Owner of the record.
            lesson: A draft, a generated lesson or an existing-record reference.
            capture_id: Capture the word was selected from, if any.
            source: Where the word came from; used only on creation.

        Returns:
            The stored VocabularyItem after the merge.

        Raises:
            InputError: For a missing owner, blank word or unknown source.
            NotFoundError: If the capture or referenced record is not the owner's.
            StorageError: If a write fails.
        """
        owner_id = require_owner(owner_id)
        try:
            source = VocabularySource(source)
        except ValueError:
            raise InputError(f"Unknown vocabulary source: {source!r}") from None
        if capture_id is not None:
            self._captures.get(owner_id, capture_id)

        if isinstance(lesson, ExistingLesson):
            item = self._vocabulary.get(owner_id, lesson.item.id)
            draft = None
        else:
            draft = lesson.draft if isinstance(lesson, GeneratedLesson) else lesson
            draft = self._normalized(draft)
            item = self._vocabulary.find_by_word(owner_id, draft.word)
            if item is None:
                item, created = self._vocabulary.create(owner_id, draft, source)
                if created:
                    logger.debug("Created vocabulary %r for owner", draft.word)
                    draft = None

        if draft is not None and draft.is_enriched and item.is_pending:
            if self._vocabulary.fill_enrichment(owner_id, item.id, draft):
                logger.debug("Filled enrichment for %r", item.word)

        if capture_id is not None:
            self._vocabulary.add_link(owner_id, item.id, capture_id)

        return self._vocabulary.get(owner_id, item.id)

    def select_words(
        self,
        owner_id: str,
        words: Iterable[str],
        capture_id: Optional[str] = None,
        source: Union[VocabularySource, str] = VocabularySource.SCAN,
    ) -> List[VocabularyItem]:
        """Save pending records for selected words without calling any backend.

        This is the first phase of the two-phase write; ``enrich_pending``
        fills the records in afterwards.
        """
        owner_id = require_owner(owner_id)
        selected = normalize_word_list(words)
        return [
            self.save(owner_id, self._fallback.for_word(word), capture_id, source)
            for word in selected
        ]

    def enrich_pending(
        self, owner_id: str, shared_context: str = "", limit: int = 20
    ) -> List[VocabularyItem]:
        """Fill in pending records with one batched generation call.

        Records the backend cannot answer for stay pending; nothing is
        partially written.

        Returns:
            The records that were pending, re-read after the pass.
        """
        owner_id = require_owner(owner_id)
        if limit <= 0:
            raise InputError("limit must be positive")
        pending = self._vocabulary.list_pending(owner_id, limit)
        if not pending:
            return []

        drafts = self._lessons.generate_drafts([item.word for item in pending], shared_context)
        filled = 0
        for item in pending:
            draft = drafts.get(item.word)
            if draft is not None and draft.is_enriched:
                if self._vocabulary.fill_enrichment(owner_id, item.id, draft):
                    filled += 1
        logger.info("Enriched %d of %d pending records", filled, len(pending))
        return [self._vocabulary.get(owner_id, item.id) for item in pending]

    def get(self, owner_id: str, vocabulary_id: str) -> VocabularyItem:
        return self._vocabulary.get(require_owner(owner_id), vocabulary_id)

    def list_pending(self, owner_id: str, limit: int = 20) -> List[VocabularyItem]:
        return self._vocabulary.list_pending(require_owner(owner_id), limit)

    def list_links(self, owner_id: str, vocabulary_id: str) -> List[CaptureVocabularyLink]:
        return self._vocabulary.list_links(require_owner(owner_id), vocabulary_id)

    def list_for_capture(self, owner_id: str, capture_id: str) -> List[VocabularyItem]:
        return self._vocabulary.list_for_capture(require_owner(owner_id), capture_id)

    @staticmethod
    def _normalized(draft: LessonDraft) -> LessonDraft:
        word = normalize_word(draft.word or "")
        if not word:
            raise InputError("Lesson has no word")
        return draft if word == draft.word else replace(draft, word=word)
