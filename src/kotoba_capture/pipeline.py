"""Capture pipeline facade - the operations exposed to UI and API layers.

Every call is request-scoped and synchronous. Backend trouble degrades to
placeholders; only input, authorization and storage problems raise.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from kotoba_capture.core import (
    Capture,
    CaptureVocabularyLink,
    GeoPoint,
    LessonResult,
    ReviewOutcome,
    ReviewResult,
    VocabularyItem,
    VocabularySource,
)
from kotoba_capture.io import DatabaseManager
from kotoba_capture.services import (
    CaptureService,
    Conversation,
    ConversationService,
    LessonBatchGenerator,
    ReviewScheduler,
    VocabularyService,
)
from kotoba_capture.services.vocabulary_service import SaveableLesson


class CapturePipeline:
    """Photo -> capture -> lessons -> vocabulary -> review, behind one object."""

    def __init__(
        self,
        captures: CaptureService,
        lessons: LessonBatchGenerator,
        vocabulary: VocabularyService,
        scheduler: ReviewScheduler,
        conversations: ConversationService,
        database: Optional[DatabaseManager] = None,
    ) -> None:
        self.captures = captures
        self.lessons = lessons
        self.vocabulary = vocabulary
        self.scheduler = scheduler
        self.conversations = conversations
        self._database = database

    # Captures

    def ingest_capture(
        self,
        owner_id: str,
        image_bytes: bytes,
        geo: Optional[GeoPoint] = None,
        extension: str = "",
    ) -> Capture:
        return self.captures.ingest(owner_id, image_bytes, geo, extension)

    def extract_text(self, owner_id: str, capture_id: str) -> Capture:
        return self.captures.extract_text(owner_id, capture_id)

    def ensure_translation(self, owner_id: str, capture_id: str) -> Optional[str]:
        return self.captures.ensure_translation(owner_id, capture_id)

    def process_upload(
        self,
        owner_id: str,
        image_bytes: bytes,
        geo: Optional[GeoPoint] = None,
        extension: str = "",
    ) -> Capture:
        """Ingest, recognise and translate an upload in one call."""
        capture = self.ingest_capture(owner_id, image_bytes, geo, extension)
        capture = self.extract_text(owner_id, capture.id)
        self.ensure_translation(owner_id, capture.id)
        return self.captures.get_capture(owner_id, capture.id)

    # Lessons and vocabulary

    def resolve_lessons(
        self, owner_id: str, words: Iterable[str], context: str = ""
    ) -> Dict[str, LessonResult]:
        return self.lessons.resolve(owner_id, words, context)

    def resolve_lesson(self, owner_id: str, word: str, context: str = "") -> LessonResult:
        return self.lessons.resolve_one(owner_id, word, context)

    def save_vocabulary(
        self,
        owner_id: str,
        lesson: SaveableLesson,
        capture_id: Optional[str] = None,
        source: Union[VocabularySource, str] = VocabularySource.SCAN,
    ) -> VocabularyItem:
        return self.vocabulary.save(owner_id, lesson, capture_id, source)

    def select_words(
        self, owner_id: str, words: Iterable[str], capture_id: Optional[str] = None
    ) -> List[VocabularyItem]:
        return self.vocabulary.select_words(owner_id, words, capture_id)

    def enrich_pending(self, owner_id: str, context: str = "", limit: int = 20) -> List[VocabularyItem]:
        return self.vocabulary.enrich_pending(owner_id, context, limit)

    def list_vocabulary_for_capture(self, owner_id: str, capture_id: str) -> List[VocabularyItem]:
        return self.vocabulary.list_for_capture(owner_id, capture_id)

    def list_captures_for_vocabulary(
        self, owner_id: str, vocabulary_id: str
    ) -> List[CaptureVocabularyLink]:
        return self.vocabulary.list_links(owner_id, vocabulary_id)

    def conversations_for(self, words: Iterable[str]) -> Dict[str, Conversation]:
        return self.conversations.conversations_for(words)

    # Review

    def list_due(
        self, owner_id: str, now: Optional[datetime] = None, limit: Optional[int] = None
    ) -> List[VocabularyItem]:
        return self.scheduler.list_due(owner_id, now, limit)

    def list_distractors(
        self, owner_id: str, exclude_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[VocabularyItem]:
        return self.scheduler.list_distractors(owner_id, exclude_id, limit)

    def submit_review(
        self,
        owner_id: str,
        vocabulary_id: str,
        outcome: Union[ReviewOutcome, str],
        now: Optional[datetime] = None,
    ) -> ReviewResult:
        return self.scheduler.submit_review(owner_id, vocabulary_id, outcome, now)

    def close(self) -> None:
        if self._database is not None:
            self._database.close()
