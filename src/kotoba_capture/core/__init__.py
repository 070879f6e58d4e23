"""Domain layer - pure entities for captures, vocabulary, lessons and reviews."""

from .capture import Capture, ExtractionResult, GeoPoint, TextDetection
from .lesson import ExistingLesson, GeneratedLesson, LessonDraft, LessonResult
from .review import (
    BINARY_LADDER,
    DEFAULT_INTERVALS,
    QUALITY_LADDER,
    ReviewLadder,
    ReviewOutcome,
    ReviewResult,
    Transition,
)
from .timestamps import ensure_utc, from_db_timestamp, to_db_timestamp, utc_now
from .vocabulary_entities import CaptureVocabularyLink, VocabularyItem, VocabularySource

__all__ = [
    "Capture",
    "ExtractionResult",
    "GeoPoint",
    "TextDetection",
    "LessonDraft",
    "ExistingLesson",
    "GeneratedLesson",
    "LessonResult",
    "ReviewLadder",
    "ReviewOutcome",
    "ReviewResult",
    "Transition",
    "BINARY_LADDER",
    "QUALITY_LADDER",
    "DEFAULT_INTERVALS",
    "VocabularyItem",
    "VocabularySource",
    "CaptureVocabularyLink",
    "utc_now",
    "ensure_utc",
    "to_db_timestamp",
    "from_db_timestamp",
]
