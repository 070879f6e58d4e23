"""Services layer - business logic and external integrations."""

from kotoba_capture.services.settings_manager import SettingsManager

# Text processing services
from kotoba_capture.services.text_processing import normalize_text, normalize_word, normalize_word_list, require_owner

# Backend adapters
from kotoba_capture.services.generation import TextGenerator, GeminiTextGenerator, parse_json_object
from kotoba_capture.services.text_extraction import TextExtractor, GeminiTextExtractor, PLACEHOLDER_EXTRACTION
from kotoba_capture.services.translation import TranslationService, TranslationResult

# Lesson services
from kotoba_capture.services.lessons import (
	FALLBACK_LESSON,
	FallbackLesson,
	LessonBatchGenerator,
	PerWordMap,
	SingleObject,
	detect_shape,
	normalize_lesson,
)

# Application services
from kotoba_capture.services.capture_service import CaptureService, compute_digest
from kotoba_capture.services.vocabulary_service import VocabularyService
from kotoba_capture.services.review_scheduler import ReviewScheduler
from kotoba_capture.services.conversation_service import Conversation, ConversationLine, ConversationService

__all__ = [
	"SettingsManager",
	"normalize_text",
	"normalize_word",
	"normalize_word_list",
	"require_owner",
	"TextGenerator",
	"GeminiTextGenerator",
	"parse_json_object",
	"TextExtractor",
	"GeminiTextExtractor",
	"PLACEHOLDER_EXTRACTION",
	"TranslationService",
	"TranslationResult",
	"FALLBACK_LESSON",
	"FallbackLesson",
	"LessonBatchGenerator",
	"PerWordMap",
	"SingleObject",
	"detect_shape",
	"normalize_lesson",
	"CaptureService",
	"compute_digest",
	"VocabularyService",
	"ReviewScheduler",
	"Conversation",
	"ConversationLine",
	"ConversationService",
]
