"""Composition root for the capture pipeline."""

import logging
from pathlib import Path
from typing import Optional, Union

from kotoba_capture.io import (
    BlobStore,
    CaptureRepository,
    ConversationCache,
    DatabaseManager,
    FileBlobStore,
    VocabularyRepository,
)
from kotoba_capture.pipeline import CapturePipeline
from kotoba_capture.services import (
    CaptureService,
    ConversationService,
    GeminiTextExtractor,
    GeminiTextGenerator,
    LessonBatchGenerator,
    ReviewScheduler,
    SettingsManager,
    TextExtractor,
    TextGenerator,
    TranslationService,
    VocabularyService,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install a basic log handler for hosting processes."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_pipeline(
    settings: Optional[SettingsManager] = None,
    db_path: Optional[Path] = None,
    blob_store: Optional[BlobStore] = None,
    generator: Optional[TextGenerator] = None,
    extractor: Optional[TextExtractor] = None,
) -> CapturePipeline:
    """
    Wire storage, backends and services.

    This is the only place that knows how to instantiate every component.
    Explicit arguments override what ``settings`` would provide, which is
    how tests swap in fakes.
    """
    # 1. Configuration
    settings = settings or SettingsManager()

    # 2. Storage
    database = DatabaseManager(db_path or settings.get_db_path())
    database.ensure_schema()
    captures = CaptureRepository(database.connection)
    vocabulary = VocabularyRepository(database.connection)
    conversation_cache = ConversationCache(database.connection)
    blobs = blob_store or FileBlobStore(settings.get_blob_dir())

    # 3. Backends
    gemini: Optional[GeminiTextGenerator] = None
    if generator is None or extractor is None:
        gemini = GeminiTextGenerator(
            api_key=settings.get_gemini_api_key(),
            model_name=settings.get_model_name(),
            timeout_seconds=settings.get_request_timeout(),
        )
        if not gemini.is_configured:
            logger.warning("GEMINI_API_KEY not set; OCR and lessons will use placeholders")
    generator = generator or gemini
    extractor = extractor or GeminiTextExtractor(gemini)

    # 4. Services
    lessons = LessonBatchGenerator(vocabulary, generator)
    return CapturePipeline(
        captures=CaptureService(captures, blobs, extractor, TranslationService(generator)),
        lessons=lessons,
        vocabulary=VocabularyService(vocabulary, captures, lessons),
        scheduler=ReviewScheduler(
            vocabulary,
            ladder=settings.get_review_ladder(),
            due_page_size=settings.get_due_page_size(),
            distractor_pool_size=settings.get_distractor_pool_size(),
        ),
        conversations=ConversationService(conversation_cache, generator),
        database=database,
    )
