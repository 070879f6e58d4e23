"""
Kotoba Capture - turns photos of Japanese text into a reviewable vocabulary deck.

This package provides the core pipeline behind the app:
- Content-addressed capture storage with OCR reuse
- Batched lesson generation with cache-first resolution
- Idempotent vocabulary merge with capture links
- Leveled spaced-review scheduling
"""

__version__ = "0.1.0"

# Make key components available at package level
from kotoba_capture.core import Capture, LessonDraft, ReviewOutcome, VocabularyItem
from kotoba_capture.main import build_pipeline
from kotoba_capture.pipeline import CapturePipeline

__all__ = [
    "Capture",
    "LessonDraft",
    "ReviewOutcome",
    "VocabularyItem",
    "CapturePipeline",
    "build_pipeline",
]
