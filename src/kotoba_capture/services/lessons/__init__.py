"""Lesson services - batched generation, response shapes and fallbacks."""

from kotoba_capture.services.lessons.fallback import FALLBACK_LESSON, FallbackLesson
from kotoba_capture.services.lessons.response_shapes import (
    PerWordMap,
    SingleObject,
    detect_shape,
    normalize_lesson,
)
from kotoba_capture.services.lessons.lesson_generator import LessonBatchGenerator

__all__ = [
    "FALLBACK_LESSON",
    "FallbackLesson",
    "PerWordMap",
    "SingleObject",
    "detect_shape",
    "normalize_lesson",
    "LessonBatchGenerator",
]
