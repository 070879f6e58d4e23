"""Text extraction services - OCR adapter interface and Gemini implementation."""

from kotoba_capture.services.text_extraction.text_extractor import TextExtractor
from kotoba_capture.services.text_extraction.defaults import PLACEHOLDER_EXTRACTION
from kotoba_capture.services.text_extraction.gemini_text_extractor import GeminiTextExtractor

__all__ = [
    "TextExtractor",
    "PLACEHOLDER_EXTRACTION",
    "GeminiTextExtractor",
]
