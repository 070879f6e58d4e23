"""Generative text backends - abstract interface and Gemini implementation."""

from kotoba_capture.services.generation.text_generator import TextGenerator
from kotoba_capture.services.generation.gemini_text_generator import GeminiTextGenerator
from kotoba_capture.services.generation.json_response import parse_json_object

__all__ = [
    "TextGenerator",
    "GeminiTextGenerator",
    "parse_json_object",
]
