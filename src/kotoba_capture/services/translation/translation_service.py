"""Translation Service - JA→EN translation of capture transcripts."""

import logging
from dataclasses import dataclass
from typing import Optional

from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.services.generation import TextGenerator

logger = logging.getLogger(__name__)


@dataclass
class TranslationResult:
    """Result of a translation request."""

    text: str
    model: str
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        """True if translation failed."""
        return self.error is not None


class TranslationService:
    """
    Translates transcripts through the shared generative backend.

    Backend failures are returned as error results, never raised.
    """

    TRANSLATION_PROMPT = """You are a translator. Translate the Japanese text found on a sign or image to natural English.
Give a context-aware translation. If it is a menu or a sign, describe it briefly.
Only output the translation, nothing else.

Japanese text:
{text}"""

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    def translate(self, text: str) -> TranslationResult:
        """
        Translate Japanese text to English.

        Args:
            text: Japanese text to translate.

        Returns:
            TranslationResult with translated text or error message.
        """
        model = self._generator.model_name
        if not text or not text.strip():
            return TranslationResult(text="", model=model, error="No text to translate")

        try:
            translated = self._generator.complete(self.TRANSLATION_PROMPT.format(text=text.strip()))
        except BackendUnavailableError as e:
            logger.warning("Translation failed: %s", e)
            return TranslationResult(text="", model=model, error=str(e))

        return TranslationResult(text=translated.strip(), model=model)
