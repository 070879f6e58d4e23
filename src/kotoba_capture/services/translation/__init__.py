"""Translation services - transcript translation over the generative backend."""

from kotoba_capture.services.translation.translation_service import TranslationService, TranslationResult

__all__ = [
    "TranslationService",
    "TranslationResult",
]
