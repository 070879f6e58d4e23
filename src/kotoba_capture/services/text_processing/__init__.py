"""Text processing services - normalization and request validation."""

from kotoba_capture.services.text_processing.text_normalization import (
    normalize_text,
    normalize_word,
    normalize_word_list,
    require_owner,
)

__all__ = [
    "normalize_text",
    "normalize_word",
    "normalize_word_list",
    "require_owner",
]
