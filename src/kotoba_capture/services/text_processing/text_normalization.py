"""Text normalization utilities for consistent word and cache keying."""

import re
import unicodedata
from typing import Iterable, List

from kotoba_capture.exceptions import InputError


def normalize_text(text: str) -> str:
    """
    Normalize Japanese text for consistent cache keying.

    Rules:
    - Trim leading and trailing whitespace
    - Collapse runs of whitespace (spaces, tabs, newlines) to single spaces
    - Preserve Japanese characters, punctuation, and emoji as-is

    Args:
        text: Original text to normalize.

    Returns:
        Normalized text string.
    """
    text = text.strip()
    text = re.sub(r'\s+', ' ', text)
    return text


def normalize_word(word: str) -> str:
    """
    Normalize one selected word into its storage key.

    NFKC folds half-width katakana and full-width latin produced by OCR,
    then whitespace is removed entirely (a word never contains spaces).
    """
    word = unicodedata.normalize("NFKC", word)
    return re.sub(r'\s+', '', word)


def normalize_word_list(words: Iterable[str]) -> List[str]:
    """
    Validate and normalize a word selection, keeping first-seen order.

    Raises:
        InputError: If ``words`` is not a collection of strings or holds
            no non-blank word.
    """
    if words is None or isinstance(words, (str, bytes)):
        raise InputError("Word list must be a collection of strings")

    normalized: List[str] = []
    seen = set()
    for word in words:
        if not isinstance(word, str):
            raise InputError(f"Word list contains a non-string value: {word!r}")
        key = normalize_word(word)
        if key and key not in seen:
            seen.add(key)
            normalized.append(key)

    if not normalized:
        raise InputError("Word list is empty")
    return normalized


def require_owner(owner_id: str) -> str:
    """Reject calls without an authenticated owner."""
    if not isinstance(owner_id, str) or not owner_id.strip():
        raise InputError("An authenticated owner is required")
    return owner_id.strip()
