"""Lesson Batch Generator - cache-first lesson resolution with one backend call per batch."""

import json
import logging
from typing import Dict, Iterable, List

from kotoba_capture.core import ExistingLesson, GeneratedLesson, LessonDraft, LessonResult
from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.io import VocabularyRepository
from kotoba_capture.services.generation import TextGenerator, parse_json_object
from kotoba_capture.services.lessons.fallback import FALLBACK_LESSON, FallbackLesson
from kotoba_capture.services.lessons.response_shapes import detect_shape, normalize_lesson
from kotoba_capture.services.text_processing import normalize_text, normalize_word_list, require_owner

logger = logging.getLogger(__name__)


class LessonBatchGenerator:
    """Resolves words to stored vocabulary or freshly generated lessons.

    Words the owner already has fully enriched are answered from the
    store. Everything else (unknown words and pending records) is
    generated in a single backend request that shares one context string.
    The result always holds exactly one entry per requested word.
    """

    CONTEXT_LIMIT = 300

    LESSON_PROMPT = """Analyze the following Japanese words: {words}.
Shared context: "{context}".

TASK: Create a detailed vocabulary card for each word.

Return one JSON object whose keys are exactly the words above. Each value:
{{
  "currentKanji": "the word itself",
  "basicInfo": {{
    "meaning": "English keywords separated by slashes",
    "radical": "root component"
  }},
  "readings": {{
    "onyomi": {{"kana": "katakana reading", "note": "usage note"}},
    "kunyomi": {{"kana": "hiragana reading", "note": "usage note"}}
  }},
  "combinations": [
    {{"word": "compound word", "reading": "reading", "meaning": "meaning", "targetKanji": "the other kanji in the compound"}}
  ],
  "dialogue": [
    {{"speaker": "A", "japanese": "sentence using the word", "english": "translation"}},
    {{"speaker": "B", "japanese": "response using the word", "english": "translation"}}
  ],
  "context_usage": {{"sentence": "one of the dialogue sentences", "reading": "romaji", "english": "translation"}}
}}

Rules:
1. Use the JSON keys exactly as given.
2. Provide exactly 5 combinations, each with "targetKanji".
3. The dialogue is a short A/B conversation."""

    def __init__(
        self,
        repository: VocabularyRepository,
        generator: TextGenerator,
        fallback: FallbackLesson = FALLBACK_LESSON,
    ) -> None:
        self._repository = repository
        self._generator = generator
        self._fallback = fallback

    def resolve(
        self, owner_id: str, words: Iterable[str], shared_context: str = ""
    ) -> Dict[str, LessonResult]:
        """
        Resolve every requested word to a lesson.

        Args:
            owner_id: Owner whose vocabulary is consulted.
            words: Selected words; normalized and de-duplicated.
            shared_context: Text the words were found in (e.g. the transcript).

        Returns:
            Mapping of normalized word to ExistingLesson or GeneratedLesson,
            in first-seen order.

        Raises:
            InputError: For a missing owner or an empty/malformed word list.
        """
        owner_id = require_owner(owner_id)
        requested = normalize_word_list(words)

        existing = self._repository.find_by_words(owner_id, requested)
        results: Dict[str, LessonResult] = {}
        to_generate: List[str] = []
        for word in requested:
            item = existing.get(word)
            if item is not None and not item.is_pending:
                results[word] = ExistingLesson(item)
            else:
                to_generate.append(word)

        if not to_generate:
            logger.debug("All %d words already known, no generation needed", len(requested))
            return results

        drafts = self.generate_drafts(to_generate, shared_context)
        for word in to_generate:
            results[word] = GeneratedLesson(drafts[word])

        return {word: results[word] for word in requested}

    def resolve_one(self, owner_id: str, word: str, shared_context: str = "") -> LessonResult:
        """Single-word convenience over the batch path."""
        results = self.resolve(owner_id, [word], shared_context)
        return next(iter(results.values()))

    def generate_drafts(self, words: List[str], shared_context: str = "") -> Dict[str, LessonDraft]:
        """
        Generate lessons for ``words`` with one backend call.

        Never raises for backend trouble: a failed call yields fallback
        drafts for all words, an omitted word yields a fallback draft.
        """
        prompt = self.LESSON_PROMPT.format(
            words=json.dumps(words, ensure_ascii=False),
            context=normalize_text(shared_context or "")[: self.CONTEXT_LIMIT],
        )
        try:
            raw = self._generator.complete(prompt, json_output=True)
            payload = parse_json_object(raw)
        except BackendUnavailableError as e:
            logger.warning("Lesson backend unavailable for %d words, using fallback: %s", len(words), e)
            return {word: self._fallback.for_word(word) for word in words}
        except ValueError as e:
            logger.warning("Lesson response unparsable for %d words, using fallback: %s", len(words), e)
            return {word: self._fallback.for_word(word) for word in words}

        response = detect_shape(payload, words)
        drafts: Dict[str, LessonDraft] = {}
        for word in words:
            entry = response.lookup(word)
            if entry is None:
                logger.warning("Lesson backend omitted %r, using fallback", word)
                drafts[word] = self._fallback.for_word(word)
            else:
                drafts[word] = normalize_lesson(word, entry, self._fallback)
        return drafts
