"""Fallback lesson used when the generative backend gives no answer for a word."""

from dataclasses import dataclass

from kotoba_capture.core import LessonDraft


@dataclass(frozen=True)
class FallbackLesson:
    """Deterministic stand-in lesson fields.

    Drafts built from it carry no enrichment data, so the saved record
    stays pending and is picked up again by the next enrichment pass.
    """

    reading: str = ""
    meaning: str = ""
    example_sentence: str = ""
    example_translation: str = ""

    def for_word(self, word: str) -> LessonDraft:
        return LessonDraft(
            word=word,
            reading=self.reading,
            meaning=self.meaning,
            example_sentence=self.example_sentence,
            example_translation=self.example_translation,
            enriched_data=None,
            is_fallback=True,
        )


FALLBACK_LESSON = FallbackLesson()
