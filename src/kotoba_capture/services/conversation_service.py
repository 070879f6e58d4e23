"""Conversation Service - short A/B example dialogues per word, cached globally."""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List

from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.io import ConversationCache
from kotoba_capture.services.generation import TextGenerator, parse_json_object
from kotoba_capture.services.lessons import detect_shape
from kotoba_capture.services.text_processing import normalize_word_list

logger = logging.getLogger(__name__)


@dataclass
class ConversationLine:
    speaker: str
    japanese: str
    romaji: str = ""
    english: str = ""


@dataclass
class Conversation:
    word: str
    reading: str = ""
    meaning: str = ""
    dialogue: List[ConversationLine] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, word: str, data: Dict[str, Any]) -> "Conversation":
        lines = []
        for line in data.get("dialogue") or []:
            if not isinstance(line, dict) or not line.get("japanese"):
                continue
            lines.append(
                ConversationLine(
                    speaker=str(line.get("speaker") or ""),
                    japanese=str(line["japanese"]),
                    romaji=str(line.get("romaji") or ""),
                    english=str(line.get("english") or ""),
                )
            )
        return cls(
            word=word,
            reading=str(data.get("reading") or ""),
            meaning=str(data.get("meaning") or ""),
            dialogue=lines,
        )


class ConversationService:
    """Serves cached conversations and generates the missing ones in one call.

    A backend failure returns whatever was cached; nothing is raised.
    """

    CONVERSATION_PROMPT = """Generate a distinct conversation scenario for EACH of the following Japanese words:
{words}

For each word, create a specific scenario where that word is used naturally.

Requirements:
1. Characters: two speakers, "A" and "B".
2. Length: exactly one line per speaker.
3. Content: a simple, daily life interaction.
4. Output: a JSON object whose keys are the input words.

Format per word:
{{
  "reading": "kana reading of the word",
  "meaning": "English meaning",
  "dialogue": [
    {{"speaker": "A", "japanese": "JP text", "romaji": "romaji", "english": "English translation"}},
    {{"speaker": "B", "japanese": "JP text", "romaji": "romaji", "english": "English translation"}}
  ]
}}"""

    def __init__(self, cache: ConversationCache, generator: TextGenerator) -> None:
        self._cache = cache
        self._generator = generator

    def conversations_for(self, words: Iterable[str]) -> Dict[str, Conversation]:
        requested = normalize_word_list(words)
        cached = self._cache.get_many(requested)
        result = {word: Conversation.from_dict(word, cached[word]) for word in requested if word in cached}

        missing = [word for word in requested if word not in cached]
        if not missing:
            return result

        logger.info("Generating conversations for %d missing words", len(missing))
        try:
            raw = self._generator.complete(
                self.CONVERSATION_PROMPT.format(words=json.dumps(missing, ensure_ascii=False)),
                json_output=True,
            )
            payload = parse_json_object(raw)
        except (BackendUnavailableError, ValueError) as e:
            logger.warning("Conversation generation failed: %s", e)
            return result

        response = detect_shape(payload, missing)
        generated: Dict[str, Conversation] = {}
        for word in missing:
            entry = response.lookup(word)
            if entry is None:
                continue
            conversation = Conversation.from_dict(word, entry)
            if conversation.dialogue:
                generated[word] = conversation

        self._cache.put_many({word: c.to_dict() for word, c in generated.items()})
        result.update(generated)
        return {word: result[word] for word in requested if word in result}
