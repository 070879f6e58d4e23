"""Shape detection and normalization of batched lesson responses.

The backend answers with a JSON object keyed by requested word, except
that a one-word request sometimes comes back as the bare lesson object.
``detect_shape`` decides which of the two it got before any field is read.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Union

from kotoba_capture.core import LessonDraft
from kotoba_capture.services.lessons.fallback import FallbackLesson
from kotoba_capture.services.text_processing import normalize_word

# Keys that only appear on a lesson object, never as a requested word.
LESSON_KEYS = frozenset(
    {
        "currentKanji",
        "kanji",
        "word",
        "basicInfo",
        "meaning",
        "reading",
        "readings",
        "combinations",
        "dialogue",
        "context_usage",
        "example",
    }
)

ENRICHMENT_KEYS = ("basicInfo", "readings", "combinations", "dialogue")

_EMPTY_MARKERS = {"none", "(none)", "n/a", "null", "undefined"}


@dataclass(frozen=True)
class PerWordMap:
    """Response keyed by requested word."""

    entries: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def lookup(self, word: str) -> Optional[Dict[str, Any]]:
        if word in self.entries:
            return self.entries[word]
        for key, entry in self.entries.items():
            if normalize_word(key) == word:
                return entry
        return None


@dataclass(frozen=True)
class SingleObject:
    """Bare lesson object answering a one-word request."""

    word: str
    entry: Dict[str, Any]

    def lookup(self, word: str) -> Optional[Dict[str, Any]]:
        return self.entry if word == self.word else None


LessonResponse = Union[PerWordMap, SingleObject]


def detect_shape(payload: Dict[str, Any], requested: Sequence[str]) -> LessonResponse:
    """Classify a decoded response as PerWordMap or SingleObject."""
    per_word = {key: value for key, value in payload.items() if isinstance(value, dict)}
    requested_keys = set(requested)
    if any(normalize_word(key) in requested_keys for key in per_word):
        return PerWordMap(entries=per_word)

    if len(requested) == 1 and LESSON_KEYS.intersection(payload):
        return SingleObject(word=requested[0], entry=payload)

    return PerWordMap(entries=per_word)


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    text = str(value).strip()
    return "" if text.lower() in _EMPTY_MARKERS else text


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _reading(entry: Dict[str, Any]) -> str:
    readings = _dict(entry.get("readings"))
    for key in ("on_reading", "kun_reading"):
        kana = _text(_dict(readings.get(key)).get("kana"))
        if kana:
            return kana

    parts = [
        _text(_dict(readings.get(key)).get("kana"))
        for key in ("onyomi", "kunyomi")
    ]
    joined = " / ".join(p for p in parts if p)
    return joined or _text(entry.get("reading"))


def _example(entry: Dict[str, Any]):
    usage = _dict(entry.get("context_usage")) or _dict(entry.get("example"))
    sentence = _text(usage.get("sentence")) or _text(usage.get("japanese"))
    translation = _text(usage.get("english")) or _text(usage.get("translation"))
    if sentence:
        return sentence, translation, _text(usage.get("reading"))

    dialogue = entry.get("dialogue")
    if isinstance(dialogue, list) and dialogue:
        first = _dict(dialogue[0])
        return _text(first.get("japanese")), _text(first.get("english")), _text(first.get("romaji"))
    return "", "", ""


def normalize_lesson(word: str, entry: Dict[str, Any], fallback: FallbackLesson) -> LessonDraft:
    """Map provider field names onto a LessonDraft for ``word``.

    The requested word always wins over whatever word the provider echoes.
    An entry that carries no lesson content at all yields the fallback
    draft, so the record stays pending.
    """
    basic_info = _dict(entry.get("basicInfo"))
    meaning = _text(basic_info.get("meaning")) or _text(entry.get("meaning"))
    sentence, translation, sentence_reading = _example(entry)
    reading = _reading(entry)

    enriched: Dict[str, Any] = {
        key: entry[key] for key in ENRICHMENT_KEYS if entry.get(key) is not None
    }
    has_content = any(entry.get(key) for key in ENRICHMENT_KEYS)
    if not (has_content or reading or meaning or sentence):
        return fallback.for_word(word)
    if sentence_reading:
        enriched["exampleReading"] = sentence_reading

    return LessonDraft(
        word=word,
        reading=reading or fallback.reading,
        meaning=meaning or fallback.meaning,
        example_sentence=sentence or fallback.example_sentence,
        example_translation=translation or fallback.example_translation,
        enriched_data=enriched,
    )
