"""Unit tests for ConversationService."""

import pytest

from kotoba_capture.io import ConversationCache
from kotoba_capture.services import Conversation, ConversationService


def convo(word):
    return {
        "reading": "えき",
        "meaning": "station",
        "dialogue": [
            {"speaker": "A", "japanese": f"{word}はどこ？", "romaji": "", "english": "Where is it?"},
            {"speaker": "B", "japanese": "あそこです。", "romaji": "asoko desu", "english": "Over there."},
        ],
    }


@pytest.fixture
def cache(db):
    return ConversationCache(db.connection)


@pytest.fixture
def service(cache, generator):
    return ConversationService(cache, generator)


def test_missing_words_generated_in_one_call_and_cached(service, cache, generator):
    generator.queue_json({"駅": convo("駅"), "東京": convo("東京")})

    result = service.conversations_for(["駅", "東京"])

    assert generator.calls == 1
    assert list(result) == ["駅", "東京"]
    assert result["駅"].dialogue[1].romaji == "asoko desu"
    assert set(cache.get_many(["駅", "東京"])) == {"駅", "東京"}


def test_cached_words_need_no_call(service, cache, generator):
    cache.put_many({"駅": convo("駅")})

    result = service.conversations_for(["駅"])

    assert generator.calls == 0
    assert result["駅"].meaning == "station"


def test_only_missing_words_are_requested(service, cache, generator):
    cache.put_many({"駅": convo("駅")})
    generator.queue_json(convo("東京"))

    result = service.conversations_for(["駅", "東京"])

    assert '"東京"' in generator.prompts[0]
    assert '"駅"' not in generator.prompts[0]
    assert list(result) == ["駅", "東京"]
    assert result["東京"].dialogue[0].japanese == "東京はどこ？"


def test_backend_failure_returns_cached_subset(service, cache):
    cache.put_many({"駅": convo("駅")})
    result = service.conversations_for(["駅", "東京"])
    assert list(result) == ["駅"]


def test_empty_dialogue_is_not_cached(service, cache, generator):
    generator.queue_json({"駅": {"reading": "えき", "dialogue": []}})

    assert service.conversations_for(["駅"]) == {}
    assert cache.get_many(["駅"]) == {}


def test_conversation_round_trips_through_dict():
    original = Conversation.from_dict("駅", convo("駅"))
    assert Conversation.from_dict("駅", original.to_dict()) == original
