"""Shared fixtures: temporary databases and fake backends."""

import json

import pytest

from kotoba_capture.core import ExtractionResult, TextDetection
from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.io import (
    CaptureRepository,
    DatabaseManager,
    InMemoryBlobStore,
    VocabularyRepository,
)
from kotoba_capture.services import TextExtractor, TextGenerator


class FakeGenerator(TextGenerator):
    """Returns queued responses; an Exception instance in the queue is raised."""

    model_name = "fake-model"

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def queue(self, response):
        self.responses.append(response)

    def queue_json(self, payload):
        self.responses.append(json.dumps(payload, ensure_ascii=False))

    @property
    def calls(self):
        return len(self.prompts)

    def complete(self, prompt, json_output=False):
        self.prompts.append(prompt)
        if not self.responses:
            raise BackendUnavailableError("no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeExtractor(TextExtractor):
    def __init__(self, result=None):
        self.result = result or ExtractionResult(
            transcript="入口",
            detections=(TextDetection("入口", ((0, 0), (40, 0), (40, 20), (0, 20))),),
        )
        self.calls = 0

    def extract(self, image_bytes):
        self.calls += 1
        return self.result


def lesson_payload(word, meaning="entrance", reading="いりぐち"):
    return {
        "currentKanji": word,
        "basicInfo": {"meaning": meaning, "radical": "入"},
        "readings": {"kunyomi": {"kana": reading, "note": ""}},
        "combinations": [],
        "dialogue": [
            {"speaker": "A", "japanese": f"{word}はどこですか。", "english": "Where is it?"},
            {"speaker": "B", "japanese": "あちらです。", "english": "Over there."},
        ],
        "context_usage": {"sentence": f"{word}はどこですか。", "reading": "", "english": "Where is it?"},
    }


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(tmp_path / "kotoba.db")
    manager.ensure_schema()
    yield manager
    manager.close()


@pytest.fixture
def capture_repo(db):
    return CaptureRepository(db.connection)


@pytest.fixture
def vocab_repo(db):
    return VocabularyRepository(db.connection)


@pytest.fixture
def blobs():
    return InMemoryBlobStore()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def make_lesson():
    return lesson_payload
