"""
Integration tests for the capture pipeline - full workflow validation.

Tests the complete journey through the composed pipeline:
1. Upload a photo twice → one OCR call, shared blob and transcript
2. Save the same word from both captures → one record, two links
3. Review it → level walks up and down the interval ladder
4. No API key → every backend step degrades to placeholders
"""

from datetime import datetime, timedelta, timezone

import pytest

from kotoba_capture import build_pipeline
from kotoba_capture.core import GeneratedLesson
from kotoba_capture.io import InMemoryBlobStore
from kotoba_capture.services import PLACEHOLDER_EXTRACTION, SettingsManager

NOW = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
PHOTO = b"\x89PNG same photo twice"

SETTING_KEYS = (
    "GEMINI_API_KEY",
    "KOTOBA_MODEL",
    "KOTOBA_REQUEST_TIMEOUT",
    "KOTOBA_DUE_PAGE_SIZE",
    "KOTOBA_DISTRACTOR_POOL_SIZE",
    "KOTOBA_REVIEW_MODE",
)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    for key in SETTING_KEYS:
        monkeypatch.delenv(key, raising=False)
    return SettingsManager(project_root=tmp_path)


@pytest.fixture
def pipeline(tmp_path, settings, generator, extractor):
    pipeline = build_pipeline(
        settings=settings,
        db_path=tmp_path / "kotoba.db",
        blob_store=InMemoryBlobStore(),
        generator=generator,
        extractor=extractor,
    )
    yield pipeline
    pipeline.close()


def test_same_photo_twice_saves_one_word_and_reviews_it(pipeline, generator, extractor, make_lesson):
    generator.queue("Entrance")

    first = pipeline.process_upload("u1", PHOTO, extension="jpg")
    second = pipeline.process_upload("u1", PHOTO, extension="jpg")

    assert extractor.calls == 1
    assert first.id != second.id
    assert first.content_digest == second.content_digest
    assert first.blob_ref == second.blob_ref
    assert first.ocr_transcript == second.ocr_transcript == "入口"
    assert first.translation == "Entrance"

    generator.queue_json(make_lesson("入口"))
    lesson = pipeline.resolve_lesson("u1", "入口", first.ocr_transcript)
    assert isinstance(lesson, GeneratedLesson)

    item_a = pipeline.save_vocabulary("u1", lesson, capture_id=first.id)
    lesson_again = pipeline.resolve_lesson("u1", "入口", second.ocr_transcript)
    item_b = pipeline.save_vocabulary("u1", lesson_again, capture_id=second.id)

    assert item_a.id == item_b.id
    assert item_b.proficiency_level == 0
    assert not item_b.is_pending
    links = pipeline.list_captures_for_vocabulary("u1", item_a.id)
    assert {link.capture_id for link in links} == {first.id, second.id}
    assert [item.word for item in pipeline.list_vocabulary_for_capture("u1", second.id)] == ["入口"]

    result = pipeline.submit_review("u1", item_a.id, "correct", now=NOW)
    assert result.new_level == 1
    assert result.next_review_at == NOW + timedelta(minutes=10)

    result = pipeline.submit_review("u1", item_a.id, "correct", now=NOW)
    assert result.new_level == 2
    assert result.next_review_at == NOW + timedelta(days=1)

    result = pipeline.submit_review("u1", item_a.id, "incorrect", now=NOW)
    assert result.new_level == 1


def test_two_phase_selection_then_enrichment(pipeline, generator, make_lesson):
    capture = pipeline.ingest_capture("u1", PHOTO)
    capture = pipeline.extract_text("u1", capture.id)

    selected = pipeline.select_words("u1", ["入口"], capture_id=capture.id)
    assert selected[0].is_pending
    assert [item.id for item in pipeline.list_due("u1")] == [selected[0].id]

    generator.queue_json(make_lesson("入口"))
    enriched = pipeline.enrich_pending("u1", capture.ocr_transcript)

    assert enriched[0].meaning == "entrance"
    assert not enriched[0].is_pending
    assert pipeline.list_distractors("u1", exclude_id=enriched[0].id) == []


def test_owners_are_isolated(pipeline):
    capture = pipeline.ingest_capture("u1", PHOTO)
    other = pipeline.ingest_capture("u2", PHOTO)

    assert capture.blob_ref != other.blob_ref
    assert pipeline.list_vocabulary_for_capture("u2", capture.id) == []


def test_without_api_key_everything_degrades_to_placeholders(tmp_path, settings):
    pipeline = build_pipeline(
        settings=settings,
        db_path=tmp_path / "offline.db",
        blob_store=InMemoryBlobStore(),
    )
    try:
        capture = pipeline.process_upload("u1", b"not really an image")

        assert capture.ocr_is_placeholder
        assert capture.ocr_transcript == PLACEHOLDER_EXTRACTION.transcript
        assert capture.translation is None

        lessons = pipeline.resolve_lessons("u1", ["東京", "駅"], capture.ocr_transcript)
        assert all(lesson.draft.is_fallback for lesson in lessons.values())

        item = pipeline.save_vocabulary("u1", lessons["駅"], capture_id=capture.id)
        assert item.is_pending
        assert pipeline.conversations_for(["駅"]) == {}
    finally:
        pipeline.close()
