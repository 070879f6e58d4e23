from datetime import datetime, timedelta, timezone

from kotoba_capture.core import (
    Capture,
    TextDetection,
    from_db_timestamp,
    to_db_timestamp,
)


def test_text_detection_dict_roundtrip_keeps_polygon():
    detection = TextDetection("駅", ((1.0, 2.0), (3.0, 2.0), (3.0, 4.0), (1.0, 4.0)))
    data = detection.to_dict()
    assert data["bounding_polygon"][2] == [3.0, 4.0]
    assert TextDetection.from_dict(data) == detection


def test_capture_without_ocr_has_no_extraction():
    capture = Capture(
        id="c1",
        owner_id="u1",
        content_digest="d",
        blob_ref="u1/d",
        created_at=datetime.now(timezone.utc),
    )
    assert not capture.has_ocr
    assert capture.extraction() is None


def test_db_timestamps_sort_chronologically():
    base = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    later = base + timedelta(microseconds=1)
    assert to_db_timestamp(base) < to_db_timestamp(later)


def test_naive_timestamps_are_treated_as_utc():
    naive = datetime(2026, 1, 1, 12, 0, 0)
    restored = from_db_timestamp(to_db_timestamp(naive))
    assert restored == naive.replace(tzinfo=timezone.utc)
    assert from_db_timestamp(None) is None
