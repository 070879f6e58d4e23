import sqlite3

import pytest

from kotoba_capture.io import DatabaseManager


def test_schema_created(db):
    cur = db.connection.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
    table_names = {row["name"] for row in cur.fetchall()}
    assert {
        "captures",
        "ocr_results",
        "vocabulary_items",
        "capture_vocabulary_links",
        "word_conversations",
    }.issubset(table_names)


def test_ensure_schema_is_repeatable(db):
    db.ensure_schema()
    db.ensure_schema()


def test_owner_word_uniqueness_enforced_by_schema(db):
    insert = """
        INSERT INTO vocabulary_items (id, owner_id, word, next_review_at, created_at)
        VALUES (?, 'u1', '駅', '2026-01-01T00:00:00.000000+00:00', '2026-01-01T00:00:00.000000+00:00')
    """
    db.connection.execute(insert, ("a",))
    with pytest.raises(sqlite3.IntegrityError):
        db.connection.execute(insert, ("b",))


def test_in_memory_database(tmp_path):
    manager = DatabaseManager(":memory:")
    manager.ensure_schema()
    manager.close()
    assert not (tmp_path / ":memory:").exists()


def test_creates_parent_directory(tmp_path):
    manager = DatabaseManager(tmp_path / "nested" / "dir" / "kotoba.db")
    manager.ensure_schema()
    manager.close()
    assert (tmp_path / "nested" / "dir" / "kotoba.db").exists()
