"""SQLite-backed persistence for captures, OCR results and vocabulary."""

import logging
import sqlite3
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


class DatabaseManager:
    """Owns the SQLite connection and schema.

    Every table carries an ``owner_id`` column; repositories scope every
    query by it.
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)
        if str(db_path) != IN_MEMORY:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(str(db_path))
        self.connection.row_factory = sqlite3.Row
        self.connection.execute("PRAGMA foreign_keys = ON;")

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        cur = self.connection.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS captures (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                content_digest TEXT NOT NULL,
                blob_ref TEXT NOT NULL,
                ocr_transcript TEXT,
                ocr_detections TEXT,
                ocr_is_placeholder INTEGER NOT NULL DEFAULT 0,
                translation TEXT,
                latitude REAL,
                longitude REAL,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS ocr_results (
                owner_id TEXT NOT NULL,
                content_digest TEXT NOT NULL,
                transcript TEXT NOT NULL,
                detections TEXT NOT NULL DEFAULT '[]',
                created_at TEXT NOT NULL,
                PRIMARY KEY(owner_id, content_digest)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS vocabulary_items (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                word TEXT NOT NULL,
                reading TEXT NOT NULL DEFAULT '',
                meaning TEXT NOT NULL DEFAULT '',
                example_sentence TEXT NOT NULL DEFAULT '',
                example_translation TEXT NOT NULL DEFAULT '',
                enriched_data TEXT,
                proficiency_level INTEGER NOT NULL DEFAULT 0 CHECK(proficiency_level >= 0),
                next_review_at TEXT NOT NULL,
                source TEXT NOT NULL DEFAULT 'scan',
                created_at TEXT NOT NULL,
                UNIQUE(owner_id, word)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS capture_vocabulary_links (
                vocabulary_id TEXT NOT NULL,
                capture_id TEXT NOT NULL,
                owner_id TEXT NOT NULL,
                created_at TEXT NOT NULL,

                FOREIGN KEY(vocabulary_id) REFERENCES vocabulary_items(id) ON DELETE CASCADE,
                FOREIGN KEY(capture_id) REFERENCES captures(id) ON DELETE CASCADE,
                PRIMARY KEY(vocabulary_id, capture_id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS word_conversations (
                word TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_captures_owner_digest
            ON captures(owner_id, content_digest);
            """
        )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_vocabulary_owner_due
            ON vocabulary_items(owner_id, next_review_at);
            """
        )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_links_capture
            ON capture_vocabulary_links(capture_id);
            """
        )
        self.connection.commit()
        logger.debug("Schema ensured at %s", self.db_path)

    def close(self) -> None:
        self.connection.close()
