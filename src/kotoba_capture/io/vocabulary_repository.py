"""Data access layer for vocabulary records and their capture links."""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from kotoba_capture.core import (
    CaptureVocabularyLink,
    LessonDraft,
    VocabularyItem,
    VocabularySource,
    from_db_timestamp,
    to_db_timestamp,
    utc_now,
)
from kotoba_capture.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = """
    id, owner_id, word, reading, meaning, example_sentence, example_translation,
    enriched_data, proficiency_level, next_review_at, source, created_at
"""

# Stay well below SQLite's bound-parameter limit.
_IN_CHUNK = 500


class VocabularyRepository:
    """Manages persistence of vocabulary items and capture links.

    Uniqueness of ``(owner_id, word)`` and of ``(vocabulary_id, capture_id)``
    is enforced by the schema; the write paths here turn constraint
    violations into "already exists" answers instead of errors.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        if connection is None:
            raise StorageError("Database connection required")
        self.connection = connection
        self.connection.row_factory = sqlite3.Row

    def get(self, owner_id: str, vocabulary_id: str) -> VocabularyItem:
        """Fetch one item.

        Raises:
            NotFoundError: If the owner has no item with that id.
        """
        cur = self.connection.execute(
            f"SELECT {_ITEM_COLUMNS} FROM vocabulary_items WHERE id = ? AND owner_id = ?",
            (vocabulary_id, owner_id),
        )
        row = cur.fetchone()
        if row is None:
            raise NotFoundError(f"Vocabulary item not found: {vocabulary_id}")
        return self._row_to_item(row)

    def find_by_word(self, owner_id: str, word: str) -> Optional[VocabularyItem]:
        cur = self.connection.execute(
            f"SELECT {_ITEM_COLUMNS} FROM vocabulary_items WHERE owner_id = ? AND word = ?",
            (owner_id, word),
        )
        row = cur.fetchone()
        return self._row_to_item(row) if row else None

    def find_by_words(self, owner_id: str, words: Iterable[str]) -> Dict[str, VocabularyItem]:
        """Batched lookup of many words for one owner, keyed by word."""
        unique = list(dict.fromkeys(words))
        found: Dict[str, VocabularyItem] = {}
        for start in range(0, len(unique), _IN_CHUNK):
            chunk = unique[start:start + _IN_CHUNK]
            placeholders = ", ".join("?" for _ in chunk)
            cur = self.connection.execute(
                f"""
                SELECT {_ITEM_COLUMNS} FROM vocabulary_items
                WHERE owner_id = ? AND word IN ({placeholders})
                """,
                (owner_id, *chunk),
            )
            for row in cur.fetchall():
                item = self._row_to_item(row)
                found[item.word] = item
        return found

    def create(
        self,
        owner_id: str,
        draft: LessonDraft,
        source: VocabularySource = VocabularySource.SCAN,
        now: Optional[datetime] = None,
    ) -> Tuple[VocabularyItem, bool]:
        """Insert a new item at level 0, due immediately.

        Returns:
            ``(item, created)``. When another writer already holds the
            ``(owner_id, word)`` key the existing row is returned with
            ``created=False``.

        Raises:
            StorageError: If the write fails for any other reason.
        """
        now = now or utc_now()
        stamp = to_db_timestamp(now)
        item_id = str(uuid.uuid4())
        enriched = (
            json.dumps(draft.enriched_data, ensure_ascii=False)
            if draft.enriched_data is not None
            else None
        )
        try:
            with self.connection:
                self.connection.execute(
                    f"""
                    INSERT INTO vocabulary_items ({_ITEM_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
                    """,
                    (
                        item_id,
                        owner_id,
                        draft.word,
                        draft.reading,
                        draft.meaning,
                        draft.example_sentence,
                        draft.example_translation,
                        enriched,
                        stamp,
                        VocabularySource(source).value,
                        stamp,
                    ),
                )
        except sqlite3.IntegrityError as e:
            existing = self.find_by_word(owner_id, draft.word)
            if existing is None:
                logger.error("Vocabulary insert rejected for %r: %s", draft.word, e)
                raise StorageError(f"Failed to save vocabulary: {e}") from e
            logger.info("Word %r already saved for owner, merging", draft.word)
            return existing, False
        except sqlite3.Error as e:
            logger.error("Vocabulary insert failed for %r: %s", draft.word, e)
            raise StorageError(f"Failed to save vocabulary: {e}") from e
        return self.get(owner_id, item_id), True

    def fill_enrichment(self, owner_id: str, vocabulary_id: str, draft: LessonDraft) -> bool:
        """Write lesson fields onto a pending item in one statement.

        Only items whose ``enriched_data`` is still unset are touched, so
        concurrent fills write at most once.

        Returns:
            True if this call performed the fill.
        """
        if draft.enriched_data is None:
            return False
        try:
            with self.connection:
                cur = self.connection.execute(
                    """
                    UPDATE vocabulary_items
                    SET reading = ?, meaning = ?, example_sentence = ?,
                        example_translation = ?, enriched_data = ?
                    WHERE id = ? AND owner_id = ? AND enriched_data IS NULL
                    """,
                    (
                        draft.reading,
                        draft.meaning,
                        draft.example_sentence,
                        draft.example_translation,
                        json.dumps(draft.enriched_data, ensure_ascii=False),
                        vocabulary_id,
                        owner_id,
                    ),
                )
        except sqlite3.Error as e:
            logger.error("Enrichment write failed for %s: %s", vocabulary_id, e)
            raise StorageError(f"Failed to save enrichment: {e}") from e
        return cur.rowcount == 1

    def update_schedule(
        self, owner_id: str, vocabulary_id: str, level: int, next_review_at: datetime
    ) -> None:
        try:
            with self.connection:
                cur = self.connection.execute(
                    """
                    UPDATE vocabulary_items
                    SET proficiency_level = ?, next_review_at = ?
                    WHERE id = ? AND owner_id = ?
                    """,
                    (level, to_db_timestamp(next_review_at), vocabulary_id, owner_id),
                )
        except sqlite3.Error as e:
            logger.error("Schedule update failed for %s: %s", vocabulary_id, e)
            raise StorageError(f"Failed to update review schedule: {e}") from e
        if cur.rowcount == 0:
            raise NotFoundError(f"Vocabulary item not found: {vocabulary_id}")

    def add_link(self, owner_id: str, vocabulary_id: str, capture_id: str) -> bool:
        """Link an item to a capture. Returns False if the pair was already linked."""
        try:
            with self.connection:
                cur = self.connection.execute(
                    """
                    INSERT INTO capture_vocabulary_links (vocabulary_id, capture_id, owner_id, created_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(vocabulary_id, capture_id) DO NOTHING
                    """,
                    (vocabulary_id, capture_id, owner_id, to_db_timestamp(utc_now())),
                )
        except sqlite3.Error as e:
            logger.error("Link insert failed for %s/%s: %s", vocabulary_id, capture_id, e)
            raise StorageError(f"Failed to link vocabulary to capture: {e}") from e
        return cur.rowcount == 1

    def list_links(self, owner_id: str, vocabulary_id: str) -> List[CaptureVocabularyLink]:
        cur = self.connection.execute(
            """
            SELECT vocabulary_id, capture_id, owner_id FROM capture_vocabulary_links
            WHERE owner_id = ? AND vocabulary_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (owner_id, vocabulary_id),
        )
        return [
            CaptureVocabularyLink(
                vocabulary_id=row["vocabulary_id"],
                capture_id=row["capture_id"],
                owner_id=row["owner_id"],
            )
            for row in cur.fetchall()
        ]

    def list_for_capture(self, owner_id: str, capture_id: str) -> List[VocabularyItem]:
        cur = self.connection.execute(
            f"""
            SELECT {_ITEM_COLUMNS} FROM vocabulary_items
            WHERE owner_id = ? AND id IN (
                SELECT vocabulary_id FROM capture_vocabulary_links
                WHERE owner_id = ? AND capture_id = ?
            )
            ORDER BY created_at ASC, word ASC
            """,
            (owner_id, owner_id, capture_id),
        )
        return [self._row_to_item(row) for row in cur.fetchall()]

    def list_due(self, owner_id: str, now: datetime, limit: int) -> List[VocabularyItem]:
        cur = self.connection.execute(
            f"""
            SELECT {_ITEM_COLUMNS} FROM vocabulary_items
            WHERE owner_id = ? AND next_review_at <= ?
            ORDER BY next_review_at ASC, created_at ASC
            LIMIT ?
            """,
            (owner_id, to_db_timestamp(now), limit),
        )
        return [self._row_to_item(row) for row in cur.fetchall()]

    def list_recent(
        self, owner_id: str, limit: int, exclude_id: Optional[str] = None
    ) -> List[VocabularyItem]:
        cur = self.connection.execute(
            f"""
            SELECT {_ITEM_COLUMNS} FROM vocabulary_items
            WHERE owner_id = ? AND id != ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (owner_id, exclude_id or "", limit),
        )
        return [self._row_to_item(row) for row in cur.fetchall()]

    def list_pending(self, owner_id: str, limit: int) -> List[VocabularyItem]:
        cur = self.connection.execute(
            f"""
            SELECT {_ITEM_COLUMNS} FROM vocabulary_items
            WHERE owner_id = ? AND enriched_data IS NULL
            ORDER BY created_at ASC, rowid ASC
            LIMIT ?
            """,
            (owner_id, limit),
        )
        return [self._row_to_item(row) for row in cur.fetchall()]

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> VocabularyItem:
        enriched_raw = row["enriched_data"]
        return VocabularyItem(
            id=row["id"],
            owner_id=row["owner_id"],
            word=row["word"],
            reading=row["reading"],
            meaning=row["meaning"],
            example_sentence=row["example_sentence"],
            example_translation=row["example_translation"],
            enriched_data=json.loads(enriched_raw) if enriched_raw is not None else None,
            proficiency_level=row["proficiency_level"],
            next_review_at=from_db_timestamp(row["next_review_at"]),
            source=VocabularySource(row["source"]),
            created_at=from_db_timestamp(row["created_at"]),
        )
