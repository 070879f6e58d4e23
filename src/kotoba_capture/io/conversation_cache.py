"""Global word -> example conversation cache stored in SQLite."""

import json
import logging
import sqlite3
from typing import Any, Dict, Iterable

from kotoba_capture.core import to_db_timestamp, utc_now
from kotoba_capture.exceptions import StorageError

logger = logging.getLogger(__name__)


class ConversationCache:
    """Shared across owners: a conversation depends only on the word."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        if connection is None:
            raise StorageError("Database connection required")
        self.connection = connection
        self.connection.row_factory = sqlite3.Row

    def get_many(self, words: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        unique = list(dict.fromkeys(words))
        if not unique:
            return {}
        placeholders = ", ".join("?" for _ in unique)
        cur = self.connection.execute(
            f"SELECT word, data FROM word_conversations WHERE word IN ({placeholders})",
            unique,
        )
        return {row["word"]: json.loads(row["data"]) for row in cur.fetchall()}

    def put_many(self, entries: Dict[str, Dict[str, Any]]) -> None:
        if not entries:
            return
        stamp = to_db_timestamp(utc_now())
        try:
            with self.connection:
                self.connection.executemany(
                    """
                    INSERT INTO word_conversations (word, data, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(word) DO UPDATE SET
                        data = excluded.data,
                        updated_at = excluded.updated_at
                    """,
                    [
                        (word, json.dumps(data, ensure_ascii=False), stamp)
                        for word, data in entries.items()
                    ],
                )
        except sqlite3.Error as e:
            logger.error("Conversation cache write failed: %s", e)
            raise StorageError(f"Failed to cache conversations: {e}") from e
