"""Data access layer for captures and the digest-keyed OCR cache."""

import json
import logging
import sqlite3
from typing import List, Optional

from kotoba_capture.core import (
    Capture,
    ExtractionResult,
    TextDetection,
    from_db_timestamp,
    to_db_timestamp,
    utc_now,
)
from kotoba_capture.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)

_CAPTURE_COLUMNS = """
    id, owner_id, content_digest, blob_ref, ocr_transcript, ocr_detections,
    ocr_is_placeholder, translation, latitude, longitude, created_at
"""


def _dump_detections(detections) -> str:
    return json.dumps([d.to_dict() for d in detections], ensure_ascii=False)


def _load_detections(raw: Optional[str]) -> List[TextDetection]:
    return [TextDetection.from_dict(d) for d in json.loads(raw or "[]")]


class CaptureRepository:
    """Manages persistence of capture rows and cached OCR results.

    All reads and writes are scoped to an owner. A capture that belongs to
    someone else is reported exactly like a missing one.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        if connection is None:
            raise StorageError("Database connection required")
        self.connection = connection
        self.connection.row_factory = sqlite3.Row

    def insert(self, capture: Capture) -> Capture:
        """Persist a new capture row.

        Raises:
            StorageError: If the database write fails.
        """
        detections = (
            _dump_detections(capture.ocr_detections)
            if capture.ocr_detections is not None
            else None
        )
        try:
            with self.connection:
                self.connection.execute(
                    f"""
                    INSERT INTO captures ({_CAPTURE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        capture.id,
                        capture.owner_id,
                        capture.content_digest,
                        capture.blob_ref,
                        capture.ocr_transcript,
                        detections,
                        int(capture.ocr_is_placeholder),
                        capture.translation,
                        capture.latitude,
                        capture.longitude,
                        to_db_timestamp(capture.created_at),
                    ),
                )
        except sqlite3.Error as e:
            logger.error("Failed to insert capture %s: %s", capture.id, e)
            raise StorageError(f"Failed to save capture: {e}") from e
        return self.get(capture.owner_id, capture.id)

    def get(self, owner_id: str, capture_id: str) -> Capture:
        """Fetch one capture.

        Raises:
            NotFoundError: If the owner has no capture with that id.
        """
        cur = self.connection.execute(
            f"SELECT {_CAPTURE_COLUMNS} FROM captures WHERE id = ? AND owner_id = ?",
            (capture_id, owner_id),
        )
        row = cur.fetchone()
        if row is None:
            raise NotFoundError(f"Capture not found: {capture_id}")
        return self._row_to_capture(row)

    def find_by_digest(self, owner_id: str, content_digest: str) -> Optional[Capture]:
        """Return the oldest capture with this digest that has a stored blob."""
        cur = self.connection.execute(
            f"""
            SELECT {_CAPTURE_COLUMNS} FROM captures
            WHERE owner_id = ? AND content_digest = ? AND blob_ref != ''
            ORDER BY created_at ASC, rowid ASC
            LIMIT 1
            """,
            (owner_id, content_digest),
        )
        row = cur.fetchone()
        return self._row_to_capture(row) if row else None

    def list_recent(self, owner_id: str, limit: int = 20) -> List[Capture]:
        cur = self.connection.execute(
            f"""
            SELECT {_CAPTURE_COLUMNS} FROM captures
            WHERE owner_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (owner_id, limit),
        )
        return [self._row_to_capture(row) for row in cur.fetchall()]

    def set_ocr(self, owner_id: str, capture_id: str, result: ExtractionResult) -> Capture:
        """Store OCR output on a capture that has none yet.

        A capture that already carries OCR output keeps it.
        """
        try:
            with self.connection:
                self.connection.execute(
                    """
                    UPDATE captures
                    SET ocr_transcript = ?, ocr_detections = ?, ocr_is_placeholder = ?
                    WHERE id = ? AND owner_id = ? AND ocr_transcript IS NULL
                    """,
                    (
                        result.transcript,
                        _dump_detections(result.detections),
                        int(result.is_placeholder),
                        capture_id,
                        owner_id,
                    ),
                )
        except sqlite3.Error as e:
            logger.error("Failed to store OCR for capture %s: %s", capture_id, e)
            raise StorageError(f"Failed to save OCR result: {e}") from e
        return self.get(owner_id, capture_id)

    def set_translation(self, owner_id: str, capture_id: str, translation: str) -> Capture:
        try:
            with self.connection:
                self.connection.execute(
                    """
                    UPDATE captures SET translation = ?
                    WHERE id = ? AND owner_id = ? AND translation IS NULL
                    """,
                    (translation, capture_id, owner_id),
                )
        except sqlite3.Error as e:
            logger.error("Failed to store translation for capture %s: %s", capture_id, e)
            raise StorageError(f"Failed to save translation: {e}") from e
        return self.get(owner_id, capture_id)

    # OCR cache keyed by content digest

    def get_cached_ocr(self, owner_id: str, content_digest: str) -> Optional[ExtractionResult]:
        cur = self.connection.execute(
            """
            SELECT transcript, detections FROM ocr_results
            WHERE owner_id = ? AND content_digest = ?
            """,
            (owner_id, content_digest),
        )
        row = cur.fetchone()
        if row is None:
            return None
        return ExtractionResult.from_detections(row["transcript"], _load_detections(row["detections"]))

    def put_cached_ocr(self, owner_id: str, content_digest: str, result: ExtractionResult) -> bool:
        """Record OCR output for a digest. Returns False if one was already stored."""
        try:
            with self.connection:
                cur = self.connection.execute(
                    """
                    INSERT INTO ocr_results (owner_id, content_digest, transcript, detections, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(owner_id, content_digest) DO NOTHING
                    """,
                    (
                        owner_id,
                        content_digest,
                        result.transcript,
                        _dump_detections(result.detections),
                        to_db_timestamp(utc_now()),
                    ),
                )
        except sqlite3.Error as e:
            logger.error("Failed to cache OCR for digest %s: %s", content_digest, e)
            raise StorageError(f"Failed to cache OCR result: {e}") from e
        return cur.rowcount == 1

    @staticmethod
    def _row_to_capture(row: sqlite3.Row) -> Capture:
        raw_detections = row["ocr_detections"]
        return Capture(
            id=row["id"],
            owner_id=row["owner_id"],
            content_digest=row["content_digest"],
            blob_ref=row["blob_ref"],
            ocr_transcript=row["ocr_transcript"],
            ocr_detections=_load_detections(raw_detections) if raw_detections is not None else None,
            ocr_is_placeholder=bool(row["ocr_is_placeholder"]),
            translation=row["translation"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            created_at=from_db_timestamp(row["created_at"]),
        )
