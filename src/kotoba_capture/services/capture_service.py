"""Capture Service - content-addressed ingest, lazy OCR and translation.

Uploads are hashed with SHA-256. Re-uploading the same bytes reuses the
stored blob and any OCR output recorded for that digest, while still
creating a new capture row for the new sighting.
"""

import hashlib
import logging
import uuid
from typing import List, Optional

from kotoba_capture.core import Capture, GeoPoint, utc_now
from kotoba_capture.exceptions import InputError, NotFoundError, StorageError
from kotoba_capture.io import BlobStore, CaptureRepository
from kotoba_capture.services.text_extraction import TextExtractor
from kotoba_capture.services.text_processing import require_owner
from kotoba_capture.services.translation import TranslationService

logger = logging.getLogger(__name__)


def compute_digest(image_bytes: bytes) -> str:
    """Hex SHA-256 of the raw upload."""
    return hashlib.sha256(image_bytes).hexdigest()


class CaptureService:
    """Application service for capture ingest and enrichment.

    Depends on CaptureRepository for rows, BlobStore for bytes,
    TextExtractor for OCR and TranslationService for translations.
    """

    def __init__(
        self,
        captures: CaptureRepository,
        blobs: BlobStore,
        extractor: TextExtractor,
        translator: TranslationService,
    ) -> None:
        self._captures = captures
        self._blobs = blobs
        self._extractor = extractor
        self._translator = translator

    def ingest(
        self,
        owner_id: str,
        image_bytes: bytes,
        geo: Optional[GeoPoint] = None,
        extension: str = "",
    ) -> Capture:
        """Store an upload and create a capture row for it.

        Args:
            owner_id: Authenticated uploader.
            image_bytes: Raw image bytes.
            geo: Optional location of the sighting.
            extension: Optional file extension for the stored blob.

        Returns:
            The new Capture. OCR fields are pre-filled when the same bytes
            were already recognised for this owner.

        Raises:
            InputError: If the owner or the file is missing.
            StorageError: If the blob or the row cannot be written.
        """
        owner_id = require_owner(owner_id)
        if not isinstance(image_bytes, (bytes, bytearray)) or not image_bytes:
            raise InputError("No file uploaded")
        image_bytes = bytes(image_bytes)

        digest = compute_digest(image_bytes)
        self._blobs.make_ref(owner_id, digest, extension)
        existing = self._captures.find_by_digest(owner_id, digest)
        if existing is not None:
            logger.info("Duplicate image %s found, reusing blob %s", digest[:12], existing.blob_ref)
            blob_ref = existing.blob_ref
        else:
            blob_ref = self._blobs.put(owner_id, digest, image_bytes, extension)

        cached = self._captures.get_cached_ocr(owner_id, digest)
        if cached is not None:
            logger.info("Reusing OCR result for digest %s", digest[:12])

        capture = Capture(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            content_digest=digest,
            blob_ref=blob_ref,
            created_at=utc_now(),
            ocr_transcript=cached.transcript if cached else None,
            ocr_detections=list(cached.detections) if cached else None,
            latitude=geo.latitude if geo else None,
            longitude=geo.longitude if geo else None,
        )
        return self._captures.insert(capture)

    def extract_text(self, owner_id: str, capture_id: str) -> Capture:
        """Make sure a capture carries OCR output, running OCR at most once per digest.

        Raises:
            NotFoundError: If the owner has no such capture.
            StorageError: If the blob cannot be read or the result not saved.
        """
        owner_id = require_owner(owner_id)
        capture = self._captures.get(owner_id, capture_id)
        if capture.has_ocr:
            return capture

        cached = self._captures.get_cached_ocr(owner_id, capture.content_digest)
        if cached is not None:
            logger.info("Reusing OCR result for digest %s", capture.content_digest[:12])
            return self._captures.set_ocr(owner_id, capture_id, cached)

        try:
            image_bytes = self._blobs.get(capture.blob_ref)
        except NotFoundError as e:
            logger.error("Blob %s missing for capture %s", capture.blob_ref, capture_id)
            raise StorageError(f"Stored image is missing: {capture.blob_ref}") from e

        result = self._extractor.extract(image_bytes)
        if result.is_placeholder:
            logger.warning("Capture %s received placeholder OCR", capture_id)
        else:
            self._captures.put_cached_ocr(owner_id, capture.content_digest, result)
        return self._captures.set_ocr(owner_id, capture_id, result)

    def ensure_translation(self, owner_id: str, capture_id: str) -> Optional[str]:
        """Return the capture's translation, generating it once if needed.

        Returns None when there is no transcript or the backend fails.
        """
        owner_id = require_owner(owner_id)
        capture = self._captures.get(owner_id, capture_id)
        if capture.translation:
            return capture.translation
        if not capture.ocr_transcript:
            return None

        result = self._translator.translate(capture.ocr_transcript)
        if result.is_error or not result.text:
            logger.warning("Translation for capture %s left unset: %s", capture_id, result.error)
            return None

        return self._captures.set_translation(owner_id, capture_id, result.text).translation

    def get_capture(self, owner_id: str, capture_id: str) -> Capture:
        return self._captures.get(require_owner(owner_id), capture_id)

    def list_recent(self, owner_id: str, limit: int = 20) -> List[Capture]:
        return self._captures.list_recent(require_owner(owner_id), limit)
