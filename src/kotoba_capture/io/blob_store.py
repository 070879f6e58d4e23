"""Content-addressed blob storage for uploaded images.

Blobs are keyed by owner and content digest, so writing the same bytes
twice yields the same reference.
"""

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from kotoba_capture.exceptions import InputError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

_EXTENSION = re.compile(r"\.?[A-Za-z0-9]{1,10}")


def _check_segment(value: str, label: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise InputError(f"Invalid {label} for blob path: {value!r}")
    return value


class BlobStore(ABC):
    """Abstract interface for storing raw image bytes."""

    @abstractmethod
    def put(self, owner_id: str, content_digest: str, data: bytes, extension: str = "") -> str:
        """
        Store bytes and return the blob reference.

        Raises:
            StorageError: If the write fails.
        """
        pass

    @abstractmethod
    def get(self, blob_ref: str) -> bytes:
        """
        Read the bytes behind a reference.

        Raises:
            NotFoundError: If no blob exists for the reference.
        """
        pass

    @abstractmethod
    def exists(self, blob_ref: str) -> bool:
        pass

    @staticmethod
    def make_ref(owner_id: str, content_digest: str, extension: str = "") -> str:
        _check_segment(owner_id, "owner id")
        _check_segment(content_digest, "digest")
        suffix = ""
        if extension:
            if not _EXTENSION.fullmatch(extension):
                raise InputError(f"Invalid file extension for blob path: {extension!r}")
            suffix = "." + extension.lstrip(".").lower()
        return f"{owner_id}/{content_digest}{suffix}"


class FileBlobStore(BlobStore):
    """Stores blobs as files under ``root/<owner>/<digest><ext>``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def put(self, owner_id: str, content_digest: str, data: bytes, extension: str = "") -> str:
        blob_ref = self.make_ref(owner_id, content_digest, extension)
        target = self.root / blob_ref
        if target.exists():
            return blob_ref

        tmp_name: Optional[str] = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, target)
        except OSError as e:
            logger.error("Blob write failed for %s: %s", blob_ref, e)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to store blob {blob_ref}: {e}") from e

        logger.debug("Stored blob %s (%d bytes)", blob_ref, len(data))
        return blob_ref

    def get(self, blob_ref: str) -> bytes:
        path = self.root / blob_ref
        if not path.is_file():
            raise NotFoundError(f"Blob not found: {blob_ref}")
        return path.read_bytes()

    def exists(self, blob_ref: str) -> bool:
        return (self.root / blob_ref).is_file()


class InMemoryBlobStore(BlobStore):
    """
    Simple in-memory blob store.

    Used for testing and throwaway sessions. No persistence.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self.write_count = 0

    def put(self, owner_id: str, content_digest: str, data: bytes, extension: str = "") -> str:
        blob_ref = self.make_ref(owner_id, content_digest, extension)
        if blob_ref not in self._blobs:
            self._blobs[blob_ref] = bytes(data)
            self.write_count += 1
        return blob_ref

    def get(self, blob_ref: str) -> bytes:
        try:
            return self._blobs[blob_ref]
        except KeyError:
            raise NotFoundError(f"Blob not found: {blob_ref}") from None

    def exists(self, blob_ref: str) -> bool:
        return blob_ref in self._blobs
