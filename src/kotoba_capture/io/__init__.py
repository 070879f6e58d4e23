"""Infrastructure layer - SQLite persistence and blob storage."""

from .blob_store import BlobStore, FileBlobStore, InMemoryBlobStore
from .capture_repository import CaptureRepository
from .conversation_cache import ConversationCache
from .database_manager import DatabaseManager
from .vocabulary_repository import VocabularyRepository

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "InMemoryBlobStore",
    "CaptureRepository",
    "ConversationCache",
    "DatabaseManager",
    "VocabularyRepository",
]
