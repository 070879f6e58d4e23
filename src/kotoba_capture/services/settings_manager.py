"""Settings Manager - Handles API key, storage and review configuration."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from kotoba_capture.core import BINARY_LADDER, QUALITY_LADDER, ReviewLadder

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_DUE_PAGE_SIZE = 20
DEFAULT_DISTRACTOR_POOL_SIZE = 50

REVIEW_LADDERS = {
    "binary": BINARY_LADDER,
    "quality": QUALITY_LADDER,
}


class SettingsManager:
    """
    Manages settings and API key configuration.

    Reads a .env file in the project root, then the process environment.
    """

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root

    def get_gemini_api_key(self) -> Optional[str]:
        """Get the Gemini API key from environment."""
        key = os.getenv("GEMINI_API_KEY")
        return key.strip() if key and key.strip() else None

    def get_model_name(self) -> str:
        model = os.getenv("KOTOBA_MODEL", "").strip()
        return model or DEFAULT_MODEL

    def get_db_path(self) -> Path:
        raw = os.getenv("KOTOBA_DB_PATH", "").strip()
        return Path(raw).expanduser() if raw else self._data_dir() / "kotoba.db"

    def get_blob_dir(self) -> Path:
        raw = os.getenv("KOTOBA_BLOB_DIR", "").strip()
        return Path(raw).expanduser() if raw else self._data_dir() / "blobs"

    def get_request_timeout(self) -> int:
        """Timeout in seconds for one outbound backend call."""
        return self._get_positive_int("KOTOBA_REQUEST_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)

    def get_due_page_size(self) -> int:
        return self._get_positive_int("KOTOBA_DUE_PAGE_SIZE", DEFAULT_DUE_PAGE_SIZE)

    def get_distractor_pool_size(self) -> int:
        return self._get_positive_int("KOTOBA_DISTRACTOR_POOL_SIZE", DEFAULT_DISTRACTOR_POOL_SIZE)

    def get_review_ladder(self) -> ReviewLadder:
        mode = os.getenv("KOTOBA_REVIEW_MODE", "binary").strip().lower() or "binary"
        if mode not in REVIEW_LADDERS:
            logger.warning("Unknown KOTOBA_REVIEW_MODE %r, using binary", mode)
            mode = "binary"
        return REVIEW_LADDERS[mode]

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)

    @staticmethod
    def _data_dir() -> Path:
        return Path.home() / ".kotoba_capture"

    @staticmethod
    def _get_positive_int(name: str, default: int) -> int:
        raw = os.getenv(name, "").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Invalid integer for %s: %r, using %d", name, raw, default)
            return default
        if value <= 0:
            logger.warning("%s must be positive, using %d", name, default)
            return default
        return value
