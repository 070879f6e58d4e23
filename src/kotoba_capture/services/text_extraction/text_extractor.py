"""Text Extractor - abstract OCR adapter."""

from abc import ABC, abstractmethod

from kotoba_capture.core import ExtractionResult


class TextExtractor(ABC):
    """
    Abstract OCR backend.

    Implementations must not raise for backend problems: when recognition
    is unavailable they return a placeholder result with
    ``is_placeholder=True`` instead.
    """

    @abstractmethod
    def extract(self, image_bytes: bytes) -> ExtractionResult:
        """
        Recognise text in an image.

        Args:
            image_bytes: Raw bytes of the uploaded image.

        Returns:
            ExtractionResult with the full transcript and word detections.
        """
        pass
