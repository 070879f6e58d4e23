"""Capture entities - one upload of a photo and its OCR output."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class TextDetection:
    """A recognised word or phrase with its polygon in source-image pixels."""

    text: str
    bounding_polygon: Tuple[Point, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "bounding_polygon": [[x, y] for x, y in self.bounding_polygon],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextDetection":
        points = tuple(
            (float(point[0]), float(point[1]))
            for point in data.get("bounding_polygon") or []
        )
        return cls(text=str(data.get("text", "")), bounding_polygon=points)


@dataclass(frozen=True)
class ExtractionResult:
    """Full transcript plus spatial detections for one image.

    ``is_placeholder`` marks the stand-in result returned when the OCR
    backend is unavailable. The rest of the pipeline treats it as data.
    """

    transcript: str
    detections: Tuple[TextDetection, ...] = ()
    is_placeholder: bool = False

    @classmethod
    def from_detections(
        cls, transcript: str, detections: Sequence[TextDetection], is_placeholder: bool = False
    ) -> "ExtractionResult":
        return cls(transcript=transcript, detections=tuple(detections), is_placeholder=is_placeholder)


@dataclass
class Capture:
    """Represents one upload event referencing a content-addressed blob.

    Attributes:
        id: Unique identifier of this sighting.
        owner_id: The user that uploaded the photo.
        content_digest: Hex SHA-256 of the raw image bytes.
        blob_ref: Reference into the blob store; shared by re-uploads.
        ocr_transcript: Full OCR text, unset until extraction ran.
        ocr_detections: Spatial detections, unset until extraction ran.
        ocr_is_placeholder: True when the stored OCR is the stand-in result.
        translation: Free-text English translation of the transcript.
        latitude: Optional geo-coordinate of the upload.
        longitude: Optional geo-coordinate of the upload.
        created_at: UTC creation time.
    """

    id: str
    owner_id: str
    content_digest: str
    blob_ref: str
    created_at: datetime
    ocr_transcript: Optional[str] = None
    ocr_detections: Optional[List[TextDetection]] = None
    ocr_is_placeholder: bool = False
    translation: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_ocr(self) -> bool:
        return self.ocr_transcript is not None

    def extraction(self) -> Optional[ExtractionResult]:
        """Return the stored OCR output as an ExtractionResult, if any."""
        if not self.has_ocr:
            return None
        return ExtractionResult.from_detections(
            self.ocr_transcript or "",
            self.ocr_detections or [],
            is_placeholder=self.ocr_is_placeholder,
        )


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
