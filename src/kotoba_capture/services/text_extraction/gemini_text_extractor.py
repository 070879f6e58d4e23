"""Gemini Text Extractor - OCR through Gemini's image understanding."""

import io
import logging
from typing import Any, Dict, List, Optional, Tuple

from google.genai import types
from PIL import Image, UnidentifiedImageError

from kotoba_capture.core import ExtractionResult, TextDetection
from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.services.generation import GeminiTextGenerator
from kotoba_capture.services.generation import parse_json_object
from kotoba_capture.services.text_extraction.defaults import PLACEHOLDER_EXTRACTION
from kotoba_capture.services.text_extraction.text_extractor import TextExtractor

logger = logging.getLogger(__name__)

# Gemini reports boxes as [ymin, xmin, ymax, xmax] scaled to 0..1000.
BOX_SCALE = 1000.0


class GeminiTextExtractor(TextExtractor):
    """OCR adapter that asks Gemini for text and word boxes as JSON.

    Any failure (missing key, unreadable image, transport or parse error)
    yields the configured placeholder result.
    """

    OCR_PROMPT = """Read all Japanese and English text in this image.
Return JSON with exactly these keys:
{
  "text": "the full text, in reading order, lines separated by newlines",
  "detections": [
    {"text": "one word or short phrase", "box_2d": [ymin, xmin, ymax, xmax]}
  ]
}
Boxes are normalized to 0-1000. Split Japanese text into dictionary words."""

    def __init__(
        self,
        generator: GeminiTextGenerator,
        placeholder: ExtractionResult = PLACEHOLDER_EXTRACTION,
    ) -> None:
        self._generator = generator
        self._placeholder = placeholder

    def extract(self, image_bytes: bytes) -> ExtractionResult:
        try:
            width, height, mime_type = self._inspect_image(image_bytes)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning("Image could not be decoded for OCR, using placeholder: %s", e)
            return self._placeholder

        try:
            raw = self._generator.generate(
                [
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    self.OCR_PROMPT,
                ],
                json_output=True,
            )
            payload = parse_json_object(raw)
        except BackendUnavailableError as e:
            logger.warning("OCR backend unavailable, using placeholder: %s", e)
            return self._placeholder
        except ValueError as e:
            logger.warning("OCR response was not valid JSON, using placeholder: %s", e)
            return self._placeholder

        try:
            return self._to_result(payload, width, height)
        except ValueError as e:
            logger.warning("OCR response had an unexpected shape, using placeholder: %s", e)
            return self._placeholder

    @staticmethod
    def _inspect_image(image_bytes: bytes) -> Tuple[int, int, str]:
        with Image.open(io.BytesIO(image_bytes)) as img:
            mime_type = Image.MIME.get(img.format or "", "image/jpeg")
            return img.width, img.height, mime_type

    @classmethod
    def _to_result(cls, payload: Dict[str, Any], width: int, height: int) -> ExtractionResult:
        """
        Raises:
            ValueError: If ``detections`` is not a list or ``text`` not a string.
        """
        raw_detections = payload.get("detections") or []
        raw_text = payload.get("text") or ""
        if not isinstance(raw_detections, list):
            raise ValueError(f"detections must be a list, got {type(raw_detections).__name__}")
        if not isinstance(raw_text, str):
            raise ValueError(f"text must be a string, got {type(raw_text).__name__}")

        detections: List[TextDetection] = []
        for entry in raw_detections:
            if not isinstance(entry, dict):
                continue
            text = str(entry.get("text") or "").strip()
            if not text:
                continue
            polygon = cls._box_to_polygon(entry.get("box_2d"), width, height)
            detections.append(TextDetection(text=text, bounding_polygon=polygon))

        transcript = raw_text.strip()
        if not transcript and detections:
            transcript = "".join(d.text for d in detections)
        return ExtractionResult.from_detections(transcript, detections)

    @staticmethod
    def _box_to_polygon(box: Optional[Any], width: int, height: int):
        if not isinstance(box, (list, tuple)) or len(box) != 4:
            return ()
        try:
            ymin, xmin, ymax, xmax = (float(v) for v in box)
        except (TypeError, ValueError):
            return ()
        x0, x1 = xmin / BOX_SCALE * width, xmax / BOX_SCALE * width
        y0, y1 = ymin / BOX_SCALE * height, ymax / BOX_SCALE * height
        return ((x0, y0), (x1, y0), (x1, y1), (x0, y1))
