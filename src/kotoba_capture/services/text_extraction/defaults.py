"""Placeholder OCR output used while no recognition backend is available."""

from kotoba_capture.core import ExtractionResult, TextDetection


def _box(x0: float, y0: float, x1: float, y1: float):
    return ((x0, y0), (x1, y0), (x1, y1), (x0, y1))


PLACEHOLDER_EXTRACTION = ExtractionResult(
    transcript="日本語の勉強は楽しいです。東京駅に行きたい。",
    detections=(
        TextDetection("日本語", _box(10, 10, 100, 50)),
        TextDetection("勉強", _box(110, 10, 200, 50)),
        TextDetection("楽しい", _box(10, 60, 100, 100)),
        TextDetection("東京", _box(110, 60, 180, 100)),
        TextDetection("駅", _box(190, 60, 230, 100)),
    ),
    is_placeholder=True,
)
