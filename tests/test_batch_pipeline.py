import asyncio

import pytest

from smartscan.config import Settings
from smartscan.ocr_pipeline import (
    BatchExtractionPipeline,
    ExtractionFailedError,
    GeminiMarkExtractor,
    ImagePayload,
    MarkCandidate,
    MockMarkExtractor,
    OnDeviceMarkExtractor,
    build_extractor,
)
from smartscan.ocr_pipeline import tesseract as tesseract_module


def _image(name: bytes) -> ImagePayload:
    return ImagePayload(data=name, mime_type="image/png")


def test_results_follow_submission_order_not_completion_order():
    extractor = MockMarkExtractor(
        results={
            b"a": [MarkCandidate(student_id="A-1", mark=10), MarkCandidate(student_id="A-2", mark=11)],
            b"b": [MarkCandidate(student_id="B-1", mark=20)],
            b"c": [MarkCandidate(student_id="C-1", mark=None)],
        },
        delays={b"a": 0.05, b"b": 0.01},
    )
    pipeline = BatchExtractionPipeline(extractor=extractor)

    candidates = asyncio.run(pipeline.extract([_image(b"a"), _image(b"b"), _image(b"c")], max_mark=50))

    assert [c.student_id for c in candidates] == ["A-1", "A-2", "B-1", "C-1"]
    assert [call[2] for call in extractor.calls] == [50, 50, 50]


def test_one_failed_image_fails_the_batch():
    extractor = MockMarkExtractor(errors={b"b": ExtractionFailedError("rate limited")})
    pipeline = BatchExtractionPipeline(extractor=extractor)

    with pytest.raises(ExtractionFailedError):
        asyncio.run(pipeline.extract([_image(b"a"), _image(b"b")], max_mark=100))


def test_empty_result_is_not_an_error():
    pipeline = BatchExtractionPipeline(extractor=MockMarkExtractor(results={b"blank": []}))

    assert asyncio.run(pipeline.extract([_image(b"blank")], max_mark=100)) == []


@pytest.mark.parametrize("images, max_mark", [([], 100), ([_image(b"a")], 0), ([_image(b"a")], -5)])
def test_invalid_batches_are_rejected(images, max_mark):
    pipeline = BatchExtractionPipeline(extractor=MockMarkExtractor())

    with pytest.raises(ValueError):
        asyncio.run(pipeline.extract(images, max_mark=max_mark))


def test_review_rows_get_unique_ids():
    pipeline = BatchExtractionPipeline(extractor=MockMarkExtractor())

    marks = asyncio.run(pipeline.extract_for_review([_image(b"a"), _image(b"b")], max_mark=100))

    assert len(marks) == 4
    assert len({m.id for m in marks}) == 4
    assert [m.student_id for m in marks] == ["T/UDOM/2021/001", "T/UDOM/2021/002"] * 2


def test_build_extractor_selects_engine(monkeypatch):
    monkeypatch.setattr(tesseract_module, "_SHARED", {})

    gemini = build_extractor(Settings(ocr_engine="gemini", gemini_api_key="key", gemini_model="m"))
    on_device = build_extractor(Settings(ocr_engine="on_device", tesseract_lang="eng"))

    assert isinstance(gemini, GeminiMarkExtractor)
    assert gemini.model == "m"
    assert isinstance(on_device, OnDeviceMarkExtractor)
    assert on_device.detector is tesseract_module.shared_tesseract_detector("eng")


def test_build_extractor_rejects_unknown_engine():
    with pytest.raises(ValueError, match="Unknown OCR engine"):
        build_extractor(Settings(ocr_engine="paddle"))
