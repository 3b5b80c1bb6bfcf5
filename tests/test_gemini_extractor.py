import asyncio
import json
from types import SimpleNamespace

import pytest
from google.genai import errors as genai_errors

from smartscan.ocr_pipeline import ConfigurationError, ExtractionFailedError, GeminiMarkExtractor
from smartscan.ocr_pipeline.gemini import (
    AUTH_FAILURE_MESSAGE,
    EXTRACTION_FAILURE_MESSAGE,
    RESPONSE_SCHEMA,
    parse_response_text,
)


class _FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def _client(models: _FakeModels) -> SimpleNamespace:
    return SimpleNamespace(aio=SimpleNamespace(models=models))


def _api_error(code: int, message: str, status: str) -> genai_errors.ClientError:
    return genai_errors.ClientError(code, {"error": {"code": code, "message": message, "status": status}})


def test_extract_validates_model_answer():
    answer = json.dumps(
        [
            {"studentId": "T/UDOM/2021/001", "mark": 78},
            {"studentId": "T/UDOM/2021/002", "mark": 999},
            {"studentId": "", "mark": 40},
            {"studentId": "T/UDOM/2021/003", "mark": None},
        ]
    )
    models = _FakeModels(text=answer)
    extractor = GeminiMarkExtractor(client=_client(models), model="gemini-test")

    candidates = asyncio.run(extractor.extract(b"img", "image/png", 100))

    assert [(c.student_id, c.mark) for c in candidates] == [
        ("T/UDOM/2021/001", 78),
        ("T/UDOM/2021/002", None),
        ("T/UDOM/2021/003", None),
    ]


def test_request_carries_image_prompt_and_typed_schema():
    models = _FakeModels(text="[]")
    extractor = GeminiMarkExtractor(client=_client(models), model="gemini-test")

    asyncio.run(extractor.extract(b"\x89PNG-bytes", "image/jpeg", 50))

    call = models.calls[0]
    assert call["model"] == "gemini-test"
    image_part, prompt = call["contents"]
    assert image_part.inline_data.data == b"\x89PNG-bytes"
    assert image_part.inline_data.mime_type == "image/jpeg"
    assert "maximum possible mark for any student is 50." in prompt
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].response_schema == RESPONSE_SCHEMA


def test_missing_api_key_is_a_configuration_error():
    extractor = GeminiMarkExtractor(api_key=None)

    with pytest.raises(ConfigurationError):
        asyncio.run(extractor.extract(b"img", "image/png", 100))


@pytest.mark.parametrize(
    "error",
    [
        _api_error(401, "Request had invalid authentication credentials.", "UNAUTHENTICATED"),
        _api_error(400, "API key not valid. Please pass a valid API key.", "INVALID_ARGUMENT"),
    ],
)
def test_rejected_key_is_a_configuration_error(error):
    extractor = GeminiMarkExtractor(client=_client(_FakeModels(error=error)))

    with pytest.raises(ConfigurationError) as excinfo:
        asyncio.run(extractor.extract(b"img", "image/png", 100))

    assert str(excinfo.value) == AUTH_FAILURE_MESSAGE


@pytest.mark.parametrize(
    "error",
    [
        _api_error(429, "Resource has been exhausted.", "RESOURCE_EXHAUSTED"),
        _api_error(400, "Unable to process input image.", "INVALID_ARGUMENT"),
        ConnectionError("network down"),
    ],
)
def test_other_failures_are_extraction_errors(error):
    extractor = GeminiMarkExtractor(client=_client(_FakeModels(error=error)))

    with pytest.raises(ExtractionFailedError) as excinfo:
        asyncio.run(extractor.extract(b"img", "image/png", 100))

    assert str(excinfo.value) == EXTRACTION_FAILURE_MESSAGE
    assert excinfo.value.__cause__ is error


@pytest.mark.parametrize("text", [None, "", "   ", "not json", '{"studentId": "S-1", "mark": 3}', "[1, 2]"])
def test_malformed_answers_degrade_to_empty(text):
    assert parse_response_text(text, max_mark=10) == []


def test_answer_surrounded_by_whitespace_is_parsed():
    candidates = parse_response_text('\n  [{"studentId": "S-1", "mark": 7.5}]  \n', max_mark=10)

    assert [(c.student_id, c.mark) for c in candidates] == [("S-1", 7.5)]
