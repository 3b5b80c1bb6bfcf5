"""Cloud mark extraction backed by Google Gemini.

The multimodal model reads the whole sheet and answers with a typed JSON
array of ``{"studentId", "mark"}`` objects, so this engine does not use the
line reconstructor. The response is still untrusted: every item goes through
the shared range and null validation before it is returned.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..api_spec import render_extraction_prompt_v0
from .errors import ConfigurationError, ExtractionFailedError
from .interfaces import MarkExtractor
from .models import MarkCandidate
from .validation import validate_candidates

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

AUTH_FAILURE_MESSAGE = (
    "The API key is not valid. The application administrator needs to check it."
)
EXTRACTION_FAILURE_MESSAGE = (
    "Failed to extract marks from the image. "
    "The API may be rate-limited or the image is unreadable."
)

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "studentId": types.Schema(
                type=types.Type.STRING,
                description="The student's registration number, precisely as it appears on the sheet.",
            ),
            "mark": types.Schema(
                type=types.Type.NUMBER,
                nullable=True,
                description="The student's corresponding numerical mark. Should be null if not found or illegible.",
            ),
        },
        required=["studentId", "mark"],
    ),
)


def _is_auth_failure(exc: genai_errors.APIError) -> bool:
    if exc.code in (401, 403):
        return True
    message = f"{exc.message or ''} {exc.status or ''}"
    return "API key not valid" in message or "API_KEY_INVALID" in message


def parse_response_text(text: Optional[str], max_mark: float) -> List[MarkCandidate]:
    """Decode the model's JSON answer; malformed answers yield ``[]``."""

    if not text or not text.strip():
        return []
    try:
        payload: Any = json.loads(text.strip())
    except json.JSONDecodeError:
        logger.warning("Gemini returned a response that is not valid JSON")
        return []
    return validate_candidates(payload, max_mark)


class GeminiMarkExtractor(MarkExtractor):
    """Extract marks by prompting a Gemini multimodal model.

    Args:
        api_key: Google API key. Required unless ``client`` is given.
        model: Model identifier passed to ``generate_content``.
        client: Pre-built ``genai.Client`` (or compatible object exposing
            ``aio.models.generate_content``); created lazily otherwise.
    """

    engine = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_GEMINI_MODEL,
        client: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self._client = client

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY is missing. Set it in the environment to use the gemini engine."
            )
        self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )

    async def extract(self, image: bytes, mime_type: str, max_mark: float) -> List[MarkCandidate]:
        client = self._get_client()
        contents = [
            types.Part.from_bytes(data=image, mime_type=mime_type),
            render_extraction_prompt_v0(max_mark),
        ]

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=self._build_config(),
            )
        except genai_errors.APIError as exc:
            logger.error("Gemini call failed with %s %s: %s", exc.code, exc.status, exc.message)
            if _is_auth_failure(exc):
                raise ConfigurationError(AUTH_FAILURE_MESSAGE) from exc
            raise ExtractionFailedError(EXTRACTION_FAILURE_MESSAGE) from exc
        except Exception as exc:
            logger.error("Gemini call failed: %s", exc)
            raise ExtractionFailedError(EXTRACTION_FAILURE_MESSAGE) from exc

        candidates = parse_response_text(getattr(response, "text", None), max_mark)
        logger.debug("Gemini returned %d candidates", len(candidates))
        return candidates


__all__ = [
    "AUTH_FAILURE_MESSAGE",
    "DEFAULT_GEMINI_MODEL",
    "EXTRACTION_FAILURE_MESSAGE",
    "GeminiMarkExtractor",
    "RESPONSE_SCHEMA",
    "parse_response_text",
]
