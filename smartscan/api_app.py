"""FastAPI application exposing the extraction and reconciliation surfaces.

The HTTP layer stays thin: bodies are validated against the schemas in
:mod:`smartscan.api_spec`, then handed to the batch pipeline or the
reconciler. Callers can inject an ``extractor`` for tests or to wrap the
engines in their own queues; otherwise one is built from the environment.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from jsonschema import Draft202012Validator, ValidationError
from pydantic import ValidationError as ModelValidationError

from smartscan._version import __version__
from smartscan.api_spec import EXTRACT_REQUEST_SCHEMA_V0, RECONCILE_REQUEST_SCHEMA_V0
from smartscan.config import Settings
from smartscan.ocr_pipeline import (
    BatchExtractionPipeline,
    ConfigurationError,
    EngineUnavailableError,
    ExtractionFailedError,
    ImagePayload,
    MarkCandidate,
    MarkExtractor,
    StudentMark,
    build_extractor,
    reconcile,
)

__all__ = ["create_app"]

EMPTY_RESULT_MESSAGE = "No marks were found in the provided images."


def _build_logger(settings: Settings) -> logging.Logger:
    logger = logging.getLogger("smartscan.api")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.propagate = False
    return logger


def _decode_images(images: List[Dict[str, Any]]) -> List[ImagePayload]:
    payloads: List[ImagePayload] = []
    for index, item in enumerate(images):
        try:
            data = base64.b64decode(item["data"], validate=True)
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"images[{index}].data is not valid base64") from exc
        payloads.append(ImagePayload(data=data, mime_type=item["mime_type"]))
    return payloads


def create_app(
    *,
    settings: Optional[Settings] = None,
    extractor: Optional[MarkExtractor] = None,
) -> FastAPI:
    """Return a FastAPI instance exposing ``/extract`` and ``/reconcile``."""

    settings = settings or Settings.from_env()
    logger = _build_logger(settings)
    pipeline = BatchExtractionPipeline(extractor=extractor or build_extractor(settings))

    def _log(event: str, payload: Dict[str, Any], *, level: str = "info") -> None:
        record = {
            "ts": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
            "event": event,
            **payload,
        }
        if settings.log_format == "json":
            msg = json.dumps(record, ensure_ascii=False)
        else:
            msg = f"{record['ts']} {event} {payload}"
        getattr(logger, level, logger.info)(msg)

    app = FastAPI(title="SmartScan API", version=__version__)

    @app.get("/healthz")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok", "engine": getattr(pipeline.extractor, "engine", "unknown")}

    @app.post("/extract")
    async def extract(payload: Dict[str, Any]):
        try:
            Draft202012Validator(EXTRACT_REQUEST_SCHEMA_V0).validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc

        images = _decode_images(payload["images"])
        max_mark = float(payload["max_mark"])
        _log("extract.start", {"images": len(images), "max_mark": max_mark})
        try:
            marks = await pipeline.extract_for_review(images, max_mark)
        except ConfigurationError as exc:
            _log("extract.failed", {"kind": "configuration", "error": str(exc)}, level="error")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except ExtractionFailedError as exc:
            _log("extract.failed", {"kind": "extraction", "error": str(exc)}, level="warning")
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except EngineUnavailableError as exc:
            _log("extract.failed", {"kind": "engine_unavailable", "error": str(exc)}, level="warning")
            raise HTTPException(status_code=503, detail=str(exc)) from exc

        _log("extract.done", {"images": len(images), "marks": len(marks)})
        response: Dict[str, Any] = {
            "count": len(marks),
            "marks": [mark.model_dump(by_alias=True) for mark in marks],
        }
        if not marks:
            response["message"] = EMPTY_RESULT_MESSAGE
        return response

    @app.post("/reconcile")
    def reconcile_marks(payload: Dict[str, Any]):
        try:
            Draft202012Validator(RECONCILE_REQUEST_SCHEMA_V0).validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc

        try:
            existing = [StudentMark.model_validate(item) for item in payload["existing"]]
            candidates = [
                StudentMark.model_validate(item) if "id" in item else MarkCandidate.model_validate(item)
                for item in payload["candidates"]
            ]
        except ModelValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        result = reconcile(existing, candidates)
        _log(
            "reconcile.done",
            {"accepted": len(result.accepted), "duplicates": result.duplicate_count},
        )
        return {
            "accepted": [mark.model_dump(by_alias=True) for mark in result.accepted],
            "duplicate_count": result.duplicate_count,
        }

    return app
