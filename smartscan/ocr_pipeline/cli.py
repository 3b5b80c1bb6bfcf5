# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 smartscan-ocr contributors

"""Command-line entry for extracting marks from sheet images.

It wires the configured engine (or mock components) into the batch pipeline
and emits the review candidates as JSON. Given a session file it also shows
how the candidates would reconcile against that session's records, or the
export table of the committed session.
"""
from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..config import Settings
from .detector import LazyDetector
from .errors import MarkExtractionError
from .export import EXPORT_SHEET_NAME, export_basename, session_rows
from .input_handler import BasicInputHandler
from .interfaces import MarkExtractor
from .mocks import MockTextDetector
from .models import Session
from .on_device import OnDeviceMarkExtractor
from .pipeline import BatchExtractionPipeline, OcrEngine, build_extractor
from .reconcile import commit


def build_cli_extractor(settings: Settings, *, use_mocks: bool = False) -> MarkExtractor:
    if use_mocks:
        return OnDeviceMarkExtractor(LazyDetector(MockTextDetector))
    return build_extractor(settings)


def _load_session(path: str) -> Session:
    return Session.model_validate_json(Path(path).read_text(encoding="utf-8"))


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract student marks from mark sheet images")
    parser.add_argument("--images", nargs="+", required=True, help="PNG, JPEG or WEBP images to process")
    parser.add_argument("--max-mark", type=float, help="Highest valid mark (defaults to the session's)")
    parser.add_argument(
        "--engine",
        choices=[engine.value for engine in OcrEngine],
        help="OCR engine to use (defaults to SMARTSCAN_OCR_ENGINE)",
    )
    parser.add_argument("--session", help="Session JSON file to reconcile the candidates against")
    parser.add_argument(
        "--rows",
        action="store_true",
        help="With --session, print the export table of the committed session",
    )
    parser.add_argument("--out", default="-", help="Output file path or '-' for stdout")
    parser.add_argument(
        "--use-mocks",
        action="store_true",
        help="Use a mock text detector (no external dependencies) for fast smoke tests",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


async def _run(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    session: Optional[Session] = _load_session(args.session) if args.session else None
    max_mark = args.max_mark if args.max_mark is not None else (session.max_mark if session else None)
    if max_mark is None:
        raise ValueError("Provide --max-mark or a --session")

    images = BasicInputHandler().load(args.images)
    extractor = build_cli_extractor(settings, use_mocks=args.use_mocks)
    pipeline = BatchExtractionPipeline(extractor=extractor)
    marks = await pipeline.extract_for_review(images, max_mark)

    payload: Dict[str, Any] = {
        "engine": extractor.engine,
        "count": len(marks),
        "marks": [mark.model_dump(by_alias=True) for mark in marks],
    }
    if session is not None:
        updated, result = commit(session, marks)
        if args.rows:
            return {
                "sheet": EXPORT_SHEET_NAME,
                "basename": export_basename(updated),
                "rows": session_rows(updated),
            }
        payload["reconcile"] = {
            "accepted": [mark.model_dump(by_alias=True) for mark in result.accepted],
            "duplicate_count": result.duplicate_count,
        }
    return payload


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    if args.rows and not args.session:
        raise SystemExit("--rows requires --session")

    settings = Settings.from_env()
    if args.engine:
        settings = replace(settings, ocr_engine=args.engine)

    try:
        payload = asyncio.run(_run(args, settings))
    except (MarkExtractionError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.out == "-":
        print(text)
    else:
        Path(args.out).write_text(text, encoding="utf-8")


if __name__ == "__main__":  # pragma: no cover
    main()
