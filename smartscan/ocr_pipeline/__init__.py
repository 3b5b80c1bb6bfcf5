"""Mark sheet OCR pipeline: engines, row reconstruction and reconciliation."""

from .detector import DetectorState, LazyDetector
from .errors import (
    ConfigurationError,
    EngineUnavailableError,
    ExtractionFailedError,
    MarkExtractionError,
)
from .export import EXPORT_HEADERS, EXPORT_SHEET_NAME, export_basename, session_rows
from .gemini import GeminiMarkExtractor
from .input_handler import BasicInputHandler, detect_mime_type
from .interfaces import MarkExtractor, TextDetector
from .lines import reconstruct_lines
from .mocks import MockMarkExtractor, MockTextDetector
from .models import (
    BoundingBox,
    ImagePayload,
    Line,
    MarkCandidate,
    PositionedFragment,
    ReconcileResult,
    Session,
    StudentMark,
)
from .on_device import OnDeviceMarkExtractor
from .pipeline import BatchExtractionPipeline, OcrEngine, build_extractor
from .reconcile import commit, reconcile
from .records import extract_record, extract_records, parse_mark
from .tesseract import TesseractTextDetector, shared_tesseract_detector
from .validation import coerce_mark, validate_candidate, validate_candidates

__all__ = [
    "BasicInputHandler",
    "BatchExtractionPipeline",
    "BoundingBox",
    "ConfigurationError",
    "DetectorState",
    "EXPORT_HEADERS",
    "EXPORT_SHEET_NAME",
    "EngineUnavailableError",
    "ExtractionFailedError",
    "GeminiMarkExtractor",
    "ImagePayload",
    "LazyDetector",
    "Line",
    "MarkCandidate",
    "MarkExtractionError",
    "MarkExtractor",
    "MockMarkExtractor",
    "MockTextDetector",
    "OcrEngine",
    "OnDeviceMarkExtractor",
    "PositionedFragment",
    "ReconcileResult",
    "Session",
    "StudentMark",
    "TesseractTextDetector",
    "TextDetector",
    "build_extractor",
    "coerce_mark",
    "commit",
    "detect_mime_type",
    "export_basename",
    "extract_record",
    "extract_records",
    "parse_mark",
    "reconcile",
    "reconstruct_lines",
    "session_rows",
    "shared_tesseract_detector",
    "validate_candidate",
    "validate_candidates",
]
