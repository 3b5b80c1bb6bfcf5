"""Exceptions raised by the mark extraction engines."""
from __future__ import annotations


class MarkExtractionError(RuntimeError):
    """Base class for failures of a single extraction call."""


class ConfigurationError(MarkExtractionError):
    """The engine is misconfigured, e.g. a missing or rejected API key."""


class ExtractionFailedError(MarkExtractionError):
    """The engine call failed for a reason other than configuration."""


class EngineUnavailableError(MarkExtractionError):
    """The on-device text detector could not be acquired."""


__all__ = [
    "ConfigurationError",
    "EngineUnavailableError",
    "ExtractionFailedError",
    "MarkExtractionError",
]
