"""Environment driven settings for the SmartScan engines and service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .ocr_pipeline.detector import DEFAULT_POLL_INTERVAL_SEC, DEFAULT_TIMEOUT_SEC
from .ocr_pipeline.gemini import DEFAULT_GEMINI_MODEL


def _env_str(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    raw = environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    return raw or default


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_str(environ, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    ocr_engine: str = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    detector_timeout_sec: float = DEFAULT_TIMEOUT_SEC
    detector_poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    tesseract_lang: str = "eng"
    log_level: str = "INFO"
    log_format: str = "json"
    api_workers: int = 1

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        timeout = _env_float(env, "SMARTSCAN_DETECTOR_TIMEOUT_SEC", DEFAULT_TIMEOUT_SEC)
        interval = _env_float(env, "SMARTSCAN_DETECTOR_POLL_SEC", DEFAULT_POLL_INTERVAL_SEC)
        return cls(
            ocr_engine=(_env_str(env, "SMARTSCAN_OCR_ENGINE", "gemini") or "gemini").lower(),
            gemini_api_key=_env_str(env, "GEMINI_API_KEY") or _env_str(env, "GOOGLE_API_KEY"),
            gemini_model=_env_str(env, "SMARTSCAN_GEMINI_MODEL", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL,
            detector_timeout_sec=timeout if timeout > 0 else DEFAULT_TIMEOUT_SEC,
            detector_poll_interval_sec=interval if interval > 0 else DEFAULT_POLL_INTERVAL_SEC,
            tesseract_lang=_env_str(env, "SMARTSCAN_TESSERACT_LANG", "eng") or "eng",
            log_level=(_env_str(env, "SMARTSCAN_API_LOG_LEVEL", "INFO") or "INFO").upper(),
            log_format=(_env_str(env, "SMARTSCAN_API_LOG_FORMAT", "json") or "json").lower(),
            api_workers=max(1, _env_int(env, "SMARTSCAN_API_WORKERS", 1)),
        )


__all__ = ["Settings"]
