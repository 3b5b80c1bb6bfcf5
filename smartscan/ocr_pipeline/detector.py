"""Lazily acquired, shared text detector handle.

The on-device engine depends on a detector that may not be usable yet when
the first image arrives (the backend binary can still be installing, or be
missing entirely). :class:`LazyDetector` owns the acquisition:

* the first caller starts a single initialisation attempt,
* concurrent callers await that same attempt instead of starting their own,
* a successful attempt is memoised for the lifetime of the object,
* a failed attempt is forgotten so a later call can try again.

Availability is polled at a fixed interval until a deadline because the
backends in use expose no readiness notification.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

import anyio

from .errors import EngineUnavailableError
from .interfaces import TextDetector

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0
DEFAULT_POLL_INTERVAL_SEC = 0.2

UNAVAILABLE_MESSAGE = (
    "On-device OCR failed to load, likely because the text detection backend is "
    "missing or blocked. Make it available and try again, or switch to the gemini engine."
)

DetectorFactory = Callable[[], Union[TextDetector, Awaitable[TextDetector]]]
AvailabilityProbe = Callable[[], bool]


class DetectorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


def _always_available() -> bool:
    return True


class LazyDetector:
    """Single-flight holder for a :class:`TextDetector`.

    Args:
        factory: Builds the detector once the backend is available. May be a
            plain callable (run in a worker thread) or return an awaitable.
        probe: Returns ``True`` once the backend can be used. Called in a
            worker thread on every poll.
        timeout: Seconds to wait for ``probe`` before giving up.
        poll_interval: Seconds between probes.
    """

    def __init__(
        self,
        factory: DetectorFactory,
        *,
        probe: AvailabilityProbe = _always_available,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SEC,
    ) -> None:
        self._factory = factory
        self._probe = probe
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._detector: Optional[TextDetector] = None
        self._pending: Optional[asyncio.Future] = None
        self._state = DetectorState.UNINITIALIZED

    @property
    def state(self) -> DetectorState:
        return self._state

    async def get(self) -> TextDetector:
        if self._detector is not None:
            return self._detector

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._initialize())
        # Shielded so one cancelled caller does not abort the shared attempt.
        return await asyncio.shield(self._pending)

    async def _initialize(self) -> TextDetector:
        self._state = DetectorState.INITIALIZING
        logger.info("Initializing on-device text detector")
        try:
            await self._wait_until_available()
            detector = await self._build()
        except BaseException as exc:
            self._state = DetectorState.FAILED
            self._pending = None
            logger.warning("On-device text detector failed to initialize: %s", exc)
            if isinstance(exc, EngineUnavailableError) or not isinstance(exc, Exception):
                raise
            raise EngineUnavailableError(UNAVAILABLE_MESSAGE) from exc

        self._detector = detector
        self._state = DetectorState.READY
        self._pending = None
        logger.info("On-device text detector ready")
        return detector

    async def _wait_until_available(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        while not await anyio.to_thread.run_sync(self._probe):
            if loop.time() >= deadline:
                raise EngineUnavailableError(UNAVAILABLE_MESSAGE)
            await asyncio.sleep(self.poll_interval)

    async def _build(self) -> TextDetector:
        if inspect.iscoroutinefunction(self._factory):
            return await self._factory()
        result = await anyio.to_thread.run_sync(self._factory)
        if inspect.isawaitable(result):
            result = await result
        return result


__all__ = [
    "DEFAULT_POLL_INTERVAL_SEC",
    "DEFAULT_TIMEOUT_SEC",
    "DetectorState",
    "LazyDetector",
    "UNAVAILABLE_MESSAGE",
]
