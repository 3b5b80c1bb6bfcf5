"""Run the SmartScan HTTP API under uvicorn."""
from __future__ import annotations

import argparse
from typing import Sequence

from ..config import Settings

APP_FACTORY = "smartscan.api_app:create_app"


def _parse_args(argv: Sequence[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser("smartscan-api", description="Serve /extract and /reconcile")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.api_workers,
        help="Worker processes (defaults to SMARTSCAN_API_WORKERS)",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Sequence[str] | None = None) -> None:
    settings = Settings.from_env()
    args = _parse_args(argv, settings)

    try:
        import uvicorn  # type: ignore
    except ImportError as exc:  # pragma: no cover
        raise SystemExit(
            "uvicorn is not installed. Install with `pip install -e '.[api]'`."
        ) from exc

    # Each worker builds its own app, so the on-device detector is per process.
    uvicorn.run(
        APP_FACTORY,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
        workers=max(1, args.workers),
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
