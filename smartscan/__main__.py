#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Unified CLI entry point for SmartScan."""
from __future__ import annotations

import runpy
import sys
from textwrap import dedent

_COMMAND_TO_MODULE = {
    "extract": "smartscan.ocr_pipeline.cli",
    "serve": "smartscan.service.cli",
    "api": "smartscan.service.cli",
}

_DEFAULT_COMMAND = "extract"


def _print_help() -> None:
    msg = dedent(
        """
        Usage:
          python -m smartscan [command] [args...]

        Commands:
          extract             Extract marks from sheet images (default)
          serve | api         Run the HTTP API with uvicorn
          help                Show this message

        Examples:
          python -m smartscan extract --images sheet1.jpg sheet2.png --max-mark 100
          python -m smartscan extract --images sheet.jpg --session term1.json --rows
          python -m smartscan serve --port 8080
        """
    ).strip()
    print(msg)


def _run_module(module: str, argv: list[str]) -> None:
    old_argv = sys.argv
    try:
        sys.argv = [module, *argv]
        runpy.run_module(module, run_name="__main__")
    finally:
        sys.argv = old_argv


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        _print_help()
        return
    cmd = argv[0]
    if cmd in {"-h", "--help", "help"}:
        _print_help()
        return
    module = _COMMAND_TO_MODULE.get(cmd)
    if module is None:
        module = _COMMAND_TO_MODULE[_DEFAULT_COMMAND]
        args = argv
    else:
        args = argv[1:]
    _run_module(module, args)


if __name__ == "__main__":
    main()
