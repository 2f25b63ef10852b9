"""CLI utilities: formatting, logging setup."""

import json
import logging
import sys
from typing import Any

from inventory_kernel.logging_config import configure_logging, get_logger

W = 72


def fmt_time(value) -> str:
    """Timestamp for display (e.g. 2024-01-01 12:00)."""
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else ""


def truncate(text: str | None, width: int) -> str:
    text = text or ""
    return text if len(text) <= width else text[: width - 1] + "~"


def print_json(data: Any, out=None) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str), file=out or sys.stdout)


def print_rule(title: str = "", out=None) -> None:
    out = out or sys.stdout
    print("=" * W, file=out)
    if title:
        print(f"  {title}".center(W), file=out)
        print("=" * W, file=out)


def setup_logging(level: str, stream=None) -> logging.Logger:
    """Structured logs go to stderr so stdout stays clean for output."""
    configure_logging(level=level, stream=stream or sys.stderr)
    return get_logger("cli")


def warn(message: str) -> None:
    print(f"  WARNING: {message}", file=sys.stderr)


def error(message: str) -> None:
    print(f"  ERROR: {message}", file=sys.stderr)
