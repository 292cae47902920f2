"""Logging setup for the forgeteam CLI, built on loguru."""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

MASK = "********"


def make_secret_filter(secrets: list[str]):
    """Return a loguru filter that masks ``secrets`` in messages and extras."""

    def _mask(value: Any) -> Any:
        if isinstance(value, str):
            for secret in secrets:
                value = value.replace(secret, MASK)
            return value
        if isinstance(value, dict):
            return {k: _mask(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_mask(v) for v in value]
        return value

    def _filter(record: dict) -> bool:
        if secrets:
            record["message"] = _mask(record["message"])
            record["extra"].update(_mask(dict(record["extra"])))
        return True  # Keep the record after masking

    return _filter


def setup_logging(level: str = "INFO", secrets: list[str] | None = None) -> None:
    """Replace loguru's default handler with a masked stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=False,
        diagnose=False,
        filter=make_secret_filter(list(secrets or [])),
    )
    logger.debug("Logging initialized with level: {}", level.upper())
