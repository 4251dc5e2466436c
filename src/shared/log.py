"""Default logging configuration for host applications."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from shared.constants import LOG_FORMAT

if TYPE_CHECKING:
    from pathlib import Path


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> None:
    """Configure root logging to stdout and, optionally, to a file.

    The library itself only creates module loggers; calling this is up to
    the host application.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_file), encoding='utf-8'))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    # aiohttp access logs are noisy at INFO
    logging.getLogger('aiohttp').setLevel(max(level, logging.WARNING))


def mask_secret(value: str | None, visible: int) -> str:
    """Mask a secret leaving only its first characters visible."""
    if not value:
        return ''
    if len(value) <= visible:
        return '*' * len(value)
    return value[:visible] + '*' * (len(value) - visible)
