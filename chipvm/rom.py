"""Reading ROM images from disk."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .constants import MAX_PROGRAM_SIZE

logger = logging.getLogger(__name__)


class RomTooLargeError(ValueError):
    pass


def read_rom(path: Union[str, Path]) -> bytes:
    data = Path(path).read_bytes()
    if len(data) > MAX_PROGRAM_SIZE:
        raise RomTooLargeError(
            f"ROM is too large for memory ({len(data)} bytes, max {MAX_PROGRAM_SIZE})")
    logger.info("ROM loaded (%d bytes)", len(data))
    return data
