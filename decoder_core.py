"""Pure HAFAS decoder utilities - no side effects."""

from __future__ import annotations
import logging
import sys
from dataclasses import dataclass
from enum import Enum, unique
from pathlib import Path
from typing import Final, get_args

from hafas.helpers import ByteOrder
from hafas.journey_decoder import DecodeResult, JourneyDecoder
from hafas.profiles import PROFILES, get_profile

STDIN_MARKER: Final[str] = "-"
BYTE_ORDERS: Final[tuple[str, ...]] = get_args(ByteOrder)
PROFILE_NAMES: Final[tuple[str, ...]] = tuple(sorted(PROFILES))


# ------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------
@unique
class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_int(self) -> int:
        return getattr(logging, self.value)


def setup_logging(level: LogLevel) -> None:
    logging.basicConfig(
        level=level.to_int(),
        format="%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
    )


# ------------------------------------------------------------------
# Decoder options
# ------------------------------------------------------------------
@dataclass(slots=True)
class DecoderOptions:
    profile: str = "default"
    charset: str | None = None
    byteorder: ByteOrder | None = None
    isolate_failures: bool = False

    def build(self) -> JourneyDecoder:
        return JourneyDecoder(
            get_profile(self.profile),
            charset=self.charset,
            byteorder=self.byteorder,
            isolate_failures=self.isolate_failures,
        )


# ------------------------------------------------------------------
# IO helpers
# ------------------------------------------------------------------
def read_document(path: str | Path) -> bytes:
    """Return the whole document at *path* or stdin (use '-' for stdin)."""
    if path == STDIN_MARKER:
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def decode_document(data: bytes, options: DecoderOptions | None = None) -> DecodeResult:
    return (options or DecoderOptions()).build().decode(data)
