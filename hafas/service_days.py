from dataclasses import dataclass
from typing import Final

from .helpers import ByteReader
from .tables import StringTable

BITS_PER_BYTE: Final[int] = 8
HIGHEST_BIT: Final[int] = 0x80


@dataclass(frozen=True, slots=True)
class ServiceDays:
    """Decoded service days block of one journey.

    Attributes:
        text: Human readable service days note (e.g. "daily")
        bit_base: Byte index the bitmask starts at
        bit_length: Number of bitmask bytes
        day_offset: Days between the file date and the first day the journey runs
    """

    text: str
    bit_base: int
    bit_length: int
    day_offset: int


def first_set_bit_offset(bitmask: bytes) -> int:
    """Return the index of the first set bit, counting from the MSB of byte 0.

    An all-zero mask gives ``8 * len(bitmask)``.
    """
    offset = 0
    for value in bitmask:
        if value == 0:
            offset += BITS_PER_BYTE
            continue
        while not value & HIGHEST_BIT:
            value <<= 1
            offset += 1
        break
    return offset


class ServiceDayResolver:
    """Reads service days blocks stored at ``service_days_position + offset``."""

    def __init__(self, reader: ByteReader, position: int, strings: StringTable) -> None:
        self._reader = reader
        self.position = position
        self.strings = strings

    def resolve(self, offset: int, hint: str | None = None) -> ServiceDays:
        reader = self._reader
        reader.seek(self.position + offset, hint)
        text = self.strings.read_next(hint=hint)
        bit_base = reader.u16(hint)
        bit_length = reader.u16(hint)

        # the scan stops at the first nonzero byte, later bytes are never read
        day_offset = bit_base * BITS_PER_BYTE
        for _ in range(bit_length):
            value = reader.u8(hint)
            if value:
                day_offset += first_set_bit_offset(bytes([value]))
                break
            day_offset += BITS_PER_BYTE

        return ServiceDays(text, bit_base, bit_length, day_offset)
