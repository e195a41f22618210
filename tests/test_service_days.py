"""Tests for service day bitmask resolution."""

import pytest
from bitstring import pack

from hafas.helpers import ByteReader, HafasRangeError
from hafas.service_days import ServiceDayResolver, first_set_bit_offset
from hafas.tables import StringTable

POOL = b"\x00daily\x00Mo-Fr\x00"
DAILY, WEEKDAYS = 1, 7


def _resolver(*blocks: bytes) -> ServiceDayResolver:
    reader = ByteReader(POOL + b"".join(blocks))
    return ServiceDayResolver(reader, len(POOL), StringTable(reader, 0))


def _block(text: int, base: int, mask: bytes, length: int | None = None) -> bytes:
    if length is None:
        length = len(mask)
    header = pack("uintle:16, uintle:16, uintle:16", text, base, length)
    return header.bytes + mask


@pytest.mark.parametrize(
    ("mask", "expected"),
    [(b"\x80", 0), (b"\x01", 7), (b"\x00\x40", 9), (b"\x00\x00", 16), (b"", 0)],
)
def test_first_set_bit_offset(mask: bytes, expected: int) -> None:
    assert first_set_bit_offset(mask) == expected


def test_first_day_with_bit_base() -> None:
    """Bit base counts whole bytes, bits are numbered from the MSB."""
    resolver = _resolver(_block(WEEKDAYS, 2, b"\x00\x00\x20\xff"))

    days = resolver.resolve(0)

    assert days.text == "Mo-Fr"
    assert (days.bit_base, days.bit_length) == (2, 4)
    assert days.day_offset == 2 * 8 + 16 + 2


def test_running_today() -> None:
    days = _resolver(_block(DAILY, 0, b"\x80")).resolve(0)

    assert days.text == "daily"
    assert days.day_offset == 0


def test_all_zero_mask_counts_every_byte() -> None:
    days = _resolver(_block(DAILY, 1, b"\x00\x00\x00")).resolve(0)

    assert days.day_offset == 8 + 24


def test_scan_stops_at_first_nonzero_byte() -> None:
    """A declared length past the end of the buffer is fine once a bit is found."""
    days = _resolver(_block(DAILY, 0, b"\x10", length=200)).resolve(0)

    assert days.day_offset == 3


def test_truncated_all_zero_mask_raises() -> None:
    resolver = _resolver(_block(DAILY, 0, b"\x00", length=200))

    with pytest.raises(HafasRangeError):
        resolver.resolve(0, "Service Days for Journey 0")


def test_second_block_by_offset() -> None:
    first = _block(DAILY, 0, b"\x80")
    resolver = _resolver(first, _block(WEEKDAYS, 0, b"\x02"))

    days = resolver.resolve(len(first))

    assert days.text == "Mo-Fr"
    assert days.day_offset == 6
