"""Tests for the string, station and comment tables."""

import pytest
from bitstring import pack

from hafas.helpers import ByteReader, HafasRangeError
from hafas.tables import CommentTable, StationTable, StringTable, simplify

POOL = b"\x00  Berlin Hbf \x00Hannover Hbf\x00Gleis 7\x00"
BERLIN, HANNOVER, GLEIS = 1, 15, 28


def _reader(prefix: bytes) -> tuple[ByteReader, int]:
    """Return a reader over *prefix* + pool and the pool position."""
    return ByteReader(prefix + POOL), len(prefix)


def test_string_offset_zero_is_empty() -> None:
    reader, position = _reader(b"")
    strings = StringTable(reader, position)

    assert strings.resolve(0) == ""


def test_strings_are_trimmed_and_cursor_untouched() -> None:
    reader, position = _reader(b"\xaa\xbb")
    reader.seek(1)
    strings = StringTable(reader, position)

    assert strings.resolve(BERLIN) == "Berlin Hbf"
    assert strings.resolve(HANNOVER) == "Hannover Hbf"
    assert reader.pos == 1


def test_read_next_consumes_an_offset() -> None:
    reader, position = _reader(pack("uintle:16", GLEIS).bytes)
    strings = StringTable(reader, position)

    assert strings.read_next() == "Gleis 7"
    assert reader.pos == 2


def test_string_outside_buffer_raises() -> None:
    reader, position = _reader(b"")

    with pytest.raises(HafasRangeError):
        StringTable(reader, position).resolve(500, hint="Line")


def test_with_encoding_changes_decoding() -> None:
    reader = ByteReader(b"\x00M\xc3\xbcnchen\x00")
    strings = StringTable(reader, 0)

    assert strings.resolve(1) == "MÃ¼nchen"
    assert strings.with_encoding("utf-8").resolve(1) == "München"


def test_station_records() -> None:
    records = pack(
        "uintle:16, uintle:32, intle:32, intle:32, uintle:16, uintle:32, intle:32, intle:32",
        BERLIN, 8011160, 13369549, 52525589,
        HANNOVER, 8000152, -9741017, 52376764,
    ).bytes  # fmt: skip
    reader, position = _reader(records)
    stations = StationTable(reader, 0, StringTable(reader, position))

    berlin = stations.resolve(0)
    assert berlin.name == "Berlin Hbf"
    assert berlin.external_id == 8011160
    assert berlin.longitude == pytest.approx(13.369549)
    assert berlin.latitude == pytest.approx(52.525589)

    hannover = stations.resolve(1)
    assert hannover.name == "Hannover Hbf"
    assert hannover.longitude == pytest.approx(-9.741017)


def test_station_resolution_is_repeatable() -> None:
    records = pack("uintle:16, uintle:32, intle:32, intle:32", BERLIN, 8011160, 0, 0).bytes
    reader, position = _reader(b"\x00\x00" + records)
    stations = StationTable(reader, 2, StringTable(reader, position))
    reader.seek(1)

    first = stations.resolve(0)
    second = stations.resolve(0)

    assert first == second
    assert first.name == "Berlin Hbf"
    assert reader.pos == 1


def test_station_index_out_of_range() -> None:
    reader, position = _reader(b"")
    stations = StationTable(reader, 0, StringTable(reader, position))

    with pytest.raises(HafasRangeError):
        stations.resolve(1000)


def test_station_read_next_keeps_cursor_after_index() -> None:
    records = pack("uintle:16, uintle:32, intle:32, intle:32", HANNOVER, 1, 0, 0).bytes
    index = pack("uintle:16, uintle:16", 0, 0xBEEF).bytes
    reader, position = _reader(index + records)
    stations = StationTable(reader, len(index), StringTable(reader, position))

    assert stations.read_next().name == "Hannover Hbf"
    assert reader.u16() == 0xBEEF


def test_comments_are_joined() -> None:
    block = pack("uintle:16, uintle:16, uintle:16", 2, BERLIN, GLEIS).bytes
    reader, position = _reader(pack("uintle:16", 0).bytes + block)
    comments = CommentTable(reader, 0, StringTable(reader, position))

    assert comments.resolve(0) == []
    assert comments.resolve(2) == ["Berlin Hbf", "Gleis 7"]
    assert comments.resolve_text(2) == "Berlin Hbf, \nGleis 7"


def test_simplify_collapses_whitespace() -> None:
    assert simplify("  ICE \t 571\n") == "ICE 571"
