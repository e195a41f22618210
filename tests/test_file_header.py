"""Tests for the file header and time decoding."""

import logging
from datetime import datetime

import pytest
from bitstring import pack

from document_builder import DocumentSpec, build_document
from hafas.file_header import (
    BlockPositions,
    FileHeader,
    LocationType,
    check_version,
    read_date,
    read_time,
)
from hafas.helpers import ByteReader, HafasFormatError
from hafas.tables import StringTable


def _read_header(data: bytes, byteorder: str = "little") -> FileHeader:
    reader = ByteReader(data, byteorder)  # type: ignore[arg-type]
    version = check_version(reader)
    positions = BlockPositions.read(reader)
    strings = StringTable(reader, positions.strings)
    return FileHeader.read(reader, strings, version, positions)


def test_reads_origin_target_and_date(document: bytes) -> None:
    header = _read_header(document)

    assert header.version == 6
    assert header.journey_count == 2
    assert header.date == datetime(2024, 3, 15)
    assert header.origin.name == "Berlin Hbf"
    assert header.origin.location_type is LocationType.STATION
    assert header.origin.longitude == pytest.approx(13.369549)
    assert header.origin.latitude == pytest.approx(52.525589)
    assert header.target.name == "Hannover Kröpcke"


def test_block_positions_point_inside_document(document: bytes) -> None:
    positions = BlockPositions.read(ByteReader(document))

    for position in (
        positions.service_days,
        positions.strings,
        positions.stations,
        positions.comments,
        positions.extension_header,
    ):
        assert 0x4A <= position < len(document)


def test_big_endian_documents() -> None:
    data = build_document(DocumentSpec(version=5, origin="A", target="B", byteorder="big"))

    header = _read_header(data, "big")

    assert header.version == 5
    assert (header.origin.name, header.target.name) == ("A", "B")


@pytest.mark.parametrize("version", [0, 4, 7, 0x0600])
def test_unknown_version_is_rejected(version: int) -> None:
    data = build_document(DocumentSpec(version=version))

    with pytest.raises(HafasFormatError, match="version"):
        check_version(ByteReader(data))


def test_short_document_is_rejected(document: bytes) -> None:
    with pytest.raises(HafasFormatError, match="too short"):
        check_version(ByteReader(document[:0x40]))


def test_unknown_location_type_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    data = build_document(DocumentSpec(origin="Somewhere", origin_type=9))

    with caplog.at_level(logging.WARNING, logger="hafas.file_header"):
        header = _read_header(data)

    assert header.origin.location_type is LocationType.UNKNOWN
    assert "Unknown location type 9" in caplog.text


def test_date_day_one_is_epoch() -> None:
    assert read_date(ByteReader(pack("uintle:16", 1).bytes)) == datetime(1980, 1, 1)


def test_times_are_anchored_to_date_and_day_offset() -> None:
    reader = ByteReader(pack("uintle:16, uintle:16, uintle:16", 835, 2400, 0xFFFF).bytes)
    base = datetime(2024, 3, 15)

    assert read_time(reader, base, 1) == datetime(2024, 3, 16, 8, 35)
    assert read_time(reader, base, 0) == datetime(2024, 3, 16, 0, 0)
    assert read_time(reader, base, 0) is None


def test_journey_and_part_positions() -> None:
    assert FileHeader.journey_header_position(0) == 0x4A
    assert FileHeader.journey_header_position(2) == 0x4A + 24
    assert FileHeader.part_position(24, 1) == 0x4A + 24 + 20
