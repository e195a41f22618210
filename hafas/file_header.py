from dataclasses import dataclass
from datetime import date, datetime, timedelta
from logging import getLogger
from typing import ClassVar, Final, Self

from .helpers import ByteReader, HafasFormatError, SafeIntEnumMixin
from .tables import COORDINATE_SCALE, StringTable

SUPPORTED_VERSIONS: Final[frozenset[int]] = frozenset({5, 6})
FILE_HEADER_SIZE: Final[int] = 0x4A
JOURNEY_HEADER_SIZE: Final[int] = 12
PART_RECORD_SIZE: Final[int] = 20

ORIGIN_POSITION: Final[int] = 0x02
SERVICE_DAYS_POSITION: Final[int] = 0x20
DATE_POSITION: Final[int] = 0x28
STATIONS_POSITION: Final[int] = 0x36
EXTENSION_HEADER_POSITION: Final[int] = 0x46

DATE_EPOCH: Final[date] = date(1980, 1, 1)
MAX_TIME_VALUE: Final[int] = 2400


class LocationType(SafeIntEnumMixin):
    UNKNOWN = 0
    STATION = 1
    ADDRESS = 2
    POI = 3


@dataclass(frozen=True, slots=True)
class Location:
    """Origin or target location block of the file header (14 bytes)."""

    _logger: ClassVar = getLogger(__name__)

    name: str
    location_type: LocationType
    longitude: float
    latitude: float

    @classmethod
    def read(cls, reader: ByteReader, strings: StringTable, hint: str) -> Self:
        name = strings.read_next(hint=hint)
        reader.skip(2, hint)
        raw_type = reader.u16(hint)
        location_type = LocationType(raw_type)
        if location_type is LocationType.UNKNOWN:
            cls._logger.warning("Unknown location type %d for '%s'", raw_type, name)
        longitude = reader.i32(hint) / COORDINATE_SCALE
        latitude = reader.i32(hint) / COORDINATE_SCALE
        return cls(name, location_type, longitude, latitude)


def read_date(reader: ByteReader, hint: str | None = None) -> datetime:
    """Read a 16-bit day count; day 1 is 1980-01-01."""
    days = reader.u16(hint)
    return datetime.combine(DATE_EPOCH, datetime.min.time()) + timedelta(days=days - 1)


def read_time(
    reader: ByteReader, base_date: datetime, day_offset: int, hint: str | None = None
) -> datetime | None:
    """Read a 16-bit ``HHMM`` value anchored at *base_date* + *day_offset* days.

    Values above 2400 (``0xFFFF`` in practice) mean "no time" and give *None*.
    """
    value = reader.u16(hint)
    if value > MAX_TIME_VALUE:
        return None
    hour, minute = divmod(value, 100)
    return base_date + timedelta(days=day_offset, hours=hour, minutes=minute)


def check_version(reader: ByteReader) -> int:
    """Return the format version, raising for short or unknown documents."""
    if reader.size < FILE_HEADER_SIZE:
        raise HafasFormatError(
            f"Document is too short ({reader.size} bytes) for a file header"
        )
    reader.seek(0, "Version")
    version = reader.u16("Version")
    if version not in SUPPORTED_VERSIONS:
        raise HafasFormatError(f"Unknown HAFAS binary format version: {version}")
    return version


@dataclass(frozen=True, slots=True)
class BlockPositions:
    """Absolute positions of the data blocks, as listed in the file header."""

    service_days: int
    strings: int
    stations: int
    comments: int
    extension_header: int

    @classmethod
    def read(cls, reader: ByteReader) -> Self:
        hint = "Block Positions"
        reader.seek(SERVICE_DAYS_POSITION, hint)
        service_days = reader.u32(hint)
        strings = reader.u32(hint)
        reader.seek(STATIONS_POSITION, hint)
        stations = reader.u32(hint)
        comments = reader.u32(hint)
        reader.seek(EXTENSION_HEADER_POSITION, hint)
        extension_header = reader.u32(hint)
        return cls(service_days, strings, stations, comments, extension_header)


@dataclass(frozen=True, slots=True)
class FileHeader:
    """Fixed 0x4a byte header at the start of every binary journey document.

    Attributes:
        version: Format version, 5 or 6
        origin: Requested origin location
        target: Requested target location
        journey_count: Number of journey headers following the file header
        date: Base date all journey times are relative to
        positions: Positions of the data blocks
    """

    version: int
    origin: Location
    target: Location
    journey_count: int
    date: datetime
    positions: BlockPositions

    @classmethod
    def read(
        cls,
        reader: ByteReader,
        strings: StringTable,
        version: int,
        positions: BlockPositions,
    ) -> Self:
        reader.seek(ORIGIN_POSITION, "Origin Location")
        origin = Location.read(reader, strings, "Origin Location")
        target = Location.read(reader, strings, "Target Location")
        journey_count = reader.u16("Journey Count")

        reader.seek(DATE_POSITION, "Date")
        base_date = read_date(reader, "Date")

        return cls(version, origin, target, journey_count, base_date, positions)

    @staticmethod
    def journey_header_position(index: int) -> int:
        return FILE_HEADER_SIZE + index * JOURNEY_HEADER_SIZE

    @staticmethod
    def part_position(parts_offset: int, part: int) -> int:
        return FILE_HEADER_SIZE + parts_offset + part * PART_RECORD_SIZE


@dataclass(frozen=True, slots=True)
class JourneyHeader:
    """12-byte per-journey header directly following the file header."""

    service_days_offset: int
    parts_offset: int
    part_count: int
    changes: int

    @classmethod
    def read(cls, reader: ByteReader, hint: str) -> Self:
        service_days_offset = reader.u16(hint)
        parts_offset = reader.u32(hint)
        part_count = reader.u16(hint)
        changes = reader.u16(hint)
        return cls(service_days_offset, parts_offset, part_count, changes)
