from dataclasses import dataclass
from typing import Final, Self

from .helpers import ByteReader

STATION_RECORD_SIZE: Final[int] = 14
COORDINATE_SCALE: Final[float] = 1_000_000.0
DEFAULT_ENCODING: Final[str] = "iso-8859-1"
COMMENT_SEPARATOR: Final[str] = ", \n"


def simplify(text: str) -> str:
    """Trim *text* and collapse inner whitespace runs to single spaces."""
    return " ".join(text.split())


@dataclass(frozen=True, slots=True)
class Station:
    """One 14-byte record of the stations table.

    Attributes:
        name: Stop name resolved through the string table
        external_id: Provider specific stop ID
        longitude: Longitude in degrees
        latitude: Latitude in degrees
    """

    name: str
    external_id: int
    longitude: float
    latitude: float


class StringTable:
    """Resolves 16-bit offsets into the trailing string pool of a document.

    Lookups are side excursions: the reader position is left untouched.
    """

    def __init__(
        self, reader: ByteReader, position: int, encoding: str = DEFAULT_ENCODING
    ) -> None:
        self._reader = reader
        self.position = position
        self.encoding = encoding

    def with_encoding(self, encoding: str) -> Self:
        return type(self)(self._reader, self.position, encoding)

    def resolve(
        self, offset: int, encoding: str | None = None, hint: str | None = None
    ) -> str:
        """Return the trimmed string stored at *offset*; offset 0 is ``""``."""
        if offset == 0:
            return ""
        text = self._reader.read_string_at(
            self.position + offset, encoding or self.encoding, hint
        )
        return text.strip()

    def resolve_bytes(self, offset: int, hint: str | None = None) -> bytes:
        """Return the raw bytes stored at *offset*; offset 0 is ``b""``."""
        if offset == 0:
            return b""
        return self._reader.read_zero_terminated_bytes_at(self.position + offset, hint)

    def read_next(self, encoding: str | None = None, hint: str | None = None) -> str:
        """Read a 16-bit offset at the cursor and resolve it."""
        return self.resolve(self._reader.u16(hint), encoding, hint)


class StationTable:
    """Resolves 16-bit station indices into :class:`Station` records."""

    def __init__(self, reader: ByteReader, position: int, strings: StringTable) -> None:
        self._reader = reader
        self.position = position
        self.strings = strings

    def resolve(self, index: int, hint: str | None = None) -> Station:
        hint = hint or f"Station {index}"
        with self._reader.excursion() as reader:
            reader.seek(self.position + STATION_RECORD_SIZE * index, hint)
            name = self.strings.read_next(hint=hint)
            external_id = reader.u32(hint)
            longitude = reader.i32(hint) / COORDINATE_SCALE
            latitude = reader.i32(hint) / COORDINATE_SCALE
        return Station(name, external_id, longitude, latitude)

    def read_next(self, hint: str | None = None) -> Station:
        """Read a 16-bit station index at the cursor and resolve it."""
        return self.resolve(self._reader.u16(hint), hint)


class CommentTable:
    """Comment lists referenced by journey parts.

    Each block holds a 16-bit count followed by that many string offsets.
    """

    def __init__(self, reader: ByteReader, position: int, strings: StringTable) -> None:
        self._reader = reader
        self.position = position
        self.strings = strings

    def resolve(self, offset: int, hint: str | None = None) -> list[str]:
        with self._reader.excursion() as reader:
            reader.seek(self.position + offset, hint)
            count = reader.u16(hint)
            return [self.strings.read_next(hint=hint) for _ in range(count)]

    def resolve_text(self, offset: int, hint: str | None = None) -> str:
        return COMMENT_SEPARATOR.join(self.resolve(offset, hint))
