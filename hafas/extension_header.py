import codecs
from dataclasses import dataclass
from typing import Final, Self

from .helpers import ByteReader, HafasDecodeError, HafasFormatError, SafeIntEnumMixin
from .tables import StringTable

MIN_HEADER_LENGTH: Final[int] = 0x2C
ATTRIBUTES_HEADER_LENGTH: Final[int] = 0x30
MIN_ATTRIBUTES_HEADER_LENGTH: Final[int] = 0x32
ATTRIBUTES_POSITION_OFFSET: Final[int] = 0x2C

JOURNEY_DETAILS_VERSION: Final[int] = 1
JOURNEY_DETAILS_PART_SIZE: Final[int] = 16
STOP_RECORD_SIZE: Final[int] = 26


# --------------------------------------------------------------------------- #
# Server error codes                                                          #
# --------------------------------------------------------------------------- #
class HafasErrorCode(SafeIntEnumMixin):
    """Error codes reported in the extension header."""

    UNKNOWN = -1
    OK = 0
    SESSION_EXPIRED = 1
    NO_JOURNEYS = 890
    ORIGIN_TARGET_TOO_CLOSE = 895
    UNRESOLVABLE_ADDRESS = 9220
    SERVICE_DOWN = 9240
    INVALID_DATE = 9360
    STOPS_TOO_CLOSE = 9380


class HafasServiceError(HafasDecodeError):
    """The server answered with a nonzero error code.

    Attributes:
        code: Raw error code from the extension header
    """

    message: str = "Unknown error code"

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"{self.message} (error code {code})")


class SessionExpiredError(HafasServiceError):
    message = "Session expired"


class UnresolvableAddressError(HafasServiceError):
    message = "Unresolvable address"


class ServiceDownError(HafasServiceError):
    message = "Service down"


class InvalidDateError(HafasServiceError):
    message = "Invalid date"


class StopsTooCloseError(HafasServiceError):
    message = "Origin and target stops are too close"


class UnknownErrorCodeError(HafasServiceError):
    message = "Unknown error code"


SERVICE_ERRORS: Final[dict[HafasErrorCode, type[HafasServiceError]]] = {
    HafasErrorCode.SESSION_EXPIRED: SessionExpiredError,
    HafasErrorCode.UNRESOLVABLE_ADDRESS: UnresolvableAddressError,
    HafasErrorCode.SERVICE_DOWN: ServiceDownError,
    HafasErrorCode.INVALID_DATE: InvalidDateError,
    HafasErrorCode.ORIGIN_TARGET_TOO_CLOSE: StopsTooCloseError,
    HafasErrorCode.STOPS_TOO_CLOSE: StopsTooCloseError,
}


def error_for_code(code: int) -> HafasServiceError | None:
    """Map a raw error code to an exception; *None* for 0 and 890 (no journeys)."""
    if code in (HafasErrorCode.OK, HafasErrorCode.NO_JOURNEYS):
        return None
    return SERVICE_ERRORS.get(HafasErrorCode(code), UnknownErrorCodeError)(code)


# --------------------------------------------------------------------------- #
# Extension header                                                            #
# --------------------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class ExtensionHeader:
    """Extension header, located through the file header.

    Attributes:
        length: Length of the header in bytes
        sequence_number: Used when requesting earlier/later journeys
        request_id: Request ID string
        journey_details_position: Absolute position of the journey details header
        error_code: Raw server error code, 0 on success
        encoding: Declared text encoding of the string table (may be empty)
        context_id: Context ID string, decoded with *encoding*
        attributes_offset: Absolute position of the attribute key/value chains
        attributes_position: Absolute position of the per-journey attribute
            indices, 0 if the header is too short to carry it
    """

    length: int
    sequence_number: int
    request_id: str
    journey_details_position: int
    error_code: int
    encoding: str
    context_id: str
    attributes_offset: int
    attributes_position: int

    @property
    def has_no_journeys(self) -> bool:
        return self.error_code == HafasErrorCode.NO_JOURNEYS

    def raise_for_error(self) -> None:
        """Raise the typed error for a nonzero code, except "no journeys"."""
        if (error := error_for_code(self.error_code)) is not None:
            raise error

    @classmethod
    def read(cls, reader: ByteReader, position: int, strings: StringTable) -> Self:
        hint = "Extension Header"
        reader.seek(position, hint)
        length = reader.u32(hint)
        if length < MIN_HEADER_LENGTH:
            raise HafasFormatError(f"Extension header is too short ({length})")

        reader.skip(4, hint)
        sequence_number = reader.u16(hint)
        request_id = strings.read_next(hint=hint)
        journey_details_position = reader.u32(hint)
        error_code = reader.u16(hint)
        if error_code:
            # the remaining fields are not filled in by the server
            return cls(
                length=length,
                sequence_number=sequence_number,
                request_id=request_id,
                journey_details_position=journey_details_position,
                error_code=error_code,
                encoding="",
                context_id="",
                attributes_offset=0,
                attributes_position=0,
            )

        reader.skip(14, hint)
        raw_encoding = strings.resolve_bytes(reader.u16(hint), hint)
        encoding = raw_encoding.decode("ascii", errors="ignore").strip()
        context_id = strings.read_next(encoding=known_encoding(encoding), hint=hint)
        attributes_offset = reader.u16(hint)

        attributes_position = 0
        if length >= ATTRIBUTES_HEADER_LENGTH:
            if length < MIN_ATTRIBUTES_HEADER_LENGTH:
                raise HafasFormatError(f"Extension header is too short ({length})")
            hint = "Extension Header (Attribute Position)"
            reader.seek(position + ATTRIBUTES_POSITION_OFFSET, hint)
            attributes_position = reader.u32(hint)

        return cls(
            length=length,
            sequence_number=sequence_number,
            request_id=request_id,
            journey_details_position=journey_details_position,
            error_code=error_code,
            encoding=encoding,
            context_id=context_id,
            attributes_offset=attributes_offset,
            attributes_position=attributes_position,
        )


def known_encoding(name: str) -> str | None:
    """Return *name* if it names a known text encoding, otherwise *None*.

    Byte-to-byte codecs such as ``hex`` or ``zlib`` are not text encodings
    and count as unknown.
    """
    if not name:
        return None
    try:
        info = codecs.lookup(name)
    except LookupError:
        return None
    if not getattr(info, "_is_text_encoding", True):
        return None
    return name


# --------------------------------------------------------------------------- #
# Journey details header                                                      #
# --------------------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class JourneyDetailsHeader:
    """14-byte header of the realtime journey details block."""

    position: int
    version: int
    index_offset: int
    part_offset: int
    part_size: int
    stop_size: int
    stops_offset: int

    @classmethod
    def read(cls, reader: ByteReader, position: int) -> Self:
        hint = "Journey Details"
        if position == 0:
            raise HafasFormatError("No journey details")
        reader.seek(position, hint)
        version = reader.u16(hint)
        if version != JOURNEY_DETAILS_VERSION:
            raise HafasFormatError(f"Unknown journey details version: {version}")
        reader.skip(2, hint)
        index_offset = reader.u16(hint)
        part_offset = reader.u16(hint)
        part_size = reader.u16(hint)
        if part_size != JOURNEY_DETAILS_PART_SIZE:
            raise HafasFormatError(f"Unexpected journey details part size: {part_size}")
        stop_size = reader.u16(hint)
        stops_offset = reader.u16(hint)
        return cls(
            position, version, index_offset, part_offset, part_size, stop_size, stops_offset
        )

    def index_position(self, journey: int) -> int:
        return self.position + self.index_offset + journey * 2

    def details_position(self, details_offset: int) -> int:
        return self.position + details_offset

    def part_position(self, details_offset: int, part: int) -> int:
        return self.position + details_offset + self.part_offset + part * self.part_size

    def stop_position(self, stop_index: int) -> int:
        return self.position + self.stops_offset + stop_index * self.stop_size
