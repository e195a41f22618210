import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import ClassVar, Final, Self

from .attributes import KEY_CATEGORY, KEY_CLASS, KEY_OPERATOR, AttributeChains
from .extension_header import (
    STOP_RECORD_SIZE,
    ExtensionHeader,
    JourneyDetailsHeader,
    known_encoding,
)
from .file_header import (
    BlockPositions,
    FileHeader,
    JourneyHeader,
    check_version,
    read_time,
)
from .helpers import ByteOrder, ByteReader, HafasDecodeError, HafasFormatError
from .journey import (
    Journey,
    JourneyPart,
    SubJourney,
    SubJourneyStop,
    append_news,
    delay_minutes,
    predicted_platform,
)
from .profiles import DEFAULT_PROFILE, HafasProfile
from .service_days import ServiceDayResolver
from .tables import CommentTable, Station, StationTable, StringTable, simplify
from .vehicles import VehicleResolver, VehicleType

PART_TYPE_FOOTWAY: Final[int] = 1
REALTIME_STATUS_CANCELED: Final[int] = 2
NO_DELAY_VALUE: Final[int] = 0xFFFF

CANCELED_NEWS: Final[str] = "Train is canceled"
LINE_SEPARATOR: Final[str] = "#"
LINE_PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?:bus|str)\s+", re.IGNORECASE)
VEHICLE_PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*([a-z]+)", re.IGNORECASE)


def split_line_string(text: str) -> tuple[str, str]:
    """Split "line#vehicle type" into (transport line, vehicle type string).

    Without a separator the whole text is used for both.
    """
    line, sep, vehicle = text.partition(LINE_SEPARATOR)
    if not sep:
        vehicle = line
    return simplify(LINE_PREFIX_PATTERN.sub("", line)), vehicle


def _parse_class(value: str) -> int | None:
    match = re.match(r"\s*(-?\d+)", value)
    return int(match.group(1)) if match else None


# --------------------------------------------------------------------------- #
# Records                                                                     #
# --------------------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class PartRecord:
    """20-byte journey part record (planned values)."""

    planned_departure: datetime | None
    departure_station: Station
    planned_arrival: datetime | None
    arrival_station: Station
    part_type: int
    line_string: str
    planned_departure_platform: str
    planned_arrival_platform: str
    attribute_index: int
    comments_offset: int

    @classmethod
    def read(cls, doc: "DocumentContext", day_offset: int, hint: str) -> Self:
        reader, strings, base = doc.reader, doc.strings, doc.header.date
        return cls(
            planned_departure=read_time(reader, base, day_offset, hint),
            departure_station=doc.stations.read_next(hint),
            planned_arrival=read_time(reader, base, day_offset, hint),
            arrival_station=doc.stations.read_next(hint),
            part_type=reader.u16(hint),
            line_string=strings.read_next(hint=hint),
            planned_departure_platform=strings.read_next(hint=hint),
            planned_arrival_platform=strings.read_next(hint=hint),
            attribute_index=reader.u16(hint),
            comments_offset=reader.u16(hint),
        )


@dataclass(frozen=True, slots=True)
class PartDetails:
    """16-byte realtime record of one journey part."""

    predicted_departure: datetime | None
    predicted_arrival: datetime | None
    predicted_departure_platform: str
    predicted_arrival_platform: str
    first_stop_index: int
    stop_count: int

    @classmethod
    def read(cls, doc: "DocumentContext", day_offset: int, hint: str) -> Self:
        reader, strings, base = doc.reader, doc.strings, doc.header.date
        predicted_departure = read_time(reader, base, day_offset, hint)
        predicted_arrival = read_time(reader, base, day_offset, hint)
        predicted_departure_platform = strings.read_next(hint=hint)
        predicted_arrival_platform = strings.read_next(hint=hint)
        reader.skip(4, hint)
        return cls(
            predicted_departure,
            predicted_arrival,
            predicted_departure_platform,
            predicted_arrival_platform,
            first_stop_index=reader.u16(hint),
            stop_count=reader.u16(hint),
        )


def read_stop(doc: "DocumentContext", day_offset: int, hint: str) -> SubJourneyStop:
    """Read one 26-byte intermediate stop record at the cursor."""
    reader, strings, base = doc.reader, doc.strings, doc.header.date
    planned_departure = read_time(reader, base, day_offset, hint)
    planned_arrival = read_time(reader, base, day_offset, hint)
    planned_departure_platform = strings.read_next(hint=hint)
    planned_arrival_platform = strings.read_next(hint=hint)
    reader.skip(4, hint)

    predicted_departure = read_time(reader, base, day_offset, hint)
    predicted_arrival = read_time(reader, base, day_offset, hint)
    predicted_departure_platform = strings.read_next(hint=hint)
    predicted_arrival_platform = strings.read_next(hint=hint)
    reader.skip(4, hint)

    station = doc.stations.read_next(hint)
    return SubJourneyStop(
        stop_name=station.name,
        news="",
        platform_departure=predicted_platform(
            planned_departure_platform, predicted_departure_platform
        ),
        platform_arrival=predicted_platform(
            planned_arrival_platform, predicted_arrival_platform
        ),
        time_departure=planned_departure,
        time_arrival=planned_arrival,
        time_departure_delay=delay_minutes(planned_departure, predicted_departure),
        time_arrival_delay=delay_minutes(planned_arrival, predicted_arrival),
    )


@dataclass(slots=True)
class DocumentContext:
    """Cursor and lookup tables of one document, threaded through every reader."""

    reader: ByteReader
    strings: StringTable
    stations: StationTable
    comments: CommentTable
    service_days: ServiceDayResolver
    attributes: AttributeChains
    header: FileHeader
    extension: ExtensionHeader
    details: JourneyDetailsHeader


@dataclass(frozen=True, slots=True)
class JourneyFailure:
    """A journey skipped because its records could not be decoded."""

    index: int
    error: HafasDecodeError


@dataclass(slots=True)
class DecodeResult:
    journeys: list[Journey] = field(default_factory=list)
    failures: list[JourneyFailure] = field(default_factory=list)
    header: FileHeader | None = None
    extension: ExtensionHeader | None = None

    def __iter__(self) -> Iterator[Journey]:
        return iter(self.journeys)

    def __len__(self) -> int:
        return len(self.journeys)


# --------------------------------------------------------------------------- #
# Decoder                                                                     #
# --------------------------------------------------------------------------- #
class JourneyDecoder:
    """Decoder for HAFAS binary journey documents (format versions 5 and 6).

    One decoder may be shared between threads: every call builds its own
    reader and tables.

    By default decoding is all-or-nothing, the first broken journey aborts
    the whole document. With ``isolate_failures`` broken journeys are
    reported in :attr:`DecodeResult.failures` and the rest is kept.
    Header level errors are always fatal.
    """

    _logger: ClassVar = getLogger(__name__)

    def __init__(
        self,
        profile: HafasProfile = DEFAULT_PROFILE,
        *,
        charset: str | None = None,
        byteorder: ByteOrder | None = None,
        isolate_failures: bool = False,
    ) -> None:
        self.profile = profile
        self.charset = charset or profile.charset
        self.byteorder: ByteOrder = byteorder or profile.byteorder
        self.isolate_failures = isolate_failures
        self.vehicles: VehicleResolver = profile.vehicle_resolver()

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def decode(self, data: bytes | bytearray) -> DecodeResult:
        """Decode every journey of *data*.

        Raises:
            HafasFormatError: Unsupported or truncated document
            HafasServiceError: The server reported an error
            HafasRangeError: An offset points outside of the document
        """
        doc = self.open(data)
        if doc is None:
            return DecodeResult()

        result = DecodeResult(header=doc.header, extension=doc.extension)
        for item in self._iter_items(doc):
            if isinstance(item, JourneyFailure):
                result.failures.append(item)
            else:
                result.journeys.append(item)
        return result

    def iter_journeys(self, data: bytes | bytearray) -> Iterator[Journey]:
        """Yield journeys one at a time, in document order."""
        doc = self.open(data)
        if doc is None:
            return
        for item in self._iter_items(doc):
            if isinstance(item, Journey):
                yield item

    def open(self, data: bytes | bytearray) -> DocumentContext | None:
        """Read all headers of *data*; *None* if the server found no journeys."""
        if not data:
            raise HafasFormatError("Empty data received")

        reader = ByteReader(data, self.byteorder)
        version = check_version(reader)
        positions = BlockPositions.read(reader)
        strings = StringTable(reader, positions.strings, self.charset)

        extension = ExtensionHeader.read(reader, positions.extension_header, strings)
        extension.raise_for_error()
        if extension.has_no_journeys:
            self._logger.warning("No journeys in result set.")
            return None

        strings = strings.with_encoding(known_encoding(extension.encoding) or self.charset)
        details = JourneyDetailsHeader.read(reader, extension.journey_details_position)
        header = FileHeader.read(reader, strings, version, positions)
        self._logger.debug(
            "Version %d document with %d journeys, %s", version, header.journey_count, positions
        )

        return DocumentContext(
            reader=reader,
            strings=strings,
            stations=StationTable(reader, positions.stations, strings),
            comments=CommentTable(reader, positions.comments, strings),
            service_days=ServiceDayResolver(reader, positions.service_days, strings),
            attributes=AttributeChains(
                reader, extension.attributes_offset, extension.attributes_position, strings
            ),
            header=header,
            extension=extension,
            details=details,
        )

    # ------------------------------------------------------------------ #
    # Journeys                                                           #
    # ------------------------------------------------------------------ #
    def _iter_items(self, doc: DocumentContext) -> Iterator[Journey | JourneyFailure]:
        for index in range(doc.header.journey_count):
            try:
                yield self.decode_journey(doc, index)
            except HafasDecodeError as err:
                if not self.isolate_failures:
                    raise
                self._logger.warning("Skipping journey %d: %s", index, err)
                yield JourneyFailure(index, err)

    def decode_journey(self, doc: DocumentContext, index: int) -> Journey:
        reader, details = doc.reader, doc.details

        hint = f"Journey Header {index}"
        reader.seek(FileHeader.journey_header_position(index), hint)
        journey_header = JourneyHeader.read(reader, hint)

        journey = Journey(
            start_stop_name=doc.header.origin.name,
            target_stop_name=doc.header.target.name,
            changes=journey_header.changes,
        )

        service_days = doc.service_days.resolve(
            journey_header.service_days_offset, f"Service Days for Journey {index}"
        )
        journey.journey_news = service_days.text
        day_offset = service_days.day_offset

        hint = f"Journey Details Offset for Journey {index}"
        reader.seek(details.index_position(index), hint)
        details_offset = reader.u16(hint)

        hint = f"Journey Details for Journey {index}"
        reader.seek(details.details_position(details_offset), hint)
        realtime_status = reader.u16(hint)
        if realtime_status == REALTIME_STATUS_CANCELED:
            journey.canceled = True
            journey.add_journey_news(CANCELED_NEWS)
        delay = reader.u16(hint)
        journey.delay_minutes = -1 if delay == NO_DELAY_VALUE else delay

        journey.journey_id = doc.attributes.journey_id(index)

        last_part = journey_header.part_count - 1
        for part_index in range(journey_header.part_count):
            part = self._decode_part(
                doc, journey, journey_header, index, part_index, day_offset, details_offset
            )
            journey.add_part(part)
            if part_index == 0:
                journey.departure_date_time = part.time_departure
            if part_index == last_part:
                journey.arrival_date_time = part.time_arrival

        journey.route_stops.append(doc.header.target.name)
        return journey

    # ------------------------------------------------------------------ #
    # Parts                                                              #
    # ------------------------------------------------------------------ #
    def _decode_part(
        self,
        doc: DocumentContext,
        journey: Journey,
        journey_header: JourneyHeader,
        index: int,
        part_index: int,
        day_offset: int,
        details_offset: int,
    ) -> JourneyPart:
        reader = doc.reader
        where = f"Part {part_index} of Journey {index}"

        reader.seek(FileHeader.part_position(journey_header.parts_offset, part_index), where)
        record = PartRecord.read(doc, day_offset, where)

        news = doc.comments.resolve_text(record.comments_offset, f"Comments for {where}")
        transport_line, vehicle_string = split_line_string(record.line_string)
        vehicle_type = self._resolve_vehicle(doc, journey, record, vehicle_string, where)

        hint = f"Data for {where}"
        reader.seek(doc.details.part_position(details_offset, part_index), hint)
        realtime = PartDetails.read(doc, day_offset, hint)

        platform_departure = predicted_platform(
            record.planned_departure_platform, realtime.predicted_departure_platform
        )
        platform_arrival = predicted_platform(
            record.planned_arrival_platform, realtime.predicted_arrival_platform
        )
        if part_index == 0 and _platform_changed(
            record.planned_departure_platform, platform_departure
        ):
            news = append_news(
                news,
                f"Departure platform changed from {record.planned_departure_platform}",
            )
        if part_index == journey_header.part_count - 1 and _platform_changed(
            record.planned_arrival_platform, platform_arrival
        ):
            news = append_news(
                news, f"Arrival platform changed from {record.planned_arrival_platform}"
            )

        sub_journey = self._decode_sub_journey(doc, realtime, day_offset, where)

        return JourneyPart(
            departure_stop=record.departure_station.name,
            arrival_stop=record.arrival_station.name,
            time_departure=record.planned_departure,
            time_arrival=record.planned_arrival,
            time_departure_delay=delay_minutes(
                record.planned_departure, realtime.predicted_departure
            ),
            time_arrival_delay=delay_minutes(
                record.planned_arrival, realtime.predicted_arrival
            ),
            platform_departure=platform_departure,
            platform_arrival=platform_arrival,
            transport_line=transport_line,
            vehicle_type=vehicle_type,
            news=news,
            sub_journey=sub_journey,
        )

    def _decode_sub_journey(
        self, doc: DocumentContext, realtime: PartDetails, day_offset: int, where: str
    ) -> SubJourney:
        sub_journey = SubJourney()
        if realtime.stop_count == 0:
            return sub_journey

        details = doc.details
        if details.stop_size != STOP_RECORD_SIZE:
            raise HafasFormatError(f"Unexpected stops size: {details.stop_size}")

        hint = f"Intermediate Stops for {where}"
        doc.reader.seek(details.stop_position(realtime.first_stop_index), hint)
        for _ in range(realtime.stop_count):
            sub_journey.stops.append(read_stop(doc, day_offset, hint))
        return sub_journey

    def _resolve_vehicle(
        self,
        doc: DocumentContext,
        journey: Journey,
        record: PartRecord,
        vehicle_string: str,
        where: str,
    ) -> VehicleType:
        vehicle_type = (
            VehicleType.FOOTWAY
            if record.part_type == PART_TYPE_FOOTWAY
            else VehicleType.UNKNOWN
        )

        category, line_class = "", None
        attributes = doc.attributes
        if attributes.has_chain(record.attribute_index):
            hint = f"Attributes for {where}"
            for key, value_offset in attributes.iter_chain(record.attribute_index, hint):
                if key == KEY_OPERATOR:
                    journey.add_operator(doc.strings.resolve(value_offset, hint=hint))
                elif key == KEY_CATEGORY:
                    category = doc.strings.resolve(value_offset, hint=hint)
                    if vehicle_type is VehicleType.UNKNOWN:
                        vehicle_type = self.vehicles.from_string(category, warn=False)
                elif key == KEY_CLASS:
                    line_class = _parse_class(doc.strings.resolve(value_offset, hint=hint))
                    if vehicle_type is VehicleType.UNKNOWN and line_class is not None:
                        vehicle_type = self.vehicles.from_class(line_class, warn=False)

        if vehicle_type is VehicleType.UNKNOWN:
            if match := VEHICLE_PREFIX_PATTERN.match(vehicle_string):
                vehicle_type = self.vehicles.from_string(match.group(1), warn=False)
            else:
                vehicle_type = self.vehicles.default
            if vehicle_type is VehicleType.UNKNOWN:
                self._logger.warning(
                    "Unknown vehicle type (category: %s, class: %s, string: %s)",
                    category,
                    line_class,
                    vehicle_string,
                )
        return vehicle_type


def _platform_changed(planned: str, effective: str) -> bool:
    return bool(planned) and bool(effective) and planned != effective


def decode_journeys(data: bytes | bytearray, profile: HafasProfile = DEFAULT_PROFILE) -> list[Journey]:
    """Decode *data* strictly with *profile* and return its journeys."""
    return JourneyDecoder(profile).decode(data).journeys
