from dataclasses import dataclass, field
from datetime import datetime
from typing import Final

from .vehicles import VehicleType

UNKNOWN_DELAY: Final[int] = -1
NEWS_SEPARATOR: Final[str] = ", "


def delay_minutes(planned: datetime | None, predicted: datetime | None) -> int:
    """Return ``predicted - planned`` in minutes, ``-1`` if either is missing.

    A prediction exactly one minute early also gives ``-1`` and cannot be
    told apart from a missing one.
    """
    if predicted is None or planned is None:
        return UNKNOWN_DELAY
    return int((predicted - planned).total_seconds() // 60)


def predicted_platform(planned: str, predicted: str) -> str:
    return predicted or planned


def append_news(news: str, text: str, separator: str = NEWS_SEPARATOR) -> str:
    if not text:
        return news
    return f"{news}{separator}{text}" if news else text


@dataclass(slots=True)
class SubJourneyStop:
    """Intermediate stop of one journey part."""

    stop_name: str
    news: str
    platform_departure: str
    platform_arrival: str
    time_departure: datetime | None
    time_arrival: datetime | None
    time_departure_delay: int
    time_arrival_delay: int


@dataclass(slots=True)
class SubJourney:
    """Intermediate stops between the two endpoints of a journey part."""

    stops: list[SubJourneyStop] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.stops)

    @property
    def route_stops(self) -> list[str]:
        return [stop.stop_name for stop in self.stops]


@dataclass(slots=True)
class JourneyPart:
    """One leg of a journey, on a single vehicle or on foot.

    Times are planned values; the delays are derived from the realtime
    details. Platforms are the predicted ones, falling back to planned.
    """

    departure_stop: str
    arrival_stop: str
    time_departure: datetime | None
    time_arrival: datetime | None
    time_departure_delay: int
    time_arrival_delay: int
    platform_departure: str
    platform_arrival: str
    transport_line: str
    vehicle_type: VehicleType
    news: str
    sub_journey: SubJourney


@dataclass(slots=True)
class Journey:
    """A complete departure-to-arrival itinerary decoded from one document.

    The ``route_*`` lists hold one entry per journey part, except
    :attr:`route_stops` which also ends with the target stop.
    """

    start_stop_name: str
    target_stop_name: str
    departure_date_time: datetime | None = None
    arrival_date_time: datetime | None = None
    changes: int = 0
    delay_minutes: int = UNKNOWN_DELAY
    journey_news: str = ""
    journey_id: str | None = None
    operator: str | None = None
    canceled: bool = False
    types_of_vehicle_in_journey: list[VehicleType] = field(default_factory=list)
    route_stops: list[str] = field(default_factory=list)
    route_news: list[str] = field(default_factory=list)
    route_platforms_departure: list[str] = field(default_factory=list)
    route_platforms_arrival: list[str] = field(default_factory=list)
    route_types_of_vehicles: list[VehicleType] = field(default_factory=list)
    route_transport_lines: list[str] = field(default_factory=list)
    route_times_departure: list[datetime | None] = field(default_factory=list)
    route_times_arrival: list[datetime | None] = field(default_factory=list)
    route_times_departure_delay: list[int] = field(default_factory=list)
    route_times_arrival_delay: list[int] = field(default_factory=list)
    route_sub_journeys: list[SubJourney] = field(default_factory=list)

    def add_part(self, part: JourneyPart) -> None:
        self.route_stops.append(part.departure_stop)
        self.route_news.append(part.news)
        self.route_platforms_departure.append(part.platform_departure)
        self.route_platforms_arrival.append(part.platform_arrival)
        self.route_types_of_vehicles.append(part.vehicle_type)
        self.types_of_vehicle_in_journey.append(part.vehicle_type)
        self.route_transport_lines.append(part.transport_line)
        self.route_times_departure.append(part.time_departure)
        self.route_times_arrival.append(part.time_arrival)
        self.route_times_departure_delay.append(part.time_departure_delay)
        self.route_times_arrival_delay.append(part.time_arrival_delay)
        self.route_sub_journeys.append(part.sub_journey)

    def add_operator(self, operator: str) -> None:
        self.operator = append_news(self.operator or "", operator) or None

    def add_journey_news(self, text: str) -> None:
        self.journey_news = append_news(self.journey_news, text)

    @property
    def part_count(self) -> int:
        return len(self.route_types_of_vehicles)

    @property
    def duration_minutes(self) -> int | None:
        if self.departure_date_time is None or self.arrival_date_time is None:
            return None
        return int((self.arrival_date_time - self.departure_date_time).total_seconds() // 60)
