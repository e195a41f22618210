"""JSON views of decoded journeys.

The dictionaries returned here keep :class:`datetime` values as they are;
:func:`to_json_bytes` hands them to *orjson*, which writes ISO 8601 strings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import orjson

from .journey import Journey, SubJourney, SubJourneyStop
from .journey_decoder import DecodeResult, JourneyFailure
from .vehicles import VehicleType

JsonDict = dict[str, Any]


def _vehicle_name(vehicle: VehicleType) -> str:
    return vehicle.name.lower()


def _stop_to_dict(stop: SubJourneyStop) -> JsonDict:
    return {
        "stop_name": stop.stop_name,
        "news": stop.news,
        "platform_departure": stop.platform_departure,
        "platform_arrival": stop.platform_arrival,
        "time_departure": stop.time_departure,
        "time_arrival": stop.time_arrival,
        "time_departure_delay": stop.time_departure_delay,
        "time_arrival_delay": stop.time_arrival_delay,
    }


def _sub_journey_to_list(sub_journey: SubJourney) -> list[JsonDict]:
    return [_stop_to_dict(stop) for stop in sub_journey.stops]


def journey_to_dict(journey: Journey) -> JsonDict:
    """Return a JSON-ready dictionary of *journey*."""
    return {
        "start_stop_name": journey.start_stop_name,
        "target_stop_name": journey.target_stop_name,
        "departure_date_time": journey.departure_date_time,
        "arrival_date_time": journey.arrival_date_time,
        "duration_minutes": journey.duration_minutes,
        "changes": journey.changes,
        "delay_minutes": journey.delay_minutes,
        "journey_news": journey.journey_news,
        "journey_id": journey.journey_id,
        "operator": journey.operator,
        "canceled": journey.canceled,
        "types_of_vehicle_in_journey": [
            _vehicle_name(vehicle) for vehicle in journey.types_of_vehicle_in_journey
        ],
        "route_stops": journey.route_stops,
        "route_news": journey.route_news,
        "route_platforms_departure": journey.route_platforms_departure,
        "route_platforms_arrival": journey.route_platforms_arrival,
        "route_types_of_vehicles": [
            _vehicle_name(vehicle) for vehicle in journey.route_types_of_vehicles
        ],
        "route_transport_lines": journey.route_transport_lines,
        "route_times_departure": journey.route_times_departure,
        "route_times_arrival": journey.route_times_arrival,
        "route_times_departure_delay": journey.route_times_departure_delay,
        "route_times_arrival_delay": journey.route_times_arrival_delay,
        "route_sub_journeys": [
            _sub_journey_to_list(sub_journey) for sub_journey in journey.route_sub_journeys
        ],
    }


def failure_to_dict(failure: JourneyFailure) -> JsonDict:
    return {
        "index": failure.index,
        "error": type(failure.error).__name__,
        "message": str(failure.error),
    }


def result_to_dict(result: DecodeResult) -> JsonDict:
    """Return the ``{"journeys": [...], "failures": [...]}`` view of *result*."""
    return {
        "journeys": [journey_to_dict(journey) for journey in result.journeys],
        "failures": [failure_to_dict(failure) for failure in result.failures],
    }


def to_json_bytes(payload: Any, *, opts: int | None = None) -> bytes:
    """Serialize *payload* with *orjson*.

    By default only ``OPT_NON_STR_KEYS`` is enabled, naive times are written
    without an offset. Pass *opts* to override.
    """
    if opts is None:
        opts = orjson.OPT_NON_STR_KEYS
    return orjson.dumps(payload, option=opts)


def format_time(value: datetime | None) -> str:
    """Return *value* as ``"YYYY-MM-DD HH:MM"`` or ``"--"`` when missing."""
    return "--" if value is None else value.strftime("%Y-%m-%d %H:%M")
