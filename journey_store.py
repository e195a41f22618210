"""JourneyStore and related helpers.

This module provides a thread-safe, in-memory cache that deduplicates
:class:`Journey` instances across decoded documents and exports them as
JSON.  Journeys carrying a connection ID are keyed by it; the others by
their departure time, endpoints and lines.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Iterator

from hafas.journey import Journey
from hafas.journey_decoder import DecodeResult
from hafas.serialization import journey_to_dict, to_json_bytes

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def journey_key(journey: Journey) -> str:
    """Return the deduplication key of *journey*.

    Without a connection ID the key is built from the first and last route
    stop, not from the requested origin and target.
    """
    if journey.journey_id:
        return f"J:{journey.journey_id}"
    departure = journey.departure_date_time.isoformat() if journey.departure_date_time else "--"
    stops = journey.route_stops or [journey.start_stop_name, journey.target_stop_name]
    lines = ",".join(journey.route_transport_lines)
    return f"R:{departure}|{stops[0]}|{stops[-1]}|{lines}"


def _sort_key(journey: Journey) -> tuple[bool, datetime]:
    departure = journey.departure_date_time
    return departure is None, departure or datetime.min


# ---------------------------------------------------------------------------
# JourneyStore
# ---------------------------------------------------------------------------


class JourneyStore:
    """Thread-safe, in-memory cache of decoded journeys, newest wins."""

    __slots__ = ("_data", "_lock")

    def __init__(self) -> None:
        self._data: dict[str, Journey] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def upsert(self, journey: Journey) -> None:
        """Insert *journey* or overwrite the stored one with the same key."""
        key = journey_key(journey)
        with self._lock:
            self._data[key] = journey

    def extend(self, result: DecodeResult) -> int:
        """Store every journey of *result*; return how many were given."""
        for journey in result.journeys:
            self.upsert(journey)
        return len(result.journeys)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def to_dict(self) -> dict[str, Any]:
        """Return the stored journeys ordered by departure time."""
        with self._lock:
            snapshot = list(self._data.values())
        snapshot.sort(key=_sort_key)
        return {"journeys": [journey_to_dict(journey) for journey in snapshot]}

    def to_json_bytes(self, *, opts: int | None = None) -> bytes:
        """Serialize :meth:`to_dict` result with *orjson*."""
        return to_json_bytes(self.to_dict(), opts=opts)

    # Convenience dunder methods ------------------------------------------------
    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __iter__(self) -> Iterator[Journey]:
        with self._lock:
            return iter(list(self._data.values()))
