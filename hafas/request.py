"""Request builders for HAFAS journey queries.

Only the URL and the POST body are built here. Sending the request and
handing the binary answer to :class:`~hafas.journey_decoder.JourneyDecoder`
is left to the caller.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Final
from urllib.parse import quote

from .profiles import HafasProfile

PROGRAM: Final[str] = "query"
RESULT_TYPE: Final[str] = "n"
MIN_RESULT_COUNT: Final[int] = 6
POST_DATE_FORMAT: Final[str] = "%Y.%m.%d"
POST_TIME_FORMAT: Final[str] = "%H:%M"


@dataclass(frozen=True, slots=True)
class JourneyQuery:
    """Journey search parameters.

    Attributes:
        origin_stop: Origin stop name or ID
        target_stop: Target stop name or ID
        date_time: Departure (or arrival) date and time
        arrivals: Search by arrival time instead of departure time
        max_count: Number of journeys to ask for
    """

    origin_stop: str
    target_stop: str
    date_time: datetime
    arrivals: bool = False
    max_count: int = MIN_RESULT_COUNT


def product_bit_string(product_bits: int) -> str:
    """Return a product filter with every one of *product_bits* products enabled."""
    return "1" * max(product_bits, 0)


def fix_additional_query(items: str) -> str:
    """Make sure additional query items start with ``&``."""
    if not items or items.startswith("&"):
        return items
    return f"&{items}"


def program_url(profile: HafasProfile, query: str, result_type: str = RESULT_TYPE) -> str:
    """Join *query* to the HAFAS program URL of *profile*.

    Raises:
        ValueError: If the profile has no base URL
    """
    if not profile.base_url:
        raise ValueError(f"Profile '{profile.name}' has no base URL")
    if profile.encode_url_query:
        query = quote(query, safe="")
    url = (
        f"{profile.base_url}/{profile.bin_dir}/"
        f"{PROGRAM}.{profile.program_extension}/{profile.language}{result_type}"
    )
    return f"{url}?{query}" if query else url


def journeys_url(profile: HafasProfile, query: JourneyQuery, binary: bool = True) -> str:
    """Return the URL requesting journeys for *query*.

    With *binary* the server is asked for the binary document format.
    """
    items = [
        f"S={query.origin_stop}!",
        f"Z={query.target_stop}!",
        f"date={query.date_time.strftime(profile.url_date_format)}",
        f"time={query.date_time.strftime(profile.url_time_format)}",
        f"REQ0HafasSearchForw={0 if query.arrivals else 1}",
        f"REQ0JourneyProduct_prod_list_1={product_bit_string(profile.product_bits)}",
        "start=yes",
        "sortConnections=minDeparture",
    ]
    if binary:
        items.append("h2g-direct=11")
    return program_url(
        profile, "&".join(items) + fix_additional_query(profile.additional_url_query)
    )


def journeys_post_data(profile: HafasProfile, query: JourneyQuery) -> str:
    """Return the XML body of a journey request."""
    products = product_bit_string(profile.product_bits)
    return (
        f'<?xml version="1.0" encoding="{profile.charset}"?>'
        '<ReqC ver="1.1" prod="hafas" lang="DE">'
        '<ConReq deliverPolyline="1">'
        f'<Start><Station externalId="{query.origin_stop}" />'
        f'<Prod prod="{products}" bike="0" couchette="0" direct="0" sleeper="0" />'
        "</Start>"
        f'<Dest><Station externalId="{query.target_stop}" /></Dest>'
        f'<ReqT a="{1 if query.arrivals else 0}" '
        f'date="{query.date_time.strftime(POST_DATE_FORMAT)}" '
        f'time="{query.date_time.strftime(POST_TIME_FORMAT)}" />'
        f'<RFlags b="0" f="{max(MIN_RESULT_COUNT, query.max_count)}" '
        'chExtension="0" sMode="N" />'
        "</ConReq>"
        "</ReqC>"
    )
