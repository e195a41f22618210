import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Final, Sequence

import orjson

# ---------------------------------------------------------------------------
# Shared decoder utilities (pure)
# ---------------------------------------------------------------------------
from decoder_core import (
    BYTE_ORDERS,
    PROFILE_NAMES,
    STDIN_MARKER,
    DecoderOptions,
    LogLevel,
    decode_document,
    read_document,
    setup_logging,
)

from hafas.helpers import HafasDecodeError
from hafas.journey import UNKNOWN_DELAY, Journey, SubJourney
from hafas.journey_decoder import DecodeResult, JourneyFailure
from hafas.serialization import format_time, result_to_dict, to_json_bytes

SEP: Final[str] = "-" * 80
DSEP: Final[str] = "=" * 80

# ---------------------------------------------------------------------------
# Formatting helpers (human-readable dump)
# ---------------------------------------------------------------------------


def _delay(minutes: int) -> str:
    return "" if minutes == UNKNOWN_DELAY else f" ({minutes:+d})"


def _platform(value: str) -> str:
    return f" [Pl. {value}]" if value else ""


def fmt_sub_journey(sub: SubJourney) -> list[str]:
    return [
        f"      {format_time(stop.time_arrival)} {stop.stop_name}{_platform(stop.platform_arrival)}"
        for stop in sub.stops
    ]


def fmt_journey(index: int, j: Journey) -> str:
    lines = [
        DSEP,
        f"JOURNEY {index}: {j.start_stop_name} -> {j.target_stop_name}",
        SEP,
        f"Departure     : {format_time(j.departure_date_time)}",
        f"Arrival       : {format_time(j.arrival_date_time)}",
        f"Duration      : {j.duration_minutes} min",
        f"Changes       : {j.changes}",
        f"Delay         : {'unknown' if j.delay_minutes < 0 else j.delay_minutes}",
        f"Canceled      : {'yes' if j.canceled else 'no'}",
        f"Journey ID    : {j.journey_id or '--'}",
        f"Operator      : {j.operator or '--'}",
        f"News          : {j.journey_news or '--'}",
        SEP,
    ]
    for p in range(j.part_count):
        vehicle = j.route_types_of_vehicles[p].name
        line = j.route_transport_lines[p] or vehicle
        lines += [
            f"  {format_time(j.route_times_departure[p])}"
            f"{_delay(j.route_times_departure_delay[p])} "
            f"{j.route_stops[p]}{_platform(j.route_platforms_departure[p])}",
            f"    {line} ({vehicle})",
        ]
        lines += fmt_sub_journey(j.route_sub_journeys[p])
        lines.append(
            f"  {format_time(j.route_times_arrival[p])}"
            f"{_delay(j.route_times_arrival_delay[p])} "
            f"{j.route_stops[p + 1]}{_platform(j.route_platforms_arrival[p])}"
        )
        if j.route_news[p]:
            lines.append(f"    News: {j.route_news[p]}")
    lines.append(DSEP)
    return "\n".join(lines)


def fmt_failure(f: JourneyFailure) -> str:
    return f"JOURNEY {f.index}: FAILED ({type(f.error).__name__}: {f.error})"


def fmt_result(result: DecodeResult) -> str:
    if not result.journeys and not result.failures:
        return "No journeys."
    out = [fmt_journey(i, j) for i, j in enumerate(result.journeys)]
    out += [fmt_failure(f) for f in result.failures]
    return "\n".join(out)


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CliArgs:
    input_path: str
    as_json: bool
    options: DecoderOptions
    log_level: LogLevel


def parse_args(argv: Sequence[str] | None = None) -> CliArgs:
    p = argparse.ArgumentParser("HAFAS binary journey document decoder (CLI)")
    p.add_argument(
        "input_path",
        help=f"Input binary document ({STDIN_MARKER}=stdin)",
    )
    p.add_argument("--json", action="store_true", help="Print journeys as JSON")
    p.add_argument(
        "--profile",
        default="default",
        choices=PROFILE_NAMES,
        help="Provider profile",
    )
    p.add_argument("--charset", default=None, help="Override the profile charset")
    p.add_argument(
        "--byteorder",
        default=None,
        choices=BYTE_ORDERS,
        help="Override the profile byte order",
    )
    p.add_argument(
        "--isolate-failures",
        action="store_true",
        help="Skip broken journeys instead of failing the whole document",
    )
    p.add_argument(
        "-l",
        "--log-level",
        default=LogLevel.INFO.value,
        choices=[lvl.value for lvl in LogLevel],
        help="Logging level",
    )
    ns = p.parse_args(argv)
    return CliArgs(
        ns.input_path,
        ns.json,
        DecoderOptions(ns.profile, ns.charset, ns.byteorder, ns.isolate_failures),
        LogLevel(ns.log_level),
    )


# ---------------------------------------------------------------------------
# Decoder runner
# ---------------------------------------------------------------------------


def run_decoder(args: CliArgs) -> int:
    """Decode one document and print it to stdout."""
    setup_logging(args.log_level)

    try:
        result = decode_document(read_document(args.input_path), args.options)
    except (KeyboardInterrupt, EOFError):
        return 0
    except OSError as exc:
        logging.error("Cannot read %s: %s", args.input_path, exc)
        return 1
    except HafasDecodeError as exc:
        logging.error("Decoding failed: %s", exc)
        return 1

    if args.as_json:
        print(to_json_bytes(result_to_dict(result), opts=orjson.OPT_INDENT_2).decode())
    else:
        print(fmt_result(result))
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:  # pragma: no cover
    sys.exit(run_decoder(parse_args(argv)))


if __name__ == "__main__":
    main()
