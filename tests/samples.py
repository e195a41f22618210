"""Sample journeys shared by the tests."""

from document_builder import (
    DocumentSpec,
    JourneySpec,
    PartSpec,
    StationSpec,
    StopSpec,
)

BERLIN, HANNOVER, KROEPCKE, WOLFSBURG, SPANDAU = range(5)


def sample_journeys() -> list[JourneySpec]:
    train_then_walk = JourneySpec(
        changes=1,
        service_text="daily",
        service_bitmask=b"\x40",
        delay=5,
        attributes=[("ConnectionId", "C-1")],
        parts=[
            PartSpec(
                departure_station=BERLIN,
                arrival_station=HANNOVER,
                departure=830,
                arrival=1015,
                line="ICE  571#ICE",
                departure_platform="7",
                arrival_platform="4",
                predicted_departure=835,
                predicted_arrival=1020,
                predicted_departure_platform="8",
                comments=["Bordrestaurant", "WLAN"],
                attributes=[("Operator", "DB Fernverkehr AG"), ("Category", "ICE")],
                stops=[
                    StopSpec(
                        station=WOLFSBURG,
                        planned_arrival=930,
                        planned_departure=932,
                        planned_departure_platform="2",
                        predicted_arrival=936,
                    )
                ],
            ),
            PartSpec(
                departure_station=HANNOVER,
                arrival_station=KROEPCKE,
                departure=1025,
                arrival=1035,
                part_type=1,
            ),
        ],
    )
    bus = JourneySpec(
        service_text="Mo-Fr",
        service_bit_base=1,
        service_bitmask=b"\x00\x10",
        parts=[
            PartSpec(
                departure_station=SPANDAU,
                arrival_station=KROEPCKE,
                departure=2330,
                arrival=2355,
                line="Bus  M45#Bus",
                arrival_platform="A",
            )
        ],
    )
    return [train_then_walk, bus]


def sample_stations() -> list[StationSpec]:
    return [
        StationSpec("Berlin Hbf", 8011160, 13.369549, 52.525589),
        StationSpec("Hannover Hbf", 8000152, 9.741017, 52.376764),
        StationSpec("Hannover Kröpcke", 8004160, 9.738436, 52.374523),
        StationSpec("Wolfsburg Hbf", 8006552, 10.788197, 52.429548),
        StationSpec("Berlin-Spandau", 8010404, 13.196898, 52.534794),
    ]


def sample_spec(**overrides) -> DocumentSpec:
    values = dict(
        journeys=sample_journeys(),
        stations=sample_stations(),
        origin="Berlin Hbf",
        target="Hannover Kröpcke",
    )
    values.update(overrides)
    return DocumentSpec(**values)
