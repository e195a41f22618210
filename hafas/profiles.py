"""Provider profiles for HAFAS journey services.

A profile bundles what differs between providers running the same HAFAS
server software: where the server lives, how its URLs are formatted, which
charset and byte order its binary documents use and how its vehicle
categories map to :class:`VehicleType`.
"""

from dataclasses import dataclass, field
from typing import Final, Mapping

from .helpers import ByteOrder
from .vehicles import VehicleResolver, VehicleType

RESROBOT_VEHICLE_STRINGS: Final[dict[str, VehicleType]] = {
    **{
        abbr: VehicleType.REGIONAL_TRAIN
        for abbr in (
            "regional", "skw", "skm", "ar", "n", "kw",
            "ks", "km", "e", "db", "jft",
        )
    },
    "tunnelbana": VehicleType.SUBWAY,
}  # fmt: skip

RESROBOT_VEHICLE_CLASSES: Final[dict[int, VehicleType]] = {
    1: VehicleType.INTERCITY_TRAIN,
    2: VehicleType.INTERCITY_TRAIN,
    4: VehicleType.REGIONAL_TRAIN,
    16: VehicleType.REGIONAL_TRAIN,
    1024: VehicleType.REGIONAL_TRAIN,
    8: VehicleType.BUS,
    128: VehicleType.BUS,
    32: VehicleType.SUBWAY,
    64: VehicleType.TRAM,
    256: VehicleType.FERRY,
}


@dataclass(frozen=True, slots=True)
class HafasProfile:
    name: str
    base_url: str = ""
    product_bits: int = 14
    language: str = "d"
    bin_dir: str = "bin"
    program_extension: str = "exe"
    url_date_format: str = "%d.%m.%y"
    url_time_format: str = "%H:%M"
    encode_url_query: bool = False
    additional_url_query: str = ""
    charset: str = "iso-8859-1"
    byteorder: ByteOrder = "little"
    default_vehicle_type: VehicleType = VehicleType.UNKNOWN
    extra_vehicle_strings: Mapping[str, VehicleType] = field(default_factory=dict)
    extra_vehicle_classes: Mapping[int, VehicleType] = field(default_factory=dict)

    def vehicle_resolver(self) -> VehicleResolver:
        return VehicleResolver(
            self.default_vehicle_type,
            self.extra_vehicle_strings,
            self.extra_vehicle_classes,
        )


DEFAULT_PROFILE: Final[HafasProfile] = HafasProfile(name="default")

PROFILES: Final[dict[str, HafasProfile]] = {
    "default": DEFAULT_PROFILE,
    "db": HafasProfile(
        name="db",
        base_url="http://reiseauskunft.bahn.de",
        language="d",
    ),
    "oebb": HafasProfile(
        name="oebb",
        base_url="http://fahrplan.oebb.at",
        language="d",
        product_bits=16,
    ),
    "bvg": HafasProfile(
        name="bvg",
        base_url="http://www.fahrinfo-berlin.de/Fahrinfo",
        product_bits=8,
        program_extension="bin",
    ),
    "resrobot": HafasProfile(
        name="resrobot",
        base_url="http://reseplanerare.resrobot.se",
        language="s",
        url_date_format="%Y-%m-%d",
        extra_vehicle_strings=RESROBOT_VEHICLE_STRINGS,
        extra_vehicle_classes=RESROBOT_VEHICLE_CLASSES,
    ),
}


def get_profile(name: str) -> HafasProfile:
    """Return the built-in profile *name*.

    Raises:
        KeyError: If no profile with that name exists
    """
    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(
            f"Unknown profile '{name}', choose one of: {', '.join(sorted(PROFILES))}"
        ) from None
