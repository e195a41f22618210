from collections.abc import Mapping
from logging import getLogger
from typing import ClassVar, Final

from .helpers import SafeIntEnumMixin


class VehicleType(SafeIntEnumMixin):
    """Vehicle types, numbered like the timetable data engine does."""

    UNKNOWN = 0
    TRAM = 1
    BUS = 2
    SUBWAY = 3
    INTERURBAN_TRAIN = 4
    METRO = 5
    TROLLEY_BUS = 6
    REGIONAL_TRAIN = 10
    REGIONAL_EXPRESS_TRAIN = 11
    INTERREGIONAL_TRAIN = 12
    INTERCITY_TRAIN = 13
    HIGH_SPEED_TRAIN = 14
    FEET = 50
    FOOTWAY = 50
    FERRY = 100
    SHIP = 101
    PLANE = 200

    @property
    def is_train(self) -> bool:
        return self in _TRAINS


_TRAINS: Final[frozenset[VehicleType]] = frozenset(
    {
        VehicleType.INTERURBAN_TRAIN,
        VehicleType.REGIONAL_TRAIN,
        VehicleType.REGIONAL_EXPRESS_TRAIN,
        VehicleType.INTERREGIONAL_TRAIN,
        VehicleType.INTERCITY_TRAIN,
        VehicleType.HIGH_SPEED_TRAIN,
    }
)

# --------------------------------------------------------------------------- #
# Shared lookup tables                                                        #
# --------------------------------------------------------------------------- #
VEHICLE_STRINGS: Final[dict[str, VehicleType]] = {
    "bus": VehicleType.BUS,
    "buss": VehicleType.BUS,
    "b": VehicleType.BUS,
    "tro": VehicleType.TROLLEY_BUS,
    "tram": VehicleType.TRAM,
    "str": VehicleType.TRAM,
    "t": VehicleType.TRAM,
    "s": VehicleType.INTERURBAN_TRAIN,
    "sbahn": VehicleType.INTERURBAN_TRAIN,
    "s-bahn": VehicleType.INTERURBAN_TRAIN,
    "u": VehicleType.SUBWAY,
    "ubahn": VehicleType.SUBWAY,
    "u-bahn": VehicleType.SUBWAY,
    "met": VehicleType.METRO,
    "metro": VehicleType.METRO,
    "m": VehicleType.METRO,
    "ice": VehicleType.HIGH_SPEED_TRAIN,  # InterCityExpress
    "tgv": VehicleType.HIGH_SPEED_TRAIN,  # Train à grande vitesse
    "eic": VehicleType.HIGH_SPEED_TRAIN,  # Ekspres InterCity
    "rj": VehicleType.HIGH_SPEED_TRAIN,  # RailJet
    "ic": VehicleType.INTERCITY_TRAIN,
    "ict": VehicleType.INTERCITY_TRAIN,
    "icn": VehicleType.INTERCITY_TRAIN,  # Intercity-Neigezug
    "ec": VehicleType.INTERCITY_TRAIN,
    "en": VehicleType.INTERCITY_TRAIN,
    "d": VehicleType.INTERCITY_TRAIN,
    "cnl": VehicleType.INTERCITY_TRAIN,
    "int": VehicleType.INTERCITY_TRAIN,
    "re": VehicleType.REGIONAL_EXPRESS_TRAIN,
    "me": VehicleType.REGIONAL_EXPRESS_TRAIN,
    "alx": VehicleType.REGIONAL_EXPRESS_TRAIN,
    "rb": VehicleType.REGIONAL_TRAIN,
    "r": VehicleType.REGIONAL_TRAIN,
    "mer": VehicleType.REGIONAL_TRAIN,
    "zug": VehicleType.REGIONAL_TRAIN,
    "l": VehicleType.REGIONAL_TRAIN,  # local train
    "cr": VehicleType.REGIONAL_TRAIN,  # suburban train
    "p": VehicleType.REGIONAL_TRAIN,  # peak-hour train
    "ir": VehicleType.INTERREGIONAL_TRAIN,
    "ire": VehicleType.INTERREGIONAL_TRAIN,
    "x": VehicleType.INTERREGIONAL_TRAIN,  # InterConnex
    "ferry": VehicleType.FERRY,
    "faehre": VehicleType.FERRY,
    "feet": VehicleType.FEET,
    "byfeet": VehicleType.FEET,
    "uebergang": VehicleType.FEET,
}

VEHICLE_CLASSES: Final[dict[int, VehicleType]] = {}

_REGIONAL_OPERATORS: Final[tuple[str, ...]] = (
    "mer", "rb", "wfb", "nwb", "osb", "swe", "ktb", "wkd", "skm", "skw",
    "erx", "hex", "pe", "peg", "ne", "mrb", "erb", "hlb", "hsb", "vbg",
    "akn", "ola", "ubb", "can", "brb", "vec", "hzl", "abr", "cb", "weg",
    "neb", "eb", "ven", "bob", "sbs", "evb", "stb", "pre", "dbg", "nob",
    "rtb", "blb", "nbe", "soe", "sdg", "dab", "htb", "feg", "neg", "rbg",
    "mbb", "veb", "msb", "öba", "wb", "rnv", "dwe",
)  # fmt: skip

OPERATOR_VEHICLES: Final[dict[str, VehicleType]] = {
    **{abbr: VehicleType.HIGH_SPEED_TRAIN for abbr in ("ice", "tha", "rj")},
    **{
        abbr: VehicleType.INTERCITY_TRAIN
        for abbr in ("ic", "ec", "ire", "cnl", "en", "est")
    },
    **{
        abbr: VehicleType.REGIONAL_EXPRESS_TRAIN
        for abbr in ("re", "me", "rer", "vx", "tlx", "alx", "ebx", "ses")
    },
    **{abbr: VehicleType.REGIONAL_TRAIN for abbr in _REGIONAL_OPERATORS},
}

OPERATOR_NAMES: Final[dict[str, str]] = {
    **{
        abbr: "Deutsche Bahn AG"
        for abbr in ("ice", "ic", "ec", "ire", "re", "rb", "cnl", "en")
    },
    "tha": "Thalys International",
    "est": "Eurostar Group Ltd.",
    "rj": "Österreichische Bundesbahnen, railjet",
    "me": "metronom Eisenbahngesellschaft mbH",
    "mer": "metronom Eisenbahngesellschaft mbH, metronomRegional",
    "wfb": "WestfalenBahn GmbH",
    "nwb": "NordWestBahn GmbH",
    "osb": "Ortenau-S-Bahn GmbH",
    "swe": "Südwestdeutsche Verkehrs-AG",
    "ktb": "Südwestdeutsche Verkehrs-AG, Kandertalbahn",
    "rer": "Réseau Express Régional",
    "wkd": "Warszawska Kolej Dojazdowa",
    "skm": "Szybka Kolej Miejska Tricity",
    "skw": "Szybka Kolej Miejska Warschau",
    "erx": "Erixx GmbH",
    "hex": "Veolia Verkehr Sachsen-Anhalt GmbH, HarzElbeExpress",
    "pe": "Prignitzer Eisenbahn GmbH",
    "peg": "Prignitzer Eisenbahn GmbH",
    "ne": "NEB Betriebsgesellschaft mbH",
    "mrb": "Mitteldeutsche Regiobahn",
    "erb": "Keolis Deutschland, eurobahn",
    "hlb": "Hessische Landesbahn GmbH",
    "hsb": "Harzer Schmalspurbahnen GmbH",
    "vbg": "Vogtlandbahn GmbH",
    "vx": "Vogtlandbahn GmbH, Vogtland-Express",
    "tlx": "Vogtlandbahn GmbH, Trilex",
    "alx": "Vogtlandbahn GmbH, alex",
    "akn": "AKN Eisenbahn AG",
    "ola": "Ostseeland Verkehr GmbH",
    "ubb": "Usedomer Bäderbahn GmbH",
    "can": "cantus Verkehrsgesellschaft mbH",
    "brb": "Abellio Rail NRW GmbH",
    "sbb": "Schweizerische Bundesbahnen",
    "vec": "vectus Verkehrsgesellschaft mbH",
    "hzl": "Hohenzollerische Landesbahn AG",
    "abr": "Bayerische Regiobahn GmbH",
    "cb": "City Bahn Chemnitz GmbH",
    "weg": "Württembergische Eisenbahn-Gesellschaft mbH",
    "neb": "Niederbarnimer Eisenbahn AG",
    "eb": "Erfurter Bahn GmbH",
    "ebx": "Erfurter Bahn GmbH, express",
    "ven": "Rhenus Veniro GmbH & Co. KG",
    "bob": "Bayerische Oberlandbahn GmbH",
    "sbs": "Städtebahn Sachsen GmbH",
    "ses": "Städtebahn Sachsen GmbH, express",
    "evb": "Eisenbahnen und Verkehrsbetriebe Elbe-Weser GmbH",
    "stb": "Süd-Thüringen-Bahn GmbH",
    "pre": "Eisenbahn-Bau- und Betriebsgesellschaft Pressnitztalbahn",
    "dbg": "Döllnitzbahn GmbH",
    "nob": "Nord-Ostsee-Bahn GmbH",
    "rtb": "Rurtalbahn GmbH",
    "blb": "Berchtesgadener Land Bahn GmbH",
    "nbe": "nordbahn Eisenbahngesellschaft mbh & Co. KG",
    "soe": "Sächsisch-Oberlausitzer Eisenbahngesellschaft",
    "sdg": "Sächsische Dampfeisenbahngesellschaft mbH",
    "dab": "Westerwaldbahn GmbH, Daadetalbahn",
    "htb": "Hörseltalbahn GmbH",
    "feg": "Freiberger Eisenbahngesellschaft mbH",
    "neg": "Norddeutsche Eisenbahngesellschaft Niebüll GmbH",
    "rbg": "Regentalbahn AG",
    "mbb": "Mecklenburgische Bäderbahn Molli",
    "veb": "Vulkan-Eifel-Bahn Betriebsgesellschaft mbH",
    "msb": "Betriebsgesellschaft Mainschleifenbahn",
    "öba": "Öchsle Bahn Betriebs-GmbH",
    "wb": "WESTbahn Management GmbH",
    "rnv": "Rhein-Neckar-Verkehr GmbH",
    "dwe": "Dessauer Verkehrs- und Eisenbahngesellschaft",
}


def vehicle_from_string(text: str) -> VehicleType:
    """Look *text* up in the shared table.

    Only the first word counts, providers append single letter flags
    (e.g. "IC J", "IR m").
    """
    words = text.lower().split(" ", 1)
    return VEHICLE_STRINGS.get(words[0], VehicleType.UNKNOWN)


def vehicle_from_operator_abbreviation(abbr: str) -> VehicleType:
    return OPERATOR_VEHICLES.get(abbr.lower(), VehicleType.UNKNOWN)


def operator_from_abbreviation(abbr: str) -> str | None:
    """Return the full operator name for *abbr*, *None* when unknown."""
    return OPERATOR_NAMES.get(abbr.lower())


class VehicleResolver:
    """Resolves vehicle type strings and class IDs for one provider.

    Provider tables are consulted after the shared tables; the provider
    default vehicle type is the last resort.
    """

    _logger: ClassVar = getLogger(__name__)

    def __init__(
        self,
        default: VehicleType = VehicleType.UNKNOWN,
        extra_strings: Mapping[str, VehicleType] | None = None,
        extra_classes: Mapping[int, VehicleType] | None = None,
    ) -> None:
        self.default = default
        self.extra_strings = {k.lower(): v for k, v in (extra_strings or {}).items()}
        self.extra_classes = dict(extra_classes or {})

    def from_string(self, text: str, warn: bool = True) -> VehicleType:
        vehicle = vehicle_from_string(text)
        if vehicle is VehicleType.UNKNOWN:
            vehicle = self.extra_strings.get(text.lower(), VehicleType.UNKNOWN)
        if vehicle is VehicleType.UNKNOWN:
            vehicle = vehicle_from_operator_abbreviation(text)
        if vehicle is VehicleType.UNKNOWN:
            vehicle = self.default
            if warn and vehicle is VehicleType.UNKNOWN:
                self._logger.warning("Unknown vehicle type string: '%s'", text)
        return vehicle

    def from_class(self, class_id: int, warn: bool = True) -> VehicleType:
        vehicle = VEHICLE_CLASSES.get(class_id, VehicleType.UNKNOWN)
        if vehicle is VehicleType.UNKNOWN:
            vehicle = self.extra_classes.get(class_id, VehicleType.UNKNOWN)
        if vehicle is VehicleType.UNKNOWN:
            vehicle = self.default
            if warn and vehicle is VehicleType.UNKNOWN:
                self._logger.warning("Unknown vehicle type class: '%d'", class_id)
        return vehicle
