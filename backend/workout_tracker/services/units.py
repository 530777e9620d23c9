"""Unit systems and conversions from canonical storage units (meters, seconds, m/s)."""

import enum

METERS_PER_KILOMETER = 1000.0
METERS_PER_MILE = 1609.344
SECONDS_PER_HOUR = 3600.0

# Regions whose browsers default to imperial units; everything else is metric
IMPERIAL_REGIONS = frozenset({"US", "LR", "MM"})


class UnitSystem(str, enum.Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"
    BROWSER = "browser"  # inherit from the browser language

    @classmethod
    def parse(cls, value: str | None) -> "UnitSystem":
        """Parse a stored preference; unknown values inherit from the browser."""
        try:
            return cls(value)
        except ValueError:
            return cls.BROWSER


# Display labels per unit system
DISTANCE_UNITS = {UnitSystem.METRIC: "km", UnitSystem.IMPERIAL: "mi"}
SPEED_UNITS = {UnitSystem.METRIC: "km/h", UnitSystem.IMPERIAL: "mph"}
TEMPO_UNITS = {UnitSystem.METRIC: "min/km", UnitSystem.IMPERIAL: "min/mi"}


def supported_units() -> list[UnitSystem]:
    return [UnitSystem.METRIC, UnitSystem.IMPERIAL, UnitSystem.BROWSER]


def concrete(units: UnitSystem) -> UnitSystem:
    """Unit system usable for formatting: anything but imperial formats as metric."""
    return UnitSystem.IMPERIAL if units == UnitSystem.IMPERIAL else UnitSystem.METRIC


def distance_unit_length(units: UnitSystem) -> float:
    """Length in meters of one display distance unit."""
    return METERS_PER_MILE if concrete(units) == UnitSystem.IMPERIAL else METERS_PER_KILOMETER


def _first_language_tag(accept_language: str | None) -> str:
    if not accept_language:
        return ""
    return accept_language.split(",", 1)[0].split(";", 1)[0].strip()


def units_from_browser_language(accept_language: str | None) -> UnitSystem:
    """Derive the unit system from the region of the first Accept-Language tag.

    "en-US,en;q=0.9" is imperial, "en-GB" or a bare "en" is metric.
    """
    tag = _first_language_tag(accept_language)
    parts = tag.replace("_", "-").split("-")
    for part in parts[1:]:
        if len(part) == 2 and part.upper() in IMPERIAL_REGIONS:
            return UnitSystem.IMPERIAL
    return UnitSystem.METRIC


def resolve_units(preference: UnitSystem | None, accept_language: str | None) -> UnitSystem:
    """Stored preference, or the browser-derived system when inheriting."""
    if preference is None or preference == UnitSystem.BROWSER:
        return units_from_browser_language(accept_language)
    return preference
