"""Formatting helpers exposed to the templates.

All helpers take canonical values (meters, seconds, m/s) and return display strings.
They never raise: malformed input formats to a safe default so a bad value cannot
break a page render.
"""

import math
import zoneinfo
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from markupsafe import Markup

from workout_tracker.services.units import (
    DISTANCE_UNITS,
    SECONDS_PER_HOUR,
    SPEED_UNITS,
    TEMPO_UNITS,
    UnitSystem,
    concrete,
    distance_unit_length,
)

# Below this speed (m/s) a pace is meaningless (over 27 hours per km)
MIN_TEMPO_SPEED = 0.01

REGIONAL_INDICATOR_A = 0x1F1E6

LOCAL_DATE_FORMAT = "%Y-%m-%d %H:%M"

ICONS: dict[str, str] = {
    "running": "icon-person-running",
    "cycling": "icon-person-biking",
    "walking": "icon-person-walking",
    "hiking": "icon-person-hiking",
    "swimming": "icon-person-swimming",
    "skiing": "icon-person-skiing",
    "kayaking": "icon-sailboat",
    "golfing": "icon-golf-ball-tee",
    "push-ups": "icon-child-reaching",
    "weight-lifting": "icon-dumbbell",
    "distance": "icon-road",
    "duration": "icon-stopwatch",
    "speed": "icon-tachometer-alt",
    "tempo": "icon-gauge",
    "repetitions": "icon-repeat",
    "weight": "icon-weight-hanging",
    "date": "icon-calendar",
    "equipment": "icon-screwdriver-wrench",
    "creator": "icon-microchip",
}
DEFAULT_ICON = "icon-question"


@dataclass(frozen=True)
class DecoratedAttribute:
    icon: str
    name: str
    value: Any


def build_decorated_attribute(icon: str, name: str, value: Any) -> DecoratedAttribute:
    return DecoratedAttribute(icon=icon, name=name, value=value)


def _as_float(value: Any) -> float | None:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def to_kilometer(meters: Any) -> float:
    m = _as_float(meters)
    return 0.0 if m is None else m / 1000.0


def human_distance(meters: Any, units: UnitSystem = UnitSystem.METRIC) -> str:
    """Distance with two decimals: 1234 m is "1.23 km" (metric) or "0.77 mi" (imperial)."""
    u = concrete(units)
    m = _as_float(meters) or 0.0
    return f"{m / distance_unit_length(u):.2f} {DISTANCE_UNITS[u]}"


def human_speed(mps: Any, units: UnitSystem = UnitSystem.METRIC) -> str:
    """Speed per hour with two decimals: 2.78 m/s is "10.01 km/h"."""
    u = concrete(units)
    speed = _as_float(mps) or 0.0
    per_hour = speed * SECONDS_PER_HOUR / distance_unit_length(u)
    return f"{per_hour:.2f} {SPEED_UNITS[u]}"


def human_tempo(mps: Any, units: UnitSystem = UnitSystem.METRIC) -> str:
    """Pace as minutes:seconds per distance unit: 4.99 m/s is "3:20 min/km".

    Seconds are truncated. A (near) standstill has no pace and yields "-:--".
    """
    u = concrete(units)
    speed = _as_float(mps)
    if speed is None or speed < MIN_TEMPO_SPEED:
        return f"-:-- {TEMPO_UNITS[u]}"
    total = int(distance_unit_length(u) / speed)
    minutes, seconds = divmod(total, 60)
    return f"{minutes}:{seconds:02d} {TEMPO_UNITS[u]}"


def _as_seconds(duration: Any) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return _as_float(duration) or 0.0


def numeric_duration(duration: Any) -> float:
    """Total seconds as a plain number, for data attributes and scripts."""
    return _as_seconds(duration)


def human_duration(duration: Any) -> str:
    """Whole-second duration in the compact "1h30m5s" notation."""
    total = int(round(_as_seconds(duration)))
    sign = "-" if total < 0 else ""
    hours, rest = divmod(abs(total), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def country_code_to_flag(code: Any) -> str:
    """Two-letter ISO country code to its flag emoji; anything else gives ""."""
    if not isinstance(code, str):
        return ""
    code = code.strip().upper()
    if len(code) != 2 or not all("A" <= c <= "Z" for c in code):
        return ""
    return "".join(chr(REGIONAL_INDICATOR_A + ord(c) - ord("A")) for c in code)


def bool_to_html(value: bool) -> Markup:
    if value:
        return Markup('<i class="text-green-500 fas fa-check"></i>')
    return Markup('<i class="text-rose-500 fas fa-times"></i>')


def bool_to_checkbox(value: bool) -> Markup:
    if value:
        return Markup("checked")
    return Markup("")


def icon_for(key: Any) -> str:
    return ICONS.get(str(getattr(key, "value", key) or ""), DEFAULT_ICON)


def local_unit(units: UnitSystem, kind: str) -> str:
    """Display label of a unit kind ("distance", "speed" or "tempo")."""
    u = concrete(units)
    table = {"distance": DISTANCE_UNITS, "speed": SPEED_UNITS, "tempo": TEMPO_UNITS}.get(kind)
    if table is None:
        return ""
    return table[u]


@lru_cache(maxsize=1)
def timezones() -> list[str]:
    return sorted(zoneinfo.available_timezones())


def _zone(tz: str | None) -> zoneinfo.ZoneInfo | timezone:
    if not tz:
        return timezone.utc
    try:
        return zoneinfo.ZoneInfo(tz)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def local_time(dt: datetime | None, tz: str | None = None) -> datetime | None:
    """Convert a stored timestamp to the given zone; naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(_zone(tz))


def local_date(dt: datetime | None, tz: str | None = None) -> str:
    local = local_time(dt, tz)
    if local is None:
        return ""
    return local.strftime(LOCAL_DATE_FORMAT)


# Supported languages: code -> (English name, native name, flag country)
LANGUAGES: dict[str, tuple[str, str, str]] = {
    "en": ("English", "English", "GB"),
    "nl": ("Dutch", "Nederlands", "NL"),
    "de": ("German", "Deutsch", "DE"),
}


@dataclass(frozen=True)
class LanguageInformation:
    code: str
    english_name: str
    local_name: str
    flag: str


def to_language_information(code: str) -> LanguageInformation:
    english, native, country = LANGUAGES.get(code, (code, code, ""))
    return LanguageInformation(
        code=code,
        english_name=english,
        local_name=native,
        flag=country_code_to_flag(country),
    )
