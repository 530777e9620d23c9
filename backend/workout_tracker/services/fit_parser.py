"""Parse FIT files and extract session summary and optional time series for workout ingestion."""

import io
import logging
from datetime import datetime, timezone
from typing import Any

from fitparse import FitFile, FitParseError

logger = logging.getLogger(__name__)

# Max series points to store (e.g. ~1 point per 2–5 sec for long activities)
MAX_SERIES_POINTS = 3600
# Target interval in seconds between sampled points when downsampling
SERIES_INTERVAL_SEC = 2


def _get_value(msg: Any, name: str):
    """Get raw value from fitparse message field, or None."""
    try:
        field = msg.get(name)
    except (KeyError, AttributeError):
        return None
    if field is None:
        return None
    return field.value


def _as_utc(value: Any) -> datetime | None:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _extract_series(fitfile: FitFile, start_time: datetime | None) -> list[dict] | None:
    """
    Extract record messages into a time series: elapsed_sec, speed, heart_rate, altitude.
    Downsample to at most MAX_SERIES_POINTS points, ~1 point per SERIES_INTERVAL_SEC.
    """
    records = list(fitfile.get_messages("record"))
    if not records:
        return None
    if start_time is None:
        start_time = _as_utc(_get_value(records[0], "timestamp"))
    if start_time is None:
        return None
    series: list[dict] = []
    last_elapsed = -SERIES_INTERVAL_SEC - 1
    for msg in records:
        ts = _as_utc(_get_value(msg, "timestamp"))
        if ts is None:
            continue
        elapsed = int((ts - start_time).total_seconds())
        if elapsed < 0:
            continue
        # Downsample
        if elapsed - last_elapsed < SERIES_INTERVAL_SEC and len(series) > 0:
            continue
        if len(series) >= MAX_SERIES_POINTS:
            break
        speed = _get_value(msg, "enhanced_speed") or _get_value(msg, "speed")
        hr = _get_value(msg, "heart_rate")
        altitude = _get_value(msg, "enhanced_altitude") or _get_value(msg, "altitude")
        series.append(
            {
                "elapsed_sec": elapsed,
                "speed": round(float(speed), 2) if speed is not None else None,
                "heart_rate": int(hr) if hr is not None else None,
                "altitude": round(float(altitude), 1) if altitude is not None else None,
            }
        )
        last_elapsed = elapsed
    return series if series else None


def _creator(fitfile: FitFile) -> str | None:
    for msg in fitfile.get_messages("file_id"):
        manufacturer = _get_value(msg, "manufacturer")
        product = _get_value(msg, "garmin_product") or _get_value(msg, "product")
        if manufacturer is None:
            return None
        if product is not None:
            return f"{manufacturer} {product}"
        return str(manufacturer)
    return None


def parse_fit_session(file_content: bytes) -> dict | None:
    """
    Parse FIT file and return a single session summary suitable for a Workout.
    Returns dict with: start_date (datetime), duration_sec, distance_m, max_speed,
    sport, creator, extra (dict), or None when the file cannot be parsed.
    """
    try:
        fitfile = FitFile(io.BytesIO(file_content))
        fitfile.parse()
    except (FitParseError, ValueError, EOFError) as e:
        logger.warning("FIT parse failed: %s", e)
        return None

    start_time = None
    duration_sec = None
    distance_m = None
    max_speed = None
    avg_hr = None
    max_hr = None
    total_ascent = None
    total_calories = None
    sport = None

    for msg in fitfile.get_messages("session"):
        start_time = _get_value(msg, "start_time") or _get_value(msg, "timestamp")
        total_elapsed = _get_value(msg, "total_elapsed_time")
        total_timer = _get_value(msg, "total_timer_time")
        if total_elapsed is not None:
            duration_sec = int(total_elapsed)
        elif total_timer is not None:
            duration_sec = int(total_timer)
        dist = _get_value(msg, "total_distance")
        if dist is not None:
            distance_m = float(dist)
        speed = _get_value(msg, "enhanced_max_speed") or _get_value(msg, "max_speed")
        if speed is not None:
            max_speed = float(speed)
        avg_hr = _get_value(msg, "avg_heart_rate")
        max_hr = _get_value(msg, "max_heart_rate")
        total_ascent = _get_value(msg, "total_ascent")
        total_calories = _get_value(msg, "total_calories")
        sport = _get_value(msg, "sport")
        break

    if start_time is None:
        for msg in fitfile.get_messages("activity"):
            start_time = _get_value(msg, "local_timestamp") or _get_value(msg, "timestamp")
            if start_time is not None:
                break
    if start_time is None:
        for msg in fitfile.get_messages("record"):
            start_time = _get_value(msg, "timestamp")
            if start_time is not None:
                break
    start_time = _as_utc(start_time)
    if start_time is None:
        logger.warning("FIT: no start_time found")
        return None

    extra = {
        "avg_heart_rate": avg_hr,
        "max_heart_rate": max_hr,
        "total_ascent": total_ascent,
        "total_calories": total_calories,
        "sport": str(sport) if sport is not None else None,
    }
    series = _extract_series(fitfile, start_time)
    if series:
        extra["series"] = series

    return {
        "start_date": start_time,
        "duration_sec": duration_sec or 0,
        "distance_m": distance_m or 0.0,
        "max_speed": max_speed,
        "sport": str(sport) if sport is not None else None,
        "creator": _creator(fitfile),
        "extra": extra,
    }
