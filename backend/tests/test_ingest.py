"""Tests for turning uploaded file bytes into workouts."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from workout_tracker.models.user import User
from workout_tracker.models.workout import Workout
from workout_tracker.services import ingest
from workout_tracker.services.ingest import WorkoutIngestError, apply_parsed_data, parse_workout_file, workout_name
from workout_tracker.services.workout_types import WorkoutType, type_from_sport

PARSED = {
    "start_date": datetime(2026, 2, 14, 17, 5, tzinfo=timezone.utc),
    "duration_sec": 2700,
    "distance_m": 21097.5,
    "max_speed": 5.5,
    "sport": "running",
    "creator": None,
    "extra": {},
}


def test_unsupported_extension():
    with pytest.raises(WorkoutIngestError, match="unsupported file type"):
        parse_workout_file("run.gpx", b"<gpx/>")


def test_empty_file():
    with pytest.raises(WorkoutIngestError, match="empty file"):
        parse_workout_file("run.fit", b"")


def test_unparseable_file(monkeypatch):
    monkeypatch.setattr(ingest, "parse_fit_session", lambda content: None)
    with pytest.raises(WorkoutIngestError, match="could not parse"):
        parse_workout_file("RUN.FIT", b"\x00\x01")


def test_parsed_file(monkeypatch):
    monkeypatch.setattr(ingest, "parse_fit_session", lambda content: PARSED)
    assert parse_workout_file("run.fit", b"\x0e\x10") is PARSED


def test_workout_name():
    assert workout_name(WorkoutType.WEIGHT_LIFTING, PARSED) == "Weight lifting 2026-02-14 17:05"


def test_apply_parsed_data_defaults_creator():
    w = Workout()
    apply_parsed_data(w, PARSED)
    assert w.date == PARSED["start_date"]
    assert w.data.creator == "fit"
    assert w.data.total_distance == 21097.5
    assert w.data.total_duration == 2700


def test_type_from_sport():
    assert type_from_sport("cycling") == WorkoutType.CYCLING
    assert type_from_sport("alpine_skiing") == WorkoutType.SKIING
    assert type_from_sport("generic") is None
    assert type_from_sport(None) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "filename,content,message",
    [("run.gpx", b"<gpx/>", "unsupported file type"), ("run.fit", b"", "empty file")],
)
async def test_file_checks_run_before_duplicate_lookup(filename, content, message):
    session = AsyncMock()
    with pytest.raises(WorkoutIngestError, match=message):
        await ingest.create_workout_from_file(session, User(id=1, name="runner"), None, None, filename, content)
    session.execute.assert_not_awaited()
