"""Tests for the statistics page and its per-type/per-month totals."""

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from workout_tracker.db.session import async_session_maker
from workout_tracker.models import Workout, WorkoutData
from workout_tracker.services.statistics import aggregate
from workout_tracker.services.workout_types import WorkoutType


def test_aggregate_by_type_and_month():
    stats = aggregate(
        [
            ("running", datetime(2026, 3, 2, 7, 0, tzinfo=timezone.utc), 5000.0, 1500, 0),
            ("running", datetime(2026, 4, 5, 7, 0, tzinfo=timezone.utc), 10000.0, 3000, 0),
            ("push-ups", datetime(2026, 4, 6, 7, 0, tzinfo=timezone.utc), 0.0, 300, 50),
        ]
    )
    running = stats.by_type[WorkoutType.RUNNING]
    assert (running.workouts, running.distance, running.duration) == (2, 15000.0, 4500)
    assert stats.by_type[WorkoutType.PUSH_UPS].repetitions == 50
    assert list(stats.by_month) == ["2026-04", "2026-03"]
    assert list(stats.by_month["2026-04"]) == [WorkoutType.RUNNING, WorkoutType.PUSH_UPS]
    assert stats.by_month["2026-03"][WorkoutType.RUNNING].distance == 5000.0


def test_aggregate_months_follow_timezone():
    late = datetime(2026, 3, 31, 23, 30, tzinfo=timezone.utc)
    assert list(aggregate([("cycling", late, 1.0, 1, 0)]).by_month) == ["2026-03"]
    assert list(aggregate([("cycling", late, 1.0, 1, 0)], "Europe/Amsterdam").by_month) == ["2026-04"]


def test_aggregate_skips_unknown_types_and_counts_undated():
    stats = aggregate([("juggling", None, 1.0, 1, 0), ("walking", None, None, None, None)])
    assert list(stats.by_type) == [WorkoutType.WALKING]
    assert stats.by_type[WorkoutType.WALKING].workouts == 1
    assert stats.by_month == {}
    assert not stats.empty
    assert aggregate([]).empty


async def _add(user_id: int, workout_type: str, date: datetime, distance: float, duration: int) -> None:
    async with async_session_maker() as session:
        w = Workout(user_id=user_id, name=f"{workout_type} {date:%Y-%m-%d}", type=workout_type, date=date)
        w.data = WorkoutData(total_distance=distance, total_duration=duration)
        session.add(w)
        await session.commit()


@pytest.mark.asyncio
async def test_statistics_page(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    await _add(user_id, "running", datetime(2026, 3, 2, 7, 0, tzinfo=timezone.utc), 5000.0, 1500)
    await _add(user_id, "running", datetime(2026, 4, 5, 7, 0, tzinfo=timezone.utc), 10000.0, 3000)

    resp = await auth_client.get("/statistics")
    assert resp.status_code == 200
    assert "15.00 km" in resp.text
    assert "2026-04" in resp.text
    assert "2026-03" in resp.text
    assert resp.text.index("2026-04") < resp.text.index("2026-03")


@pytest.mark.asyncio
async def test_statistics_page_empty(auth_client: AsyncClient, test_user):
    resp = await auth_client.get("/statistics")
    assert resp.status_code == 200
    assert "No workouts yet" in resp.text


@pytest.mark.asyncio
async def test_statistics_requires_sign_in(client: AsyncClient, clean_db):
    resp = await client.get("/statistics")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/user/signout"
