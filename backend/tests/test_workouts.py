"""Tests for the workout pages: manual add/edit, file upload, show, delete, refresh."""

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from workout_tracker.db.session import async_session_maker
from workout_tracker.models import AuditLog, Workout, WorkoutData
from workout_tracker.services import ingest


async def _workouts(user_id: int) -> list[Workout]:
    async with async_session_maker() as session:
        r = await session.execute(select(Workout).where(Workout.user_id == user_id).order_by(Workout.id))
        return list(r.scalars().all())


async def _add_workout(user_id: int, **kwargs) -> int:
    async with async_session_maker() as session:
        w = Workout(
            user_id=user_id,
            name=kwargs.pop("name", "A"),
            notes=kwargs.pop("notes", "B"),
            type="running",
            date=datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc),
            **kwargs,
        )
        w.data = WorkoutData(creator="web-interface", total_distance=5000.0, total_duration=1500)
        session.add(w)
        await session.commit()
        return w.id


def _fake_fit(content: bytes) -> dict | None:
    """Stand-in for the FIT parser: 'bad' content does not parse."""
    if content.startswith(b"bad"):
        return None
    minute = int(content.decode()[-1])
    return {
        "start_date": datetime(2026, 3, 1, 7, minute, tzinfo=timezone.utc),
        "duration_sec": 1800,
        "distance_m": 6000.0,
        "max_speed": 4.2,
        "sport": "running",
        "creator": "garmin fenix",
        "extra": {"avg_heart_rate": 150},
    }


@pytest.mark.asyncio
async def test_pages_require_sign_in(client: AsyncClient):
    resp = await client.get("/workouts")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/user/signout"


@pytest.mark.asyncio
async def test_manual_create(auth_client: AsyncClient, test_user, shoes):
    user_id, _, __ = test_user
    resp = await auth_client.post(
        "/workouts",
        data={
            "name": "Morning run",
            "date": "2026-03-02T06:30",
            "duration": "01:30",
            "distance": "5.0",
            "type": "running",
            "notes": "",
            "equipment": [str(shoes)],
        },
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == "/workouts"

    workouts = await _workouts(user_id)
    assert len(workouts) == 1
    w = workouts[0]
    assert w.name == "Morning run"
    assert w.data.total_distance == 5000
    assert w.data.total_duration == 5400
    assert w.data.creator == "web-interface"
    assert [e.id for e in w.equipment] == [shoes]

    page = await auth_client.get("/workouts")
    assert page.status_code == 200
    assert "The workout &#39;Morning run&#39; has been created." in page.text
    assert "5.00 km" in page.text


@pytest.mark.asyncio
async def test_manual_create_without_date_fails(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    resp = await auth_client.post("/workouts", data={"name": "No date", "type": "running"})
    assert resp.status_code == 302
    assert resp.headers["location"] == "/workouts/add"
    assert await _workouts(user_id) == []

    page = await auth_client.get("/workouts/add")
    assert "Something went wrong: a workout needs a date" in page.text


@pytest.mark.asyncio
async def test_manual_create_invalid_number_fails(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    resp = await auth_client.post(
        "/workouts", data={"name": "Run", "date": "2026-03-02T06:30", "distance": "-3"}
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == "/workouts/add"
    assert await _workouts(user_id) == []


@pytest.mark.asyncio
async def test_update_merges_and_replaces_equipment(auth_client: AsyncClient, test_user, shoes):
    user_id, _, __ = test_user
    workout_id = await _add_workout(user_id)
    resp = await auth_client.post(
        f"/workouts/{workout_id}", data={"notes": "C", "equipment": [str(shoes)]}
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == f"/workouts/{workout_id}"
    (w,) = await _workouts(user_id)
    assert w.name == "A"
    assert w.notes == "C"
    assert w.data.total_distance == 5000.0
    assert [e.id for e in w.equipment] == [shoes]

    # Equipment is replaced on every save
    await auth_client.post(f"/workouts/{workout_id}", data={"notes": "D"})
    (w,) = await _workouts(user_id)
    assert w.equipment == []


@pytest.mark.asyncio
async def test_foreign_equipment_is_ignored(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    workout_id = await _add_workout(user_id)
    resp = await auth_client.post(f"/workouts/{workout_id}", data={"equipment": ["9999"]})
    assert resp.status_code == 302
    (w,) = await _workouts(user_id)
    assert w.equipment == []


@pytest.mark.asyncio
async def test_update_with_bad_equipment_id_keeps_workout(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    workout_id = await _add_workout(user_id)
    resp = await auth_client.post(
        f"/workouts/{workout_id}", data={"name": "CHANGED", "equipment": ["abc"]}
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == f"/workouts/{workout_id}/edit"
    (w,) = await _workouts(user_id)
    assert w.name == "A"

    page = await auth_client.get(f"/workouts/{workout_id}/edit")
    assert "Something went wrong" in page.text


@pytest.mark.asyncio
async def test_create_with_bad_equipment_id_stores_nothing(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    resp = await auth_client.post(
        "/workouts", data={"name": "Run", "date": "2026-03-02T06:30", "equipment": ["abc"]}
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == "/workouts/add"
    assert await _workouts(user_id) == []


@pytest.mark.asyncio
async def test_show_edit_and_missing(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    workout_id = await _add_workout(user_id, name="Tempo run")
    resp = await auth_client.get(f"/workouts/{workout_id}")
    assert resp.status_code == 200
    assert "Tempo run" in resp.text
    assert "5.00 km" in resp.text

    resp = await auth_client.get(f"/workouts/{workout_id}/edit")
    assert resp.status_code == 200
    assert 'value="2026-03-01T07:00"' in resp.text
    assert 'value="00:25"' in resp.text

    resp = await auth_client.get("/workouts/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_upload_batch_with_one_failure(auth_client: AsyncClient, test_user, monkeypatch):
    user_id, _, __ = test_user
    monkeypatch.setattr(ingest, "parse_fit_session", _fake_fit)
    resp = await auth_client.post(
        "/workouts",
        data={"notes": "race week", "type": ""},
        files=[
            ("file", ("one.fit", b"fit-1", "application/octet-stream")),
            ("file", ("two.fit", b"bad-2", "application/octet-stream")),
            ("file", ("three.fit", b"fit-3", "application/octet-stream")),
        ],
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == "/workouts"

    workouts = await _workouts(user_id)
    assert [w.name for w in workouts] == ["Running 2026-03-01 07:01", "Running 2026-03-01 07:03"]
    assert all(w.notes == "race week" for w in workouts)
    assert workouts[0].data.total_distance == 6000.0
    assert workouts[0].data.creator == "garmin fenix"
    assert workouts[0].data.extra == {"avg_heart_rate": 150}
    assert workouts[0].has_file

    page = await auth_client.get("/workouts")
    assert "Added 2 new workout(s): Running 2026-03-01 07:01; Running 2026-03-01 07:03" in page.text
    assert "Encountered 1 problems while adding workouts: two.fit: could not parse FIT file" in page.text


@pytest.mark.asyncio
async def test_upload_declared_type_and_duplicates(auth_client: AsyncClient, test_user, monkeypatch):
    user_id, _, __ = test_user
    monkeypatch.setattr(ingest, "parse_fit_session", _fake_fit)
    files = [("file", ("walk.fit", b"fit-5", "application/octet-stream"))]
    await auth_client.post("/workouts", data={"type": "walking"}, files=files)
    await auth_client.post("/workouts", data={"type": "walking"}, files=files)

    workouts = await _workouts(user_id)
    assert len(workouts) == 1
    assert workouts[0].type == "walking"
    assert workouts[0].name == "Walking 2026-03-01 07:05"


@pytest.mark.asyncio
async def test_upload_unsupported_file(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    resp = await auth_client.post(
        "/workouts", files=[("file", ("notes.txt", b"hello", "text/plain"))]
    )
    assert resp.status_code == 302
    assert await _workouts(user_id) == []


@pytest.mark.asyncio
async def test_delete(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    workout_id = await _add_workout(user_id)
    resp = await auth_client.post(f"/workouts/{workout_id}/delete")
    assert resp.status_code == 302
    assert await _workouts(user_id) == []
    async with async_session_maker() as session:
        r = await session.execute(select(func.count(AuditLog.id)).where(AuditLog.action == "delete"))
        assert r.scalar_one() == 1


@pytest.mark.asyncio
async def test_refresh_marks_dirty(auth_client: AsyncClient, test_user):
    user_id, _, __ = test_user
    workout_id = await _add_workout(user_id)
    resp = await auth_client.post(f"/workouts/{workout_id}/refresh")
    assert resp.status_code == 302
    (w,) = await _workouts(user_id)
    assert w.dirty is True


@pytest.mark.asyncio
async def test_other_users_workouts_are_hidden(auth_client: AsyncClient, test_user):
    from workout_tracker.models import User

    async with async_session_maker() as session:
        other = User(username="other", name="Other")
        session.add(other)
        await session.commit()
        other_id = other.id
    workout_id = await _add_workout(other_id)
    resp = await auth_client.get(f"/workouts/{workout_id}")
    assert resp.status_code == 404
