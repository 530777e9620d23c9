"""Create workouts from the raw bytes of uploaded activity files."""

import hashlib
import logging
from pathlib import PurePath

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.models.user import User
from workout_tracker.models.workout import Workout, WorkoutData
from workout_tracker.services.audit import log_workout_action
from workout_tracker.services.fit_parser import parse_fit_session
from workout_tracker.services.workout_types import DEFAULT_WORKOUT_TYPE, WorkoutType, type_from_sport

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".fit",)
FIT_CREATOR = "fit"


class WorkoutIngestError(Exception):
    """An uploaded file could not be turned into a workout."""


def check_workout_file(filename: str, content: bytes) -> None:
    """Reject files that are not a supported type or carry no bytes; raises WorkoutIngestError."""
    suffix = PurePath(filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise WorkoutIngestError(f"{filename}: unsupported file type")
    if not content:
        raise WorkoutIngestError(f"{filename}: empty file")


def parse_workout_file(filename: str, content: bytes) -> dict:
    """Parse an activity file into a session summary; raises WorkoutIngestError."""
    check_workout_file(filename, content)
    data = parse_fit_session(content)
    if not data:
        raise WorkoutIngestError(f"{filename}: could not parse FIT file or no session found")
    return data


def workout_name(workout_type: WorkoutType, data: dict) -> str:
    return f"{workout_type.label} {data['start_date']:%Y-%m-%d %H:%M}"


def apply_parsed_data(workout: Workout, data: dict) -> None:
    """Copy the totals of a parsed file onto workout (and its data row)."""
    if workout.data is None:
        workout.data = WorkoutData()
    workout.date = data["start_date"]
    workout.data.creator = data.get("creator") or FIT_CREATOR
    workout.data.total_distance = float(data.get("distance_m") or 0.0)
    workout.data.total_duration = int(data.get("duration_sec") or 0)
    workout.data.max_speed = data.get("max_speed")


async def create_workout_from_file(
    session: AsyncSession,
    user: User,
    workout_type: WorkoutType | None,
    notes: str | None,
    filename: str,
    content: bytes,
) -> Workout:
    """Parse content and persist one workout for user.

    Nothing is added to the session until parsing succeeded, so a failed file leaves no row.
    """
    check_workout_file(filename, content)
    checksum = hashlib.sha256(content).hexdigest()
    r = await session.execute(
        select(Workout.id).where(Workout.user_id == user.id, Workout.checksum == checksum)
    )
    if r.first() is not None:
        raise WorkoutIngestError(f"{filename}: this file was already imported")

    data = parse_workout_file(filename, content)
    wtype = workout_type or type_from_sport(data.get("sport")) or DEFAULT_WORKOUT_TYPE

    w = Workout(
        user_id=user.id,
        name=workout_name(wtype, data),
        notes=notes or None,
        type=wtype.value,
        filename=filename,
        checksum=checksum,
        file_content=content,
        equipment=[],
    )
    apply_parsed_data(w, data)
    w.data.extra = data.get("extra")
    w.validate()
    session.add(w)
    await session.flush()
    await log_workout_action(session, w, "create", source="file", filename=filename)
    logger.info("Ingested %s as workout %s for user_id=%s", filename, w.id, user.id)
    return w
