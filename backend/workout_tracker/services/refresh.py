"""Background refresh: re-parse stored files for workouts marked dirty."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.models.workout import Workout
from workout_tracker.services.audit import log_workout_action
from workout_tracker.services.ingest import WorkoutIngestError, apply_parsed_data, parse_workout_file
from workout_tracker.services.workout_merge import merge_extra

logger = logging.getLogger(__name__)

REFRESH_BATCH_SIZE = 50


def refresh_workout(workout: Workout) -> None:
    """Recompute totals from the stored file; workouts without one only lose the dirty flag."""
    if workout.has_file:
        data = parse_workout_file(workout.filename or "", workout.file_content)
        apply_parsed_data(workout, data)
        workout.data.extra = merge_extra(workout.data.extra, data.get("extra"))
    workout.dirty = False


async def refresh_dirty_workouts(session: AsyncSession, limit: int = REFRESH_BATCH_SIZE) -> int:
    """Refresh up to limit dirty workouts; returns how many were refreshed."""
    r = await session.execute(
        select(Workout).where(Workout.dirty.is_(True)).order_by(Workout.id).limit(limit)
    )
    workouts = r.scalars().all()
    refreshed = 0
    for w in workouts:
        try:
            refresh_workout(w)
        except WorkoutIngestError as e:
            logger.warning("Refresh: workout %s could not be re-parsed: %s", w.id, e)
            w.dirty = False
            continue
        refreshed += 1
        await log_workout_action(session, w, "refresh")
    await session.flush()
    if workouts:
        logger.info("Refresh: %d of %d dirty workouts refreshed", refreshed, len(workouts))
    return refreshed

