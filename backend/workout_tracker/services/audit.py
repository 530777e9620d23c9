"""Audit trail of changes to workouts."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.models.audit_log import AuditLog
from workout_tracker.models.workout import Workout

logger = logging.getLogger(__name__)

WORKOUT_RESOURCE = "workout"


async def log_workout_action(session: AsyncSession, workout: Workout, action: str, **details) -> None:
    """Record action ("create", "update", "delete", "refresh") on a flushed workout."""
    session.add(
        AuditLog(
            user_id=workout.user_id,
            action=action,
            resource=WORKOUT_RESOURCE,
            resource_id=str(workout.id),
            details=details or None,
        )
    )
    await session.flush()
    logger.debug("Audit: %s workout %s (user_id=%s)", action, workout.id, workout.user_id)
