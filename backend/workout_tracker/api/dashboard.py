"""Dashboard: recent workouts and totals for the user's chosen workout type."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.api.deps import get_current_user, get_presentation
from workout_tracker.api.rendering import render
from workout_tracker.db.session import get_db
from workout_tracker.models.user import User
from workout_tracker.models.workout import Workout, WorkoutData
from workout_tracker.services.presentation import PresentationContext
from workout_tracker.services.workout_types import DEFAULT_TOTALS_SHOW, WorkoutType

router = APIRouter(tags=["dashboard"])

RECENT_WORKOUTS = 10


async def workout_totals(session: AsyncSession, user_id: int, workout_type: WorkoutType) -> dict:
    """Count, distance (m) and duration (s) of all workouts of one type."""
    r = await session.execute(
        select(
            func.count(Workout.id),
            func.coalesce(func.sum(WorkoutData.total_distance), 0.0),
            func.coalesce(func.sum(WorkoutData.total_duration), 0),
        )
        .join(WorkoutData, WorkoutData.workout_id == Workout.id)
        .where(Workout.user_id == user_id, Workout.type == workout_type.value)
    )
    count, distance, duration = r.one()
    return {
        "type": workout_type,
        "workouts": int(count or 0),
        "distance": float(distance or 0.0),
        "duration": int(duration or 0),
    }


@router.get("/", name="dashboard")
async def dashboard(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    totals_type = WorkoutType.parse(user.profile.totals_show if user.profile else None) or DEFAULT_TOTALS_SHOW
    r = await session.execute(
        select(Workout)
        .where(Workout.user_id == user.id)
        .order_by(Workout.date.desc(), Workout.id.desc())
        .limit(RECENT_WORKOUTS)
    )
    return render(
        request,
        "dashboard.html",
        presentation,
        {
            "recent_workouts": r.scalars().all(),
            "totals": await workout_totals(session, user.id, totals_type),
        },
    )
