"""Statistics: totals per workout type and per month."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.api.deps import get_current_user, get_presentation
from workout_tracker.api.rendering import render
from workout_tracker.db.session import get_db
from workout_tracker.models.user import User
from workout_tracker.services.presentation import PresentationContext
from workout_tracker.services.statistics import workout_statistics

router = APIRouter(tags=["statistics"])


@router.get("/statistics", name="statistics")
async def statistics(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    stats = await workout_statistics(session, user.id, presentation.timezone)
    return render(request, "statistics.html", presentation, {"statistics": stats})
