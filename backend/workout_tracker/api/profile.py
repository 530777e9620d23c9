"""User profile: language, timezone, preferred units, API key and workout refresh."""

import logging
import zoneinfo
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.api.deps import get_current_user, get_presentation, get_translator
from workout_tracker.api.rendering import redirect_to, redirect_with_error, render
from workout_tracker.api.users import remember_language
from workout_tracker.core.auth import generate_api_key
from workout_tracker.core.flash import set_notice
from workout_tracker.db.session import get_db
from workout_tracker.models.user import BROWSER_LANGUAGE, Profile, User
from workout_tracker.models.workout import Workout
from workout_tracker.services.i18n import Translator
from workout_tracker.services.presentation import PresentationContext
from workout_tracker.services.units import UnitSystem
from workout_tracker.services.workout_types import WorkoutType

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["profile"])


def _ensure_profile(user: User) -> Profile:
    if user.profile is None:
        user.profile = Profile(user_id=user.id)
    return user.profile


@router.get("/profile", name="user-profile")
async def user_profile(
    request: Request,
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    return render(request, "user_profile.html", presentation)


@router.post("/profile", name="user-profile-update")
async def user_profile_update(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
    translator: Annotated[Translator, Depends(get_translator)],
    language: Annotated[str, Form()] = BROWSER_LANGUAGE,
    timezone: Annotated[str, Form()] = "UTC",
    totals_show: Annotated[str, Form()] = "",
):
    if language != BROWSER_LANGUAGE and language not in translator.supported_languages():
        return redirect_with_error(request, presentation, f"unsupported language {language!r}", "user-profile")
    if timezone not in zoneinfo.available_timezones():
        return redirect_with_error(request, presentation, f"unknown timezone {timezone!r}", "user-profile")
    totals_type = WorkoutType.parse(totals_show)

    profile = _ensure_profile(user)
    profile.language = language
    profile.timezone = timezone
    if totals_type is not None:
        profile.totals_show = totals_type.value
    try:
        await session.flush()
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "user-profile")

    remember_language(request, user)
    set_notice(request, presentation.gettext("Profile updated"))
    return redirect_to(request, "user-profile")


@router.post("/profile/units", name="user-profile-preferred-units-update")
async def user_profile_preferred_units_update(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
    units: Annotated[str, Form()] = UnitSystem.BROWSER.value,
):
    try:
        preferred = UnitSystem(units)
    except ValueError:
        return redirect_with_error(request, presentation, f"unsupported units {units!r}", "user-profile")

    _ensure_profile(user).preferred_units = preferred.value
    try:
        await session.flush()
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "user-profile")

    set_notice(request, presentation.gettext("Preferred units updated"))
    return redirect_to(request, "user-profile")


@router.post("/reset-api-key", name="user-profile-reset-api-key")
async def user_profile_reset_api_key(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    user.api_key = generate_api_key()
    try:
        await session.flush()
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "user-profile")

    logger.info("Reset API key of user_id=%s", user.id)
    set_notice(request, presentation.gettext("API key updated"))
    return redirect_to(request, "user-profile")


@router.post("/refresh", name="user-refresh")
async def user_refresh(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    try:
        await session.execute(update(Workout).where(Workout.user_id == user.id).values(dirty=True))
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "user-profile")

    logger.info("Marked all workouts of user_id=%s for refresh", user.id)
    set_notice(request, presentation.gettext("All workouts will be refreshed in the coming minutes."))
    return redirect_to(request, "user-profile")
