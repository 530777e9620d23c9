"""Workouts pages: list, show, manual add/edit, multi-file upload, delete and refresh."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from workout_tracker.api.deps import get_current_user, get_presentation
from workout_tracker.api.rendering import redirect_to, redirect_with_error, render
from workout_tracker.core.flash import set_error, set_notice
from workout_tracker.db.session import get_db
from workout_tracker.models.equipment import Equipment
from workout_tracker.models.user import User
from workout_tracker.models.workout import WEB_INTERFACE_CREATOR, Workout, WorkoutValidationError
from workout_tracker.schemas.workout import ManualWorkout
from workout_tracker.services.audit import log_workout_action
from workout_tracker.services.equipment import get_equipment_by_ids, list_equipment
from workout_tracker.services.ingest import create_workout_from_file
from workout_tracker.services.presentation import PresentationContext
from workout_tracker.services.upload import add_workouts_from_files
from workout_tracker.services.workout_types import DEFAULT_WORKOUT_TYPE, WorkoutType

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/workouts", tags=["workouts"])


def _equipment_ids(form: Any) -> list[int]:
    """Selected equipment ids; raises ValueError on a non-numeric id."""
    return [int(v) for v in form.getlist("equipment") if str(v).strip()]


async def _get_workout(session: AsyncSession, user: User, workout_id: int) -> Workout:
    r = await session.execute(select(Workout).where(Workout.id == workout_id, Workout.user_id == user.id))
    w = r.scalar_one_or_none()
    if not w:
        raise HTTPException(status_code=404, detail="Workout not found.")
    return w


async def _load_equipment(session: AsyncSession, user: User, form: Any) -> tuple[list[Equipment], str | None]:
    """Parse and look up the selected equipment before anything on the workout changes."""
    try:
        ids = _equipment_ids(form)
        return await get_equipment_by_ids(session, user.id, ids), None
    except (ValueError, SQLAlchemyError) as e:
        await session.rollback()
        return [], str(e)


async def _save_manual(session: AsyncSession, workout: Workout, equipment: list[Equipment]) -> str | None:
    """Save workout and replace its equipment; returns an error message or None."""
    try:
        workout.validate()
        session.add(workout)
        await session.flush()
        workout.equipment = equipment
        await session.flush()
    except (WorkoutValidationError, SQLAlchemyError) as e:
        await session.rollback()
        return str(e)
    return None


@router.get("", name="workouts")
async def workouts_list(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    r = await session.execute(
        select(Workout).where(Workout.user_id == user.id).order_by(Workout.date.desc(), Workout.id.desc())
    )
    return render(request, "workouts.html", presentation, {"workouts": r.scalars().all()})


@router.post("", name="workouts-create")
async def workouts_create(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    """Multipart bodies carry uploaded files; anything else is the manual entry form."""
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        return await _add_workouts_from_upload(request, session, user, presentation)

    form = await request.form()
    try:
        manual = ManualWorkout.from_form(form)
    except ValidationError as e:
        return redirect_with_error(request, presentation, e, "workout-add")

    equipment, error = await _load_equipment(session, user, form)
    if error:
        return redirect_with_error(request, presentation, error, "workout-add")

    workout = Workout(user_id=user.id, type=DEFAULT_WORKOUT_TYPE.value, equipment=[])
    manual.update(workout)
    workout.data.creator = WEB_INTERFACE_CREATOR

    error = await _save_manual(session, workout, equipment)
    if error:
        return redirect_with_error(request, presentation, error, "workout-add")

    await log_workout_action(session, workout, "create", source="manual")
    set_notice(request, presentation.gettext("The workout '%s' has been created.", workout.name))
    return redirect_to(request, "workouts")


async def _add_workouts_from_upload(
    request: Request,
    session: AsyncSession,
    user: User,
    presentation: PresentationContext,
):
    form = await request.form()
    files = [f for f in form.getlist("file") if isinstance(f, UploadFile) and f.filename]
    notes = str(form.get("notes") or "")
    workout_type = WorkoutType.parse(str(form.get("type") or ""))

    async def create(filename: str, content: bytes) -> Workout:
        return await create_workout_from_file(session, user, workout_type, notes, filename, content)

    try:
        summary = await add_workouts_from_files(files, create)
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "workouts")

    error = summary.error(presentation.localizer)
    if error:
        set_error(request, error)
    notice = summary.notice(presentation.localizer)
    if notice:
        set_notice(request, notice)
    return redirect_to(request, "workouts")


@router.get("/add", name="workout-add")
async def workouts_add(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    equipment = await list_equipment(session, user.id)
    return render(request, "workout_add.html", presentation, {"equipment": equipment})


@router.get("/{workout_id}", name="workout-show")
async def workouts_show(
    request: Request,
    workout_id: int,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    w = await _get_workout(session, user, workout_id)
    return render(request, "workout_show.html", presentation, {"workout": w})


@router.get("/{workout_id}/edit", name="workout-edit")
async def workouts_edit(
    request: Request,
    workout_id: int,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    w = await _get_workout(session, user, workout_id)
    equipment = await list_equipment(session, user.id)
    return render(
        request,
        "workout_edit.html",
        presentation,
        {
            "workout": w,
            "form": ManualWorkout.from_workout(w),
            "equipment": equipment,
            "selected_equipment": {e.id for e in w.equipment},
        },
    )


@router.post("/{workout_id}", name="workout-update")
async def workouts_update(
    request: Request,
    workout_id: int,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    w = await _get_workout(session, user, workout_id)
    form = await request.form()
    try:
        manual = ManualWorkout.from_form(form)
    except ValidationError as e:
        return redirect_with_error(request, presentation, e, "workout-edit", workout_id=workout_id)

    equipment, error = await _load_equipment(session, user, form)
    if error:
        return redirect_with_error(request, presentation, error, "workout-edit", workout_id=workout_id)

    manual.update(w)

    error = await _save_manual(session, w, equipment)
    if error:
        return redirect_with_error(request, presentation, error, "workout-edit", workout_id=workout_id)

    await log_workout_action(session, w, "update")
    set_notice(request, presentation.gettext("The workout '%s' has been updated.", w.name))
    return redirect_to(request, "workout-show", workout_id=workout_id)


@router.post("/{workout_id}/delete", name="workout-delete")
async def workouts_delete(
    request: Request,
    workout_id: int,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    w = await _get_workout(session, user, workout_id)
    name = w.name
    await log_workout_action(session, w, "delete")
    await session.delete(w)
    try:
        await session.flush()
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "workout-show", workout_id=workout_id)
    set_notice(request, presentation.gettext("The workout '%s' has been deleted.", name))
    return redirect_to(request, "workouts")


@router.post("/{workout_id}/refresh", name="workout-refresh")
async def workouts_refresh(
    request: Request,
    workout_id: int,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    w = await _get_workout(session, user, workout_id)
    w.dirty = True
    try:
        await session.flush()
    except SQLAlchemyError as e:
        await session.rollback()
        return redirect_with_error(request, presentation, e, "workout-show", workout_id=workout_id)
    set_notice(request, presentation.gettext("The workout '%s' will be refreshed in the coming minutes.", w.name))
    return redirect_to(request, "workout-show", workout_id=workout_id)
