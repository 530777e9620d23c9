"""Equipment pages: list and create the gear that workouts can be linked to."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.api.deps import get_current_user, get_presentation
from workout_tracker.api.rendering import redirect_to, redirect_with_error, render
from workout_tracker.core.flash import set_notice
from workout_tracker.db.session import get_db
from workout_tracker.models.equipment import Equipment
from workout_tracker.models.user import User
from workout_tracker.services.equipment import list_equipment
from workout_tracker.services.presentation import PresentationContext

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("", name="equipment")
async def equipment_list(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    equipment = await list_equipment(session, user.id)
    return render(request, "equipment.html", presentation, {"equipment": equipment})


@router.post("", name="equipment-create")
async def equipment_create(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
    name: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
):
    name = name.strip()
    if not name:
        return redirect_with_error(request, presentation, presentation.gettext("a name is required"), "equipment")
    e = Equipment(user_id=user.id, name=name, description=description.strip() or None)
    session.add(e)
    try:
        await session.flush()
    except SQLAlchemyError as err:
        await session.rollback()
        return redirect_with_error(request, presentation, err, "equipment")
    set_notice(request, presentation.gettext("The equipment '%s' has been created.", e.name))
    return redirect_to(request, "equipment")
