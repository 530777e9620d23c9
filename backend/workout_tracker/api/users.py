"""Sign in, register and sign out."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.api.deps import get_current_user, get_presentation, get_public_presentation
from workout_tracker.api.rendering import redirect_to, render
from workout_tracker.config import settings
from workout_tracker.core.auth import TOKEN_COOKIE, create_access_token, hash_password, verify_password
from workout_tracker.core.flash import set_error, set_notice
from workout_tracker.db.session import get_db
from workout_tracker.models.user import BROWSER_LANGUAGE, Profile, User
from workout_tracker.services.presentation import SESSION_LANGUAGE_KEY, PresentationContext
from workout_tracker.services.statistics import workout_statistics

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["user"])
users_router = APIRouter(prefix="/users", tags=["users"])

MIN_PASSWORD_LENGTH = 4


def remember_language(request: Request, user: User) -> None:
    """Keep the profile language in the session; the browser sentinel clears it."""
    language = user.language()
    if language == BROWSER_LANGUAGE:
        request.session.pop(SESSION_LANGUAGE_KEY, None)
    else:
        request.session[SESSION_LANGUAGE_KEY] = language


@router.get("/signin", name="user-login")
async def user_login(
    request: Request,
    presentation: Annotated[PresentationContext, Depends(get_public_presentation)],
):
    return render(request, "user_login.html", presentation)


@router.post("/signin", name="user-signin")
async def user_signin(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    presentation: Annotated[PresentationContext, Depends(get_public_presentation)],
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
):
    r = await session.execute(select(User).where(User.username == username.strip()))
    user = r.scalar_one_or_none()
    if user is None or not user.password_hash or not verify_password(password, user.password_hash):
        set_error(request, presentation.gettext("Invalid username or password"))
        return redirect_to(request, "user-login")
    if not user.active:
        set_error(request, presentation.gettext("Your account is not active"))
        return redirect_to(request, "user-login")

    remember_language(request, user)
    response = redirect_to(request, "dashboard")
    response.set_cookie(
        TOKEN_COOKIE,
        create_access_token(user.id, user.username),
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info("User %s signed in", user.username)
    return response


@router.post("/register", name="user-register")
async def user_register(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    presentation: Annotated[PresentationContext, Depends(get_public_presentation)],
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    name: Annotated[str, Form()] = "",
):
    username = username.strip()
    if not username or len(password) < MIN_PASSWORD_LENGTH:
        set_error(request, presentation.gettext("Username and a password of at least %d characters are required", MIN_PASSWORD_LENGTH))
        return redirect_to(request, "user-login")
    r = await session.execute(select(User.id).where(User.username == username))
    if r.first() is not None:
        set_error(request, presentation.gettext("Username already exists"))
        return redirect_to(request, "user-login")
    try:
        user = User(username=username, name=name.strip() or username, password_hash=hash_password(password))
        user.profile = Profile()
        session.add(user)
        await session.flush()
    except IntegrityError as e:
        logger.warning("Register IntegrityError: %s", e)
        await session.rollback()
        set_error(request, presentation.gettext("Username already exists"))
        return redirect_to(request, "user-login")
    set_notice(request, presentation.gettext("Your account has been created"))
    return redirect_to(request, "user-login")


@router.get("/signout", name="user-signout")
async def user_signout(request: Request):
    request.session.clear()
    response = redirect_to(request, "user-login")
    response.delete_cookie(TOKEN_COOKIE)
    return response


@users_router.get("/{user_id}", name="user-show")
async def user_show(
    request: Request,
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    presentation: Annotated[PresentationContext, Depends(get_presentation)],
):
    """Public page of an active user: name, member since and totals per workout type."""
    r = await session.execute(select(User).where(User.id == user_id, User.active.is_(True)))
    shown = r.scalar_one_or_none()
    if shown is None:
        raise HTTPException(status_code=404, detail="User not found.")
    stats = await workout_statistics(session, shown.id, presentation.timezone)
    return render(request, "user_show.html", presentation, {"shown_user": shown, "statistics": stats})
