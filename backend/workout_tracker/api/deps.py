"""FastAPI dependencies: current user from the sign-in cookie or API key, translator, presentation context."""

from typing import Annotated

from fastapi import Depends, Request
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.core.auth import API_KEY_HEADER, TOKEN_COOKIE, decode_token
from workout_tracker.core.errors import NotAuthenticatedError
from workout_tracker.db.session import get_db
from workout_tracker.models.user import User
from workout_tracker.services.i18n import Translator
from workout_tracker.services.presentation import PresentationContext, build_presentation


def _token_from_request(request: Request) -> str | None:
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


async def _user_from_api_key(request: Request, session: AsyncSession, api_key: str) -> User:
    r = await session.execute(select(User).where(User.api_key == api_key))
    user = r.scalar_one_or_none()
    if user is None or not user.active:
        raise NotAuthenticatedError("unknown API key")
    request.state.user = user
    return user


async def get_current_user(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    token = _token_from_request(request)
    if not token:
        api_key = request.headers.get(API_KEY_HEADER)
        if api_key:
            return await _user_from_api_key(request, session, api_key)
        raise NotAuthenticatedError("no token")
    try:
        payload = decode_token(token)
    except JWTError as e:
        raise NotAuthenticatedError("invalid or expired token") from e
    try:
        user_id = int(payload.get("sub") or "")
    except ValueError as e:
        raise NotAuthenticatedError("invalid token") from e
    r = await session.execute(select(User).where(User.id == user_id))
    user = r.scalar_one_or_none()
    if user is None or not user.active:
        raise NotAuthenticatedError("user not found or inactive")
    request.state.user = user
    return user


def get_translator(request: Request) -> Translator:
    return request.app.state.translator


async def get_presentation(
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
    translator: Annotated[Translator, Depends(get_translator)],
) -> PresentationContext:
    return build_presentation(request, translator, user)


async def get_public_presentation(
    request: Request,
    translator: Annotated[Translator, Depends(get_translator)],
) -> PresentationContext:
    return build_presentation(request, translator, None)
