import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from prometheus_client import make_asgi_app
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy import func, select
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from workout_tracker import __version__
from workout_tracker.api import dashboard, equipment, profile, statistics, users, workouts

# Print workout_tracker loggers (ingest, refresh, etc.) to stdout
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logging.getLogger("workout_tracker").setLevel(logging.DEBUG)
from workout_tracker.config import settings
from workout_tracker.core.auth import hash_password
from workout_tracker.core.errors import NotAuthenticatedError
from workout_tracker.db.session import async_session_maker, init_db
from workout_tracker.models.user import Profile, User
from workout_tracker.services.i18n import Translator
from workout_tracker.services.presentation import view_template_functions
from workout_tracker.services.refresh import refresh_dirty_workouts

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

scheduler = AsyncIOScheduler()


async def scheduled_refresh_run():
    """Re-parse workouts marked dirty (profile "refresh all" or per-workout refresh)."""
    async with async_session_maker() as session:
        await refresh_dirty_workouts(session)
        await session.commit()


async def ensure_admin_user() -> None:
    """Create the initial admin account when there are no users at all."""
    async with async_session_maker() as session:
        r = await session.execute(select(func.count(User.id)))
        if r.scalar_one():
            return
        user = User(
            username=settings.admin_username,
            name="Administrator",
            password_hash=hash_password(settings.admin_password),
            admin=True,
        )
        user.profile = Profile()
        session.add(user)
        await session.commit()
    logger.warning(
        "Created admin user %r with the configured default password; change it after signing in",
        settings.admin_username,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.validate_production_config()
    await init_db()
    await ensure_admin_user()

    scheduler.add_job(
        scheduled_refresh_run,
        "interval",
        seconds=settings.worker_interval_seconds,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    yield
    scheduler.shutdown()


def create_templates(translator: Translator) -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.globals.update(view_template_functions(translator))
    return templates


limiter = Limiter(key_func=get_remote_address, default_limits=["200/minute"])

app = FastAPI(
    title="Workout Tracker",
    description="Track workouts from uploaded activity files and manual entries",
    version=__version__,
    lifespan=lifespan,
)
app.state.limiter = limiter
app.state.translator = Translator.from_directory(default_language=settings.default_language)
app.state.templates = create_templates(app.state.translator)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    logger.debug("Not authenticated (%s): %s", exc, request.url.path)
    return RedirectResponse(request.app.url_path_for("user-signout"), status_code=302)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=500)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] if settings.cors_origins else ["*"]
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Outermost: the session must be available to every handler and dependency
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    max_age=settings.session_lifetime_hours * 3600,
    same_site="lax",
)
app.include_router(users.router)
app.include_router(users.users_router)
app.include_router(profile.router)
app.include_router(workouts.router)
app.include_router(equipment.router)
app.include_router(dashboard.router)
app.include_router(statistics.router)

metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    return {"status": "ok"}
