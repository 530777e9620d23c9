"""Template rendering and redirect helpers shared by the page routers."""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.responses import Response

from workout_tracker import __version__
from workout_tracker.core.flash import pop_flashes, set_error
from workout_tracker.services.presentation import PresentationContext

logger = logging.getLogger(__name__)


def render(
    request: Request,
    name: str,
    presentation: PresentationContext,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> Response:
    """Render a page with the request-bound template functions and pending flash messages."""
    data: dict[str, Any] = {"version": __version__, "flashes": pop_flashes(request)}
    data.update(presentation.functions())
    data.update(context or {})
    return request.app.state.templates.TemplateResponse(request, name, data, status_code=status_code)


def redirect_to(request: Request, route: str, **params: Any) -> RedirectResponse:
    return RedirectResponse(request.app.url_path_for(route, **params), status_code=302)


def redirect_with_error(
    request: Request,
    presentation: PresentationContext,
    error: Exception | str,
    route: str,
    **params: Any,
) -> RedirectResponse:
    """Flash the error and send the user back to route."""
    logger.info("Redirecting to %s with error: %s", route, error)
    set_error(request, presentation.gettext("Something went wrong: %s", str(error)))
    return redirect_to(request, route, **params)
