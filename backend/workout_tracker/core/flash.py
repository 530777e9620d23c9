"""One-shot notice/error messages carried to the next page in the session cookie."""

from starlette.requests import Request

FLASH_KEY = "flash"
NOTICE = "notice"
ERROR = "error"


def _push(request: Request, kind: str, message: str) -> None:
    flashes = request.session.setdefault(FLASH_KEY, {})
    flashes.setdefault(kind, []).append(message)
    # Reassign so the session middleware sees the change
    request.session[FLASH_KEY] = flashes


def set_notice(request: Request, message: str) -> None:
    _push(request, NOTICE, message)


def set_error(request: Request, message: str) -> None:
    _push(request, ERROR, message)


def pop_flashes(request: Request) -> dict[str, list[str]]:
    if "session" not in request.scope:
        return {}
    return request.session.pop(FLASH_KEY, None) or {}
