"""Per-request presentation settings (language, units, timezone) and the template functions bound to them."""

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from starlette.requests import Request

from workout_tracker.models.user import BROWSER_LANGUAGE, User
from workout_tracker.services import template_helpers as th
from workout_tracker.services.i18n import Localizer, Translator
from workout_tracker.services.units import UnitSystem, resolve_units, supported_units
from workout_tracker.services.workout_types import workout_types

SESSION_LANGUAGE_KEY = "user_language"


def browser_language(request: Request) -> str:
    return request.headers.get("accept-language", "")


def language_candidates(request: Request) -> list[str | None]:
    """Language sources in priority order: query parameter, session, browser."""
    session_language = request.session.get(SESSION_LANGUAGE_KEY) if "session" in request.scope else None
    if session_language == BROWSER_LANGUAGE:
        session_language = None
    return [
        request.query_params.get("lang"),
        session_language,
        browser_language(request),
    ]


@dataclass
class PresentationContext:
    localizer: Localizer
    units: UnitSystem
    timezone: str
    user: User | None

    @property
    def language(self) -> str:
        return self.localizer.language

    def gettext(self, message: str, *args) -> str:
        return self.localizer.gettext(message, *args)

    def functions(self) -> dict[str, Callable[..., Any]]:
        """Template functions bound to this request's language, units and timezone."""
        units = self.units
        tz = self.timezone
        user = self.user
        return {
            "i18n": self.localizer.gettext,
            "language": lambda: self.language,
            "CurrentUser": lambda: user,
            "CurrentUnits": lambda: units,
            "LocalTime": lambda dt: th.local_time(dt, tz),
            "LocalDate": lambda dt: th.local_date(dt, tz),
            "HumanDistance": partial(_with_units, th.human_distance, units),
            "HumanSpeed": partial(_with_units, th.human_speed, units),
            "HumanTempo": partial(_with_units, th.human_tempo, units),
            "LocalUnit": lambda kind: th.local_unit(units, kind),
        }


def _with_units(fn: Callable[[Any, UnitSystem], str], units: UnitSystem, value: Any) -> str:
    return fn(value, units)


def build_presentation(request: Request, translator: Translator, user: User | None) -> PresentationContext:
    """Resolve language, units and timezone for the requester; never shared between requests."""
    localizer = translator.localizer(*language_candidates(request))
    preference = user.units() if user is not None else None
    return PresentationContext(
        localizer=localizer,
        units=resolve_units(preference, browser_language(request)),
        timezone=user.timezone() if user is not None else "UTC",
        user=user,
    )


def _echo(message: str, *args) -> str:
    return message % args if args else message


def view_template_functions(translator: Translator) -> dict[str, Any]:
    """Startup-wide template globals; request-bound functions override the unit and language ones."""
    return {
        "i18n": _echo,
        "language": lambda: translator.default_language,
        "CurrentUser": lambda: None,
        "LocalTime": lambda dt: th.local_time(dt),
        "LocalDate": lambda dt: th.local_date(dt),
        "supportedUnits": supported_units,
        "supportedLanguages": translator.supported_languages,
        "workoutTypes": workout_types,
        "NumericDuration": th.numeric_duration,
        "CountryCodeToFlag": th.country_code_to_flag,
        "ToKilometer": th.to_kilometer,
        "HumanDistance": th.human_distance,
        "HumanSpeed": th.human_speed,
        "HumanTempo": th.human_tempo,
        "HumanDuration": th.human_duration,
        "IconFor": th.icon_for,
        "BoolToHTML": th.bool_to_html,
        "BoolToCheckbox": th.bool_to_checkbox,
        "BuildDecoratedAttribute": th.build_decorated_attribute,
        "ToLanguageInformation": th.to_language_information,
        "Timezones": th.timezones,
        "LocalUnit": partial(th.local_unit, UnitSystem.METRIC),
    }
