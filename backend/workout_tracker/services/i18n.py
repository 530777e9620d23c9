"""Message catalogs and per-request language negotiation.

The Translator is built once at startup and passed to request handlers; a Localizer
binds it to the language of one request.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "en"
TRANSLATIONS_DIR = Path(__file__).resolve().parent.parent / "translations"


def parse_accept_language(header: str | None) -> list[str]:
    """Language tags from an Accept-Language header, best q-value first."""
    if not header:
        return []
    weighted: list[tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        pieces = [p.strip() for p in part.split(";")]
        tag = pieces[0]
        if not tag or tag == "*":
            continue
        q = 1.0
        for param in pieces[1:]:
            if param.startswith("q="):
                try:
                    q = float(param[2:])
                except ValueError:
                    q = 0.0
        if q <= 0:
            continue
        weighted.append((-q, index, tag))
    return [tag for _, _, tag in sorted(weighted)]


class Localizer:
    def __init__(self, language: str, catalog: dict[str, str]):
        self.language = language
        self._catalog = catalog

    def gettext(self, message: str, *args) -> str:
        """Translate message (falling back to the msgid) and apply %-style args."""
        text = self._catalog.get(message) or message
        if not args:
            return text
        try:
            return text % args
        except (TypeError, ValueError):
            logger.warning("i18n: bad format arguments for %r in %s", message, self.language)
            return text


class Translator:
    def __init__(self, catalogs: dict[str, dict[str, str]], default_language: str = SOURCE_LANGUAGE):
        self._catalogs = dict(catalogs)
        self._catalogs.setdefault(SOURCE_LANGUAGE, {})
        self.default_language = default_language if default_language in self._catalogs else SOURCE_LANGUAGE

    @classmethod
    def from_directory(cls, path: Path = TRANSLATIONS_DIR, default_language: str = SOURCE_LANGUAGE) -> "Translator":
        """Load every <lang>.json catalog in path."""
        catalogs: dict[str, dict[str, str]] = {}
        for file in sorted(Path(path).glob("*.json")):
            with file.open(encoding="utf-8") as fh:
                catalogs[file.stem] = json.load(fh)
            logger.debug("i18n: loaded %d messages for %s", len(catalogs[file.stem]), file.stem)
        return cls(catalogs, default_language)

    def supported_languages(self) -> list[str]:
        return sorted(self._catalogs)

    def match(self, tag: str | None) -> str | None:
        """Supported language for a tag ("nl-BE" matches "nl"), or None."""
        if not tag:
            return None
        tag = tag.strip().replace("_", "-").lower()
        if tag in self._catalogs:
            return tag
        base = tag.split("-", 1)[0]
        if base in self._catalogs:
            return base
        return None

    def negotiate(self, *candidates: str | None) -> str:
        """First candidate that maps to a supported language; candidates may be Accept-Language headers."""
        for candidate in candidates:
            if not candidate:
                continue
            for tag in parse_accept_language(candidate):
                language = self.match(tag)
                if language:
                    return language
        return self.default_language

    def localizer(self, *candidates: str | None) -> Localizer:
        language = self.negotiate(*candidates)
        return Localizer(language, self._catalogs.get(language, {}))
