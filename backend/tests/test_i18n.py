"""Tests for message catalogs and language negotiation."""

from workout_tracker.services.i18n import Translator, parse_accept_language

CATALOGS = {
    "nl": {"Workouts": "Trainingen", "Added %d new workout(s): %s": "%d nieuwe training(en) toegevoegd: %s"},
    "de": {"Workouts": "Trainings"},
}


def test_parse_accept_language_orders_by_quality():
    assert parse_accept_language("de;q=0.5, nl-BE, en;q=0.8") == ["nl-BE", "en", "de"]
    assert parse_accept_language("fr;q=0, *") == []
    assert parse_accept_language(None) == []


def test_match_region_falls_back_to_base_language():
    t = Translator(CATALOGS)
    assert t.match("nl-BE") == "nl"
    assert t.match("DE") == "de"
    assert t.match("fr") is None


def test_negotiate_first_supported_candidate():
    t = Translator(CATALOGS)
    assert t.negotiate("fr", None, "de-CH,nl;q=0.9") == "de"
    assert t.negotiate(None, "") == "en"


def test_default_language_must_be_supported():
    assert Translator(CATALOGS, default_language="nl").negotiate() == "nl"
    assert Translator(CATALOGS, default_language="fr").default_language == "en"


def test_localizer_translates_and_formats():
    loc = Translator(CATALOGS).localizer("nl")
    assert loc.language == "nl"
    assert loc.gettext("Workouts") == "Trainingen"
    assert loc.gettext("Added %d new workout(s): %s", 2, "a; b") == "2 nieuwe training(en) toegevoegd: a; b"


def test_localizer_falls_back_to_message_id():
    loc = Translator(CATALOGS).localizer("de")
    assert loc.gettext("Profile updated") == "Profile updated"
    assert loc.gettext("Something went wrong: %s", "boom") == "Something went wrong: boom"


def test_localizer_bad_arguments_returns_text():
    loc = Translator(CATALOGS).localizer("en")
    assert loc.gettext("%d workouts", "many") == "%d workouts"


def test_shipped_catalogs_load():
    t = Translator.from_directory()
    assert {"en", "nl", "de"} <= set(t.supported_languages())
    assert t.localizer("nl").gettext("The workout '%s' has been created.", "Run") == "De training 'Run' is aangemaakt."
