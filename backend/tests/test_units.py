"""Tests for unit system resolution."""

import pytest

from workout_tracker.services.units import UnitSystem, resolve_units, units_from_browser_language


@pytest.mark.parametrize(
    "header,expected",
    [
        ("en-US,en;q=0.9", UnitSystem.IMPERIAL),
        ("en-GB,en;q=0.9", UnitSystem.METRIC),
        ("en", UnitSystem.METRIC),
        ("nl-BE", UnitSystem.METRIC),
        ("my-MM", UnitSystem.IMPERIAL),
        ("", UnitSystem.METRIC),
        (None, UnitSystem.METRIC),
    ],
)
def test_units_from_browser_language(header, expected):
    assert units_from_browser_language(header) == expected


def test_resolve_units_stored_preference_wins():
    assert resolve_units(UnitSystem.METRIC, "en-US") == UnitSystem.METRIC
    assert resolve_units(UnitSystem.IMPERIAL, "nl-NL") == UnitSystem.IMPERIAL


def test_resolve_units_browser_preference_inherits_header():
    assert resolve_units(UnitSystem.BROWSER, "en-US") == UnitSystem.IMPERIAL
    assert resolve_units(None, "de-DE") == UnitSystem.METRIC


def test_unit_system_parse():
    assert UnitSystem.parse("imperial") == UnitSystem.IMPERIAL
    assert UnitSystem.parse("nonsense") == UnitSystem.BROWSER
    assert UnitSystem.parse(None) == UnitSystem.BROWSER
