import pytest

from eligibility import RELATIVE_FRACTION
from settings import Settings, from_env


@pytest.mark.parametrize("value,enabled", [
    (None, True), ("", True), ("false", True), ("true", False), ("1", False), ("on", False),
])
def test_disable_flags(value, enabled):
    values = {} if value is None else {"disable_youtube": value}
    assert Settings(values).enabled("youtube") is enabled


def test_empty_option_counts_as_enabled():
    assert Settings({"disable_": "true"}).enabled(None) is True


def test_get_strips_and_defaults():
    settings = Settings({"slack_username": "  bot ", "slack_webhook": "  "})
    assert settings.get("slack_username") == "bot"
    assert settings.get("slack_webhook") is None
    assert settings.get("missing", "x") == "x"


@pytest.mark.parametrize("raw,expected", [
    (None, RELATIVE_FRACTION), ("0.5", 0.5), ("1", 1.0),
    ("0", RELATIVE_FRACTION), ("2", RELATIVE_FRACTION), ("half", RELATIVE_FRACTION),
])
def test_scrobble_fraction(raw, expected):
    values = {} if raw is None else {"scrobble_fraction": raw}
    assert Settings(values).scrobble_fraction == expected


def test_update_changes_values_in_place():
    backing = {}
    settings = Settings(backing)
    settings.update(disable_notifications="true")
    assert backing == {"disable_notifications": "true"}
    assert not settings.enabled("notifications")

    settings.update(disable_notifications=None)
    assert settings.enabled("notifications")


def test_from_env_reads_prefixed_variables():
    settings = from_env({
        "SCROBLR_DISABLE_YOUTUBE": "1",
        "SCROBLR_SLACK_WEBHOOK": "http://hook",
        "PATH": "/usr/bin",
    })
    assert settings.as_dict() == {"disable_youtube": "1", "slack_webhook": "http://hook"}
    assert not settings.enabled("youtube")
