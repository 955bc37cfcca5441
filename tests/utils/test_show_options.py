import logging
import pytest
from utils.show_options import (
    resolve_option,
    resolve_show_options,
    ShowOptions,
    DAYS_UNTIL_NEXT_CHECK,
    DAYS_PRECEDING,
)


def test_defaults_without_config():
    assert resolve_show_options("Mock Show", None) == ShowOptions()
    assert resolve_show_options("Mock Show", {}) == ShowOptions(
        days_until_next_check=DAYS_UNTIL_NEXT_CHECK,
        days_preceding=DAYS_PRECEDING,
        include_history=True,
        display_name=None,
    )


def test_global_values_apply_to_every_show(config):
    config["tracker"]["days_until_next_check"] = "20"

    options = resolve_show_options("Mock Show", config)

    assert options.days_until_next_check == 20
    assert options.days_preceding == 7


def test_show_value_overrides_global(config):
    options = resolve_show_options("Other Show", config)

    assert options.days_preceding == 3
    assert options.display_name == "Other"


def test_invalid_show_value_falls_back_to_global(config, caplog):
    config["show:Mock Show"]["days_preceding"] = "soon"
    config["tracker"]["days_preceding"] = "4"

    with caplog.at_level(logging.WARNING):
        value = resolve_option("days_preceding", "Mock Show", config)

    assert value == 4
    assert "Ignoring invalid show value for days_preceding of 'Mock Show'" in caplog.text


def test_invalid_global_value_falls_back_to_default(config):
    config["tracker"]["days_until_next_check"] = "0"

    assert resolve_option("days_until_next_check", "Mock Show", config) == DAYS_UNTIL_NEXT_CHECK


def test_zero_freeze_window_is_allowed(config):
    config["show:Mock Show"]["days_preceding"] = "0"

    assert resolve_option("days_preceding", "Mock Show", config) == 0


@pytest.mark.parametrize("raw,expected", [("no", False), ("off", False), ("Yes", True), ("1", True)])
def test_include_history_parsing(config, raw, expected):
    config["show:Mock Show"]["include_history"] = raw

    assert resolve_option("include_history", "Mock Show", config) is expected


def test_display_name_is_never_global(config):
    config["tracker"]["display_name"] = "Everyone"

    assert resolve_option("display_name", "Mock Show", config) is None


def test_unconfigured_show_uses_global(config):
    assert resolve_show_options("Unknown Show", config).days_preceding == 7


def test_unknown_option_raises(config):
    with pytest.raises(KeyError):
        resolve_option("bogus", "Mock Show", config)
