from __future__ import annotations

import dataclasses
import logging

import pytest

from tests.support.harness import ConfigError
from passable.config import (
    DEFAULT_CONFIGURATION,
    EMPTY_RULE,
    CommandRule,
    CommandSettings,
    Configuration,
    resolve_config,
    validate_settings,
)


def test_defaults() -> None:
    config = DEFAULT_CONFIGURATION
    assert (config.use_tabs, config.tab_width, config.end_of_line, config.print_width) == (False, 2, "\n", 80)
    assert config.indent_unit == "  "
    assert "STATIC" in config.rule_for("add_library").control_keywords
    assert "PRIVATE" in config.rule_for("Target_Link_Libraries").control_keywords
    assert "OPTIONAL" in config.rule_for("install").options
    assert config.rule_for("unknown_command") is EMPTY_RULE


def test_resolve_without_settings_matches_defaults() -> None:
    assert resolve_config() == DEFAULT_CONFIGURATION
    assert resolve_config({}) == DEFAULT_CONFIGURATION


def test_scalar_fields_override() -> None:
    config = resolve_config({"useTabs": True, "tabWidth": 4, "endOfLine": "\r\n", "printWidth": 100})
    assert (config.use_tabs, config.tab_width, config.end_of_line, config.print_width) == (True, 4, "\r\n", 100)
    assert config.indent_unit == "\t"
    assert config.commands == DEFAULT_CONFIGURATION.commands


@pytest.mark.parametrize(
    "settings",
    [
        {"tabWidth": "4"},
        {"tabWidth": 0},
        {"tabWidth": -2},
        {"printWidth": 80.5},
        {"useTabs": 1},
        {"useTabs": "yes"},
        {"endOfLine": "\r"},
    ],
    ids=["tab-width-string", "tab-width-zero", "tab-width-negative", "print-width-float", "use-tabs-int", "use-tabs-string", "eol-cr"],
)
def test_invalid_field_falls_back_to_default(settings, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="passable.config"):
        config = resolve_config(settings)

    assert config == DEFAULT_CONFIGURATION
    (field_name,) = settings
    assert any(field_name in record.getMessage() for record in caplog.records)


def test_invalid_field_does_not_drop_valid_ones(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="passable.config"):
        config = resolve_config({"tabWidth": "wide", "printWidth": 120})
    assert config.tab_width == 2
    assert config.print_width == 120


def test_unknown_fields_are_ignored() -> None:
    assert resolve_config({"semi": False, "printWidth": 60}).print_width == 60


def test_command_entry_replaces_default_entry() -> None:
    config = resolve_config({"commands": {"add_library": {"options": ["global"]}}})
    rule = config.rule_for("add_library")
    assert rule == CommandRule(options=frozenset({"GLOBAL"}))
    assert config.rule_for("add_executable") == DEFAULT_CONFIGURATION.rule_for("add_executable")


def test_command_names_are_case_insensitive() -> None:
    config = resolve_config({"commands": {"SET": {"indentAfter": 0, "controlKeywords": ["cache"]}}})
    rule = config.rule_for("set")
    assert rule.indent_after == 0
    assert rule.control_keywords == frozenset({"CACHE"})
    assert config.rule_for("Set") is rule


def test_invalid_command_entry_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="passable.config"):
        config = resolve_config({"commands": {"foo": {"options": ["A"]}, "bar": ["B"]}})

    assert config.rule_for("foo").options == frozenset({"A"})
    assert config.rule_for("bar") is EMPTY_RULE
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "commands.bar" in messages


def test_invalid_command_field_keeps_the_rest(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="passable.config"):
        config = resolve_config(
            {"commands": {"set": {"indentAfter": "x", "controlKeywords": ["cache"], "options": "PARENT_SCOPE"}}}
        )

    rule = config.rule_for("set")
    assert rule.control_keywords == frozenset({"CACHE"})
    assert rule.options == frozenset()
    assert rule.indent_after == -1
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "commands.set.indentAfter" in messages
    assert "commands.set.options" in messages
    assert "commands.set.controlKeywords" not in messages


def test_commands_must_be_a_mapping(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="passable.config"):
        config = resolve_config({"commands": ["set"]})
    assert config.commands == DEFAULT_CONFIGURATION.commands
    assert any("commands" in record.getMessage() for record in caplog.records)


def test_non_mapping_settings_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="passable.config"):
        assert validate_settings(["useTabs"]) == {}
    assert caplog.records


def test_resolve_over_explicit_base() -> None:
    base = resolve_config({"printWidth": 40})
    config = resolve_config({"useTabs": True}, base)
    assert config.print_width == 40
    assert config.use_tabs is True


def test_command_settings_accept_field_names_and_aliases() -> None:
    by_alias = CommandSettings.model_validate({"controlKeywords": ["A"], "indentAfter": 2})
    by_name = CommandSettings(control_keywords=["A"], indent_after=2)
    assert by_alias == by_name
    assert CommandSettings().indent_after == -1


def test_configuration_is_immutable() -> None:
    config = resolve_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.print_width = 10  # type: ignore[misc]
    with pytest.raises(TypeError):
        config.commands["set"] = CommandRule()  # type: ignore[index]


def test_configuration_lowercases_command_keys() -> None:
    rule = CommandRule(options=frozenset({"X"}))
    config = Configuration(commands={"MyCmd": rule})
    assert config.rule_for("mycmd") is rule
    assert list(config.commands) == ["mycmd"]


def test_command_rule_canonical() -> None:
    rule = CommandRule(control_keywords=frozenset({"PUBLIC"}), options=frozenset({"GLOBAL"}))
    assert rule.canonical("public") == "PUBLIC"
    assert rule.canonical("Global") == "GLOBAL"
    assert rule.canonical("other") == "other"
    assert rule.is_keyword("Public")
    assert not rule.is_option("public")


def test_config_error_message() -> None:
    err = ConfigError("tabWidth", "must be positive")
    assert str(err) == "Invalid configuration field 'tabWidth': must be positive"
    assert ConfigError("<file>", "bad", "cfg.json").source == "cfg.json"
    assert str(ConfigError("<file>", "bad", "cfg.json")).startswith("cfg.json: ")
