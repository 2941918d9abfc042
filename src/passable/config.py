"""Formatter configuration: the immutable value the printer reads.

Raw settings use the configuration-file spelling::

    {
      "useTabs": false, "tabWidth": 2, "endOfLine": "\\n", "printWidth": 80,
      "commands": {
        "set": {"controlKeywords": [], "options": [], "indentAfter": 0}
      }
    }

Validation is per field. A field with the wrong shape is reported as a
ConfigError, logged, and then ignored, so a partly broken project file still
formats with every field it got right.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Literal, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
)
from typing_extensions import Annotated

from .defaults import DEFAULT_SETTINGS
from .errors import ConfigError

logger = logging.getLogger("passable.config")


# ---------- Raw settings schema ----------

class CommandSettings(BaseModel):
    """Per-command settings as written in a configuration file.

    Attributes:
        control_keywords: Arguments that start a new indented group.
        options: Arguments that are upper-cased and printed on their own line.
        indent_after: Arguments after this index are indented one more level
            (negative disables).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    control_keywords: List[StrictStr] = Field(default_factory=list, alias="controlKeywords")
    options: List[StrictStr] = Field(default_factory=list)
    indent_after: StrictInt = Field(default=-1, alias="indentAfter")


PositiveInt = Annotated[StrictInt, Field(gt=0)]

_FIELD_ADAPTERS: Dict[str, TypeAdapter] = {
    "useTabs": TypeAdapter(StrictBool),
    "tabWidth": TypeAdapter(PositiveInt),
    "endOfLine": TypeAdapter(Literal["\n", "\r\n"]),
    "printWidth": TypeAdapter(PositiveInt),
}

_COMMAND_FIELD_ADAPTERS: Dict[str, TypeAdapter] = {
    "controlKeywords": TypeAdapter(List[StrictStr]),
    "options": TypeAdapter(List[StrictStr]),
    "indentAfter": TypeAdapter(StrictInt),
}


def _check_field(name: str, adapter: TypeAdapter, value: Any) -> Any:
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        detail = exc.errors()[0].get("msg", str(exc)) if exc.errors() else str(exc)
        raise ConfigError(name, detail) from exc


def _validate_command(name: str, entry: Any) -> CommandSettings:
    """Build one command's settings; a bad sub-field falls back to its default"""
    if not isinstance(entry, Mapping):
        raise ConfigError(f"commands.{name}", f"expected an object, got {type(entry).__name__}")

    fields: Dict[str, Any] = {}
    for key, value in entry.items():
        adapter = _COMMAND_FIELD_ADAPTERS.get(key)
        if adapter is None:
            logger.debug("Ignoring unknown field %r of command %r", key, name)
            continue
        try:
            fields[key] = _check_field(f"commands.{name}.{key}", adapter, value)
        except ConfigError as exc:
            logger.warning("%s; using the default", exc)
    return CommandSettings.model_validate(fields)


def _validate_commands(value: Any) -> Dict[str, CommandSettings]:
    if not isinstance(value, Mapping):
        raise ConfigError("commands", f"expected an object, got {type(value).__name__}")

    commands: Dict[str, CommandSettings] = {}
    for name, entry in value.items():
        try:
            if not isinstance(name, str):
                raise ConfigError(f"commands.{name!r}", "command names must be strings")
            commands[name] = _validate_command(name, entry)
        except ConfigError as exc:
            logger.warning("%s; ignoring it", exc)
    return commands


def validate_settings(raw: Any) -> Dict[str, Any]:
    """Validate raw settings field by field.

    Args:
        raw: Parsed configuration mapping (or None).

    Returns:
        The subset of fields that passed validation, keyed by their
        configuration-file names. "commands" maps to CommandSettings models.
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        logger.warning("%s; ignoring it", ConfigError("<root>", f"expected an object, got {type(raw).__name__}"))
        return {}

    settings: Dict[str, Any] = {}
    for key, value in raw.items():
        try:
            if key == "commands":
                settings[key] = _validate_commands(value)
            elif key in _FIELD_ADAPTERS:
                settings[key] = _check_field(key, _FIELD_ADAPTERS[key], value)
            else:
                logger.debug("Ignoring unknown configuration field %r", key)
        except ConfigError as exc:
            logger.warning("%s; using the default", exc)
    return settings


# ---------- Resolved configuration ----------

@dataclass(frozen=True)
class CommandRule:
    """Layout rules for one command. Keywords and options are upper-case."""

    control_keywords: FrozenSet[str] = frozenset()
    options: FrozenSet[str] = frozenset()
    indent_after: int = -1

    @classmethod
    def from_settings(cls, settings: CommandSettings) -> CommandRule:
        return cls(
            control_keywords=frozenset(s.upper() for s in settings.control_keywords),
            options=frozenset(s.upper() for s in settings.options),
            indent_after=settings.indent_after,
        )

    def is_keyword(self, value: str) -> bool:
        return value.upper() in self.control_keywords

    def is_option(self, value: str) -> bool:
        return value.upper() in self.options

    def canonical(self, value: str) -> str:
        """Upper-case configured keywords and options, leave the rest alone"""
        upper = value.upper()
        if upper in self.control_keywords or upper in self.options:
            return upper
        return value


EMPTY_RULE = CommandRule()


def _freeze(commands: Mapping[str, CommandRule]) -> Mapping[str, CommandRule]:
    return MappingProxyType({name.lower(): rule for name, rule in commands.items()})


@dataclass(frozen=True)
class Configuration:
    """Resolved formatter configuration.

    Attributes:
        use_tabs: Indent with tabs instead of spaces.
        tab_width: Spaces per indent level; also the width of a tab when
            measuring lines.
        end_of_line: "\\n" or "\\r\\n".
        print_width: Target maximum line length.
        commands: Lower-cased command name -> CommandRule.
    """

    use_tabs: bool = False
    tab_width: int = 2
    end_of_line: str = "\n"
    print_width: int = 80
    commands: Mapping[str, CommandRule] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "commands", _freeze(self.commands))

    @property
    def indent_unit(self) -> str:
        return "\t" if self.use_tabs else " " * self.tab_width

    def rule_for(self, command: str) -> CommandRule:
        return self.commands.get(command.lower(), EMPTY_RULE)


def resolve_config(raw: Optional[Mapping[str, Any]] = None, base: Optional[Configuration] = None) -> Configuration:
    """Merge raw (partial) settings over a base configuration.

    Scalar fields replace the base value when present and valid. Each command
    entry replaces the base rule of the same (case-insensitive) name; commands
    the settings do not mention keep their base rule.

    Args:
        raw: Partial settings in configuration-file spelling.
        base: Configuration to merge over; DEFAULT_CONFIGURATION when omitted.
    """
    if base is None:
        base = DEFAULT_CONFIGURATION
    settings = validate_settings(raw)

    commands = dict(base.commands)
    for name, entry in settings.get("commands", {}).items():
        commands[name.lower()] = CommandRule.from_settings(entry)

    return Configuration(
        use_tabs=settings.get("useTabs", base.use_tabs),
        tab_width=settings.get("tabWidth", base.tab_width),
        end_of_line=settings.get("endOfLine", base.end_of_line),
        print_width=settings.get("printWidth", base.print_width),
        commands=commands,
    )


DEFAULT_CONFIGURATION = resolve_config(DEFAULT_SETTINGS, Configuration())
