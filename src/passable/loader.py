"""Locate and read project configuration files.

Discovery (`load_config`) walks from a start directory up to the filesystem
root. In each directory a `.passablerc.json` wins; otherwise a `package.json`
with a "passable" object is used. A file that cannot be read or parsed is
logged and skipped, never fatal.

`load_config_file` reads one explicitly named `.json` or `.toml` file. TOML
settings may sit at the top level or under `[tool.passable]`.

Both return raw settings; validation happens in `config.resolve_config`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging
import tomllib

from .errors import ConfigError

logger = logging.getLogger("passable.loader")

CONFIG_FILE_NAME = ".passablerc.json"
PACKAGE_FILE_NAME = "package.json"
SETTINGS_KEY = "passable"

PathLike = Union[str, Path]


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _as_settings(data: Any, path: Path) -> Dict[str, Any]:
    if not isinstance(data, dict):
        logger.warning("%s: top-level configuration must be an object; ignoring it", path)
        return {}
    return data


def load_config(start: Optional[PathLike] = None) -> Dict[str, Any]:
    """Find the nearest project configuration.

    Args:
        start: Directory to start from; the current directory when omitted.

    Returns:
        Raw settings of the first usable file, or {} if there is none.
    """
    current = Path(start).resolve() if start is not None else Path.cwd()

    for directory in (current, *current.parents):
        rc_file = directory / CONFIG_FILE_NAME
        if rc_file.is_file():
            try:
                data = _read_json(rc_file)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                logger.error("Error parsing %s: %s", rc_file, exc)
            else:
                logger.info("Using configuration from %s", rc_file)
                return _as_settings(data, rc_file)

        package_file = directory / PACKAGE_FILE_NAME
        if package_file.is_file():
            try:
                data = _read_json(package_file)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                logger.error("Error reading %s: %s", package_file, exc)
            else:
                if isinstance(data, dict) and SETTINGS_KEY in data:
                    logger.info("Using configuration from %s (%r key)", package_file, SETTINGS_KEY)
                    return _as_settings(data[SETTINGS_KEY], package_file)

    logger.debug("No configuration file found above %s", current)
    return {}


def load_config_file(path: PathLike) -> Dict[str, Any]:
    """Read raw settings from an explicitly named file.

    Raises:
        ConfigError: the file cannot be read or parsed, or its top level is
            not an object.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError("<file>", f"cannot read file: {exc}", str(path)) from exc

    suffix = path.suffix.lower()
    try:
        if suffix in {".toml", ".tml"}:
            data: Any = tomllib.loads(text)
            tool = data.get("tool")
            if isinstance(tool, dict) and SETTINGS_KEY in tool:
                data = tool[SETTINGS_KEY]
        else:
            data = json.loads(text)
            if path.name == PACKAGE_FILE_NAME and isinstance(data, dict):
                data = data.get(SETTINGS_KEY, {})
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError("<file>", f"cannot parse file: {exc}", str(path)) from exc

    if not isinstance(data, dict):
        raise ConfigError("<file>", "top-level configuration must be an object", str(path))

    logger.info("Loading configuration from file: %s", path)
    return data


__all__ = ["load_config", "load_config_file"]
