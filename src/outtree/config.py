"""
Configuration file parsing for default execution settings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import platformdirs
import yaml

from outtree.logging import LogLevel

__all__ = [
    "CONFIG_FILE_NAME",
    "Settings",
    "get_user_config_path",
    "get_machine_config_path",
    "find_project_config",
    "parse_config_file",
    "load_settings",
    "ConfigError",
]

CONFIG_FILE_NAME = ".outtree-config.yml"


class ConfigError(Exception):
    """
    Raised when a configuration file is invalid.
    """

    pass


@dataclass(frozen=True)
class Settings:
    """Effective defaults for a run, before command line flags are applied."""

    verbose: bool = False
    dryrun: bool = False
    log_level: LogLevel = LogLevel.INFO


def get_machine_config_path() -> Path:
    """
    Get the path to the machine-level (system-wide) configuration file.

    Uses platformdirs to determine the appropriate site config directory
    for the current platform, then appends 'outtree/config.yml'.

    Returns:
        Path to the machine config file (may not exist)
    """
    config_dir = Path(platformdirs.site_config_dir("outtree"))
    return config_dir / "config.yml"


def get_user_config_path() -> Path:
    """
    Get the path to the user-level configuration file.

    Returns:
        Path to the user config file (may not exist)
    """
    config_dir: Path = Path(platformdirs.user_config_dir("outtree"))
    return config_dir / "config.yml"


def find_project_config(start_dir: Path) -> Optional[Path]:
    """
    Walk up the directory tree from start_dir to find .outtree-config.yml.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to .outtree-config.yml if found, None otherwise
    """
    try:
        current = start_dir.resolve()
    except (OSError, RuntimeError):
        return None

    # Safety limit against pathological mounts
    max_depth = 100
    for _ in range(max_depth):
        config_path = current / CONFIG_FILE_NAME
        try:
            if config_path.exists():
                return config_path
        except OSError:
            pass

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def parse_config_file(path: Path) -> dict[str, Any]:
    """
    Parse an outtree configuration file into a dict of overrides.

    Only keys present in the file are returned, so the caller can layer several
    files. Missing or empty files are valid and yield an empty dict.

    Config File Example:

        ```yaml
        verbose: true
        dryrun: false
        log_level: debug
        ```

    Args:
        path: Path to the configuration file

    Returns:
        Mapping of setting name to parsed value

    Raises:
        ConfigError: If the file is unreadable, malformed YAML, not a mapping,
                     or contains unknown keys or wrongly typed values
    """
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"Error reading config file '{path}': {e}") from e

    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML in config file '{path}': {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(
            f"Error in config file '{path}': top level must be a dictionary"
        )

    unknown = [key for key in data if key not in ("verbose", "dryrun", "log_level")]
    if unknown:
        raise ConfigError(
            f"Error in config file '{path}': unknown key(s): {', '.join(map(str, unknown))}"
        )

    overrides: dict[str, Any] = {}
    for key in ("verbose", "dryrun"):
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError(
                    f"Error in config file '{path}': Field '{key}' must be a boolean"
                )
            overrides[key] = data[key]

    if "log_level" in data:
        if not isinstance(data["log_level"], str):
            raise ConfigError(
                f"Error in config file '{path}': Field 'log_level' must be a string"
            )
        try:
            overrides["log_level"] = LogLevel.parse(data["log_level"])
        except ValueError as e:
            raise ConfigError(f"Error in config file '{path}': {e}") from e

    return overrides


def load_settings(start_dir: Path) -> Settings:
    """
    Resolve settings from the machine, user and project config files.

    Later files win: machine, then user, then the nearest project config.

    Raises:
        ConfigError: If any of the files is invalid
    """
    settings = Settings()
    paths = [get_machine_config_path(), get_user_config_path()]
    project_config = find_project_config(start_dir)
    if project_config is not None:
        paths.append(project_config)

    for path in paths:
        settings = replace(settings, **parse_config_file(path))

    return settings
