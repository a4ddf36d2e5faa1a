"""Settings loader for wsr.

Settings are layered, lowest precedence first:

1. Built-in defaults
2. ``.wsr.toml`` at the workspace root (``.wsr.json`` as fallback)
3. Environment variables (``WSR_DEBUG``/``DEBUG``, ``NO_COLOR``)
4. CLI flags

The resulting ``Settings`` value is threaded explicitly into discovery,
listing and dispatch; nothing here mutates process-wide state.
"""

import json
import os

# Use tomllib for 3.11+
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from wsr.errors import ConfigError

DEFAULT_PACKAGE_MANAGER = "npm"
DEFAULT_IGNORE_PATHS: tuple[str, ...] = ("node_modules", ".git")

CONFIG_TOML = ".wsr.toml"
CONFIG_JSON = ".wsr.json"


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    package_manager: str = DEFAULT_PACKAGE_MANAGER
    ignore_paths: tuple[str, ...] = field(default=DEFAULT_IGNORE_PATHS)
    color: bool = True
    debug: bool = False
    quiet: bool = False

    @classmethod
    def from_dict(cls, data: Mapping) -> "Settings":
        """Parse and validate a config mapping into Settings."""
        base = cls()
        package_manager = data.get("package_manager", base.package_manager)
        if not isinstance(package_manager, str) or not package_manager:
            raise ValueError("package_manager must be a non-empty string")

        ignore_paths = data.get("ignore_paths", list(base.ignore_paths))
        if not isinstance(ignore_paths, list) or not all(isinstance(p, str) for p in ignore_paths):
            raise ValueError("ignore_paths must be a list of strings")

        color = data.get("color", base.color)
        if not isinstance(color, bool):
            raise ValueError("color must be a boolean")

        return cls(
            package_manager=package_manager,
            ignore_paths=tuple(ignore_paths),
            color=color,
        )


def debug_from_env(environ: Mapping[str, str]) -> bool:
    if environ.get("WSR_DEBUG", "0") == "1":
        return True
    return bool(environ.get("DEBUG"))


def color_from_env(environ: Mapping[str, str]) -> bool | None:
    """Return False when NO_COLOR is set, None when the env is silent."""
    if environ.get("NO_COLOR"):
        return False
    return None


def load_repo_config(workspace_root: Path) -> Settings | None:
    """Load settings from .wsr.toml or .wsr.json at the workspace root.

    Priority order:
    1. .wsr.toml (preferred)
    2. .wsr.json (fallback)

    Returns:
        Settings if a config file was found, None otherwise

    Raises:
        ConfigError: If the config file is malformed or invalid
    """
    toml_path = workspace_root / CONFIG_TOML
    if toml_path.is_file():
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
            return Settings.from_dict(data)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Malformed TOML config at {toml_path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config structure in {toml_path}: {e}") from e

    json_path = workspace_root / CONFIG_JSON
    if json_path.is_file():
        try:
            with open(json_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError("top-level value must be an object")
            return Settings.from_dict(data)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Malformed JSON config at {json_path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config structure in {json_path}: {e}") from e

    return None


def resolve_settings(
    workspace_root: Path | None,
    *,
    environ: Mapping[str, str] | None = None,
    no_color: bool = False,
    debug: bool = False,
    quiet: bool = False,
) -> Settings:
    """Build the effective Settings for one invocation."""
    env = os.environ if environ is None else environ

    settings = Settings()
    if workspace_root is not None:
        settings = load_repo_config(workspace_root) or settings

    env_color = color_from_env(env)
    if env_color is not None:
        settings = replace(settings, color=env_color)
    if debug_from_env(env):
        settings = replace(settings, debug=True)

    if no_color:
        settings = replace(settings, color=False)
    if debug:
        settings = replace(settings, debug=True)
    if quiet:
        settings = replace(settings, quiet=True)
    return settings
