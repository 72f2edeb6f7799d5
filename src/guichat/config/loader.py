"""Build a ``GuiChatConfig`` from TOML layers and the environment.

Layers, lowest priority first:
    1. Model defaults
    2. ``$XDG_CONFIG_HOME/guichat/config.toml`` (``~/.config`` if unset)
    3. ``guichat.toml`` in the working directory
    4. The file named by ``$GUICHAT_CONFIG``
    5. The ``path`` argument of ``load_config``
    6. ``GUICHAT_*`` variables (see ``_ENV_VARS``)
    7. The ``overrides`` argument of ``load_config``

Tables merge key by key across layers; any other value, lists
included, is replaced wholesale.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from guichat.core.errors import ConfigError

from .schema import GuiChatConfig

if TYPE_CHECKING:
    from collections.abc import Callable

_APP_DIR = "guichat"
_PROJECT_FILE = "guichat.toml"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _user_config_path() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    root = Path(xdg) if xdg else Path.home() / ".config"
    return root / _APP_DIR / "config.toml"


def _config_layers(explicit: str | Path | None) -> list[Path]:
    """TOML files to read, lowest priority first.

    The user and project files are optional. A file named by
    ``$GUICHAT_CONFIG`` or by *explicit* has to exist.
    """
    layers = [
        p for p in (_user_config_path(), Path.cwd() / _PROJECT_FILE) if p.is_file()
    ]

    from_env = os.environ.get("GUICHAT_CONFIG")
    if from_env:
        if not Path(from_env).is_file():
            msg = f"GUICHAT_CONFIG points to non-existent file: {from_env}"
            raise ConfigError(msg)
        layers.append(Path(from_env))

    if explicit is not None:
        if not Path(explicit).is_file():
            msg = f"Config file not found: {explicit}"
            raise ConfigError(msg)
        layers.append(Path(explicit))

    return layers


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* with *override* laid over it. Neither input is modified."""
    out = dict(base)
    for key, value in override.items():
        below = out.get(key)
        if isinstance(below, dict) and isinstance(value, dict):
            out[key] = _deep_merge(below, value)
        else:
            out[key] = value
    return out


def _split_names(raw: str) -> list[str]:
    return [name.strip() for name in raw.split(",") if name.strip()]


def _flag(raw: str) -> bool:
    return raw.strip().lower() in _TRUTHY


# variable -> (section, key, parser)
_ENV_VARS: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "GUICHAT_LOG_LEVEL": ("logging", "level", str.upper),
    "GUICHAT_BACKENDS": ("backends", "available", _split_names),
    "GUICHAT_SUPPRESS_INSTRUCTIONS": ("engine", "suppress_instructions", _flag),
}


def _env_overrides() -> dict[str, Any]:
    """Config values set through ``GUICHAT_*`` variables.

    An empty ``GUICHAT_LOG_LEVEL`` is ignored. An empty
    ``GUICHAT_BACKENDS`` means no backends are restricted.
    """
    found: dict[str, Any] = {}
    for var, (section, key, parse) in _ENV_VARS.items():
        raw = os.environ.get(var)
        if raw is None or (var == "GUICHAT_LOG_LEVEL" and not raw):
            continue
        found.setdefault(section, {})[key] = parse(raw)
    return found


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> GuiChatConfig:
    """Read every config layer and validate the result.

    Args:
        path: A config file that beats every discovered file.
        overrides: Values that beat files and environment alike.

    Raises:
        ConfigError: On a missing or malformed file, or when the merged
            values fail validation.
    """
    merged: dict[str, Any] = {}
    for layer in _config_layers(path):
        merged = _deep_merge(merged, _read_toml(layer))
    merged = _deep_merge(merged, _env_overrides())
    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        return GuiChatConfig.model_validate(merged)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e
