"""
archflow.config.loader - Configuration file discovery and loading.

Configuration is read from ``.archflow.toml`` (found by walking up from the
working directory), deep-merged over DEFAULT_CONFIG, and finally overridden
by ``ARCHFLOW_<SECTION>_<KEY>`` environment variables.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import tomlkit
from tomlkit.exceptions import ParseError
from tomlkit.toml_document import TOMLDocument

from archflow.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG
from archflow.errors import ConfigError

ENV_PREFIX = "ARCHFLOW_"


def parse_toml_document(content: str) -> TOMLDocument:
    """Parse TOML keeping comments and layout, for files we write back."""
    return tomlkit.parse(content)


def parse_toml(content: str) -> Dict[str, Any]:
    """Parse TOML into plain Python dicts and lists."""
    return parse_toml_document(content).unwrap()


def find_config_file(start: Path) -> Optional[Path]:
    """Find ``.archflow.toml`` in ``start`` or any parent directory.

    Args:
        start: Directory to start searching from.

    Returns:
        Path to the config file, or None if not found.
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested tables merge key by key; any other value in ``override`` replaces
    the one in ``base``.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment string as bool, int, JSON list/object, or string."""
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    try:
        return int(value)
    except ValueError:
        return value


def _apply_env_overrides(
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Apply ``ARCHFLOW_<SECTION>_<KEY>`` overrides in place.

    The first segment after the prefix names the section; the rest, joined
    by underscores, is the key. ``ARCHFLOW_FLOWS_KEEP_RETURN_STEPS=true``
    sets ``flows.keep_return_steps``.
    """
    environ = os.environ if environ is None else environ
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX):].lower().partition("_")
        if not section or not key:
            continue
        table = config.setdefault(section, {})
        if isinstance(table, dict):
            table[key] = _try_parse_env_value(raw)
    return config


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load a config file merged over the defaults.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        user_config = parse_toml(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except ParseError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    return _apply_env_overrides(merge_configs(DEFAULT_CONFIG, user_config))


def get_config(
    config_path: Optional[Path] = None,
    start: Optional[Path] = None,
) -> Dict[str, Any]:
    """Resolve the effective configuration.

    Args:
        config_path: Explicit config file (``--config``); must exist.
        start: Directory to search upward from (defaults to cwd).

    Returns:
        Configuration dictionary. Defaults (plus env overrides) when no
        file is found.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return load_config(config_path)

    found = find_config_file(start or Path.cwd())
    if found is not None:
        return load_config(found)
    return _apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))


def config_root(config_path: Optional[Path] = None, start: Optional[Path] = None) -> Path:
    """Directory that relative paths in the config are resolved against."""
    if config_path is not None:
        return config_path.resolve().parent
    found = find_config_file(start or Path.cwd())
    return found.parent if found is not None else (start or Path.cwd()).resolve()
