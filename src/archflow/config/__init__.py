"""
archflow.config - Configuration loading and defaults
"""

from archflow.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG, OUTPUT_FORMATS
from archflow.config.loader import (
    ConfigError,
    _apply_env_overrides,
    _try_parse_env_value,
    config_root,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "OUTPUT_FORMATS",
    "config_root",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
]
