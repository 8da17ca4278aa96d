"""
archflow.config.defaults - Default configuration values.
"""

from __future__ import annotations

from typing import Any, Dict

CONFIG_FILE_NAME = ".archflow.toml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "project": {
        "name": "architecture",
    },
    "catalogue": {
        "path": "catalogue",
        "general_file": "general.csv",
        "elements_file": "elements.csv",
        "columns": {
            "actor": "actor",
            "system": "system",
            "container": "container",
            "component": "component",
            "name": "name",
            "technology": "technology",
            "tags": "tags",
            "owner": "owner",
            "deprecated": "deprecated",
            "description": "description",
            "system_context_view": "system_context_view",
            "container_view": "container_view",
            "component_view": "component_view",
        },
    },
    "flows": {
        "dir": "flows",
        "patterns": ["*.txt", "*.puml", "*.seq"],
        "skip_files": [],
        "recursive": True,
        "keep_return_steps": False,
    },
    "views": {
        "min_dynamic_steps": 2,
        "neighbour_threshold": 2,
        "landscape": True,
    },
    "output": {
        "format": "dsl",
        "path": "workspace.dsl",
    },
}

OUTPUT_FORMATS = ("dsl", "json", "markdown")
