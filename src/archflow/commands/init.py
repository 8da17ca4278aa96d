"""
archflow.commands.init - Create .archflow.toml configuration.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

import tomlkit
from tomlkit.toml_document import TOMLDocument

from archflow.config import CONFIG_FILE_NAME, DEFAULT_CONFIG

SECTION_COMMENTS = {
    "project": "Project settings",
    "catalogue": "Element catalogue: general.csv (Title, Description) and elements.csv",
    "flows": "Flow files, read in sorted path order",
    "views": "Diagram selection",
    "output": "Output format: dsl, json or markdown",
}


def _table(values: Dict[str, Any]) -> Any:
    table = tomlkit.table()
    for key, value in values.items():
        if isinstance(value, dict):
            table.add(key, _table(value))
        else:
            table.add(key, value)
    return table


def generate_config() -> TOMLDocument:
    """Build the default configuration as a commented TOML document."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("archflow configuration"))
    for section, values in DEFAULT_CONFIG.items():
        doc.add(tomlkit.nl())
        comment = SECTION_COMMENTS.get(section)
        if comment:
            doc.add(tomlkit.comment(comment))
        doc.add(section, _table(values))
    return doc


def run(args: argparse.Namespace) -> int:
    """
    Run the init command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 if the file exists and --force is not given)
    """
    config_path = Path.cwd() / CONFIG_FILE_NAME

    if config_path.exists() and not args.force:
        print(f"Error: {config_path} already exists", file=sys.stderr)
        print("Use --force to overwrite", file=sys.stderr)
        return 1

    config_path.write_text(tomlkit.dumps(generate_config()), encoding="utf-8")

    if not args.quiet:
        print(f"Created {config_path}")
    return 0
