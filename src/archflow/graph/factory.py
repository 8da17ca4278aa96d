"""Model Factory - Shared utility for building an ArchitectureModel.

This module provides a single entry point for all commands to build the
model from configuration, the catalogue directory and the flow directory.
Commands should use this instead of implementing their own file reading.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from archflow.config import get_config
from archflow.graph.builder import ArchitectureModel, ModelBuilder
from archflow.graph.deserializer import FlowDirectory
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.parsers.catalogue import CatalogueParser, build_hierarchy
from archflow.graph.parsers.flow import FlowParser


def load_hierarchy(
    config: dict[str, Any],
    catalogue_dir: Path,
) -> ElementHierarchy:
    """Read the catalogue and return the frozen element hierarchy."""
    catalogue_config = config.get("catalogue", {})
    parser = CatalogueParser(catalogue_config.get("columns"))
    catalogue = parser.parse_directory(
        catalogue_dir,
        general_file=catalogue_config.get("general_file", "general.csv"),
        elements_file=catalogue_config.get("elements_file", "elements.csv"),
    )
    return build_hierarchy(catalogue)


def flow_directory(config: dict[str, Any], flows_dir: Path) -> FlowDirectory:
    flows_config = config.get("flows", {})
    return FlowDirectory(
        flows_dir,
        patterns=flows_config.get("patterns"),
        recursive=flows_config.get("recursive", True),
        skip_files=flows_config.get("skip_files"),
    )


def build_model(
    config: dict[str, Any] | None = None,
    catalogue_dir: Path | None = None,
    flows_dir: Path | None = None,
    config_path: Path | None = None,
    repo_root: Path | None = None,
) -> ArchitectureModel:
    """Build an ArchitectureModel from the catalogue and the flow files.

    This is the standard way for commands to obtain a model. It handles:
    - Configuration loading (auto-discovery or explicit)
    - Catalogue and flow directory resolution
    - Hierarchy construction (frozen before any flow is parsed)
    - Flow parsing in sorted file order
    - Relationship aggregation

    Args:
        config: Pre-loaded config dict (optional).
        catalogue_dir: Explicit catalogue directory (optional).
        flows_dir: Explicit flow directory or file (optional).
        config_path: Path to config file (optional).
        repo_root: Root for relative config paths (defaults to cwd).

    Returns:
        The complete ArchitectureModel.

    Priority:
        explicit directories > config > defaults
    """
    if repo_root is None:
        repo_root = Path.cwd()

    if config is None:
        config = get_config(config_path, repo_root)

    if catalogue_dir is None:
        catalogue_dir = repo_root / config.get("catalogue", {}).get("path", "catalogue")
    if flows_dir is None:
        flows_dir = repo_root / config.get("flows", {}).get("dir", "flows")

    hierarchy = load_hierarchy(config, catalogue_dir)

    parser = FlowParser(
        hierarchy,
        keep_return_steps=config.get("flows", {}).get("keep_return_steps", False),
    )
    builder = ModelBuilder(hierarchy)
    flow_directory(config, flows_dir).deserialize(parser, builder)

    return builder.build()
