"""
archflow.commands.build - Build the architecture workspace.

Reads the catalogue and the flow files, aggregates relationships, selects
views and writes the model as Structurizr DSL, JSON or markdown.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from archflow.commands import load_configuration, report_warnings
from archflow.dsl import DslGenerator
from archflow.graph.builder import ArchitectureModel
from archflow.graph.factory import build_model
from archflow.graph.serialize import serialize_model, to_markdown
from archflow.graph.views import ViewSpec, select_views

FORMAT_SUFFIXES = {
    "dsl": ".dsl",
    "json": ".json",
    "markdown": ".md",
}


def render(model: ArchitectureModel, views: List[ViewSpec], output_format: str) -> str:
    """Render the model in one of the output formats."""
    if output_format == "dsl":
        return DslGenerator(model, views).generate()
    if output_format == "json":
        return json.dumps(serialize_model(model), indent=2) + "\n"
    if output_format == "markdown":
        return to_markdown(model)
    raise ValueError(f"Unknown output format: {output_format}")


def output_path(args: argparse.Namespace, config: Dict[str, Any], root: Path, output_format: str) -> str:
    """Where to write: ``--output``, else the configured path with the format's suffix."""
    if args.output:
        return args.output
    configured = Path(config.get("output", {}).get("path", "workspace.dsl"))
    return str(root / configured.with_suffix(FORMAT_SUFFIXES[output_format]))


def run(args: argparse.Namespace) -> int:
    """
    Run the build command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success)
    """
    config, root = load_configuration(args)

    model = build_model(
        config,
        catalogue_dir=args.catalogue,
        flows_dir=args.flows,
        repo_root=root,
    )
    selection = select_views(model, config)
    report_warnings([*model.warnings, *selection.warnings], args)

    output_format = args.format or config.get("output", {}).get("format", "dsl")
    content = render(model, selection.items, output_format)

    destination = output_path(args, config, root, output_format)
    if destination == "-":
        sys.stdout.write(content)
        return 0

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")

    if not args.quiet:
        print(
            f"Built {len(model.processes)} processes, "
            f"{len(model.relationships)} relationships, {len(selection)} views"
        )
        print(f"Wrote {path}")
    return 0
