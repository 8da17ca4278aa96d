"""
archflow.commands.validate - Validate catalogue and flows command.

Builds the model without writing output and prints a summary.
"""

from __future__ import annotations

import argparse

from archflow.commands import load_configuration, report_warnings
from archflow.graph.factory import build_model
from archflow.graph.views import select_views


def run(args: argparse.Namespace) -> int:
    """
    Run the validate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success; errors are raised to the CLI)
    """
    config, root = load_configuration(args)

    model = build_model(
        config,
        catalogue_dir=args.catalogue,
        flows_dir=args.flows,
        repo_root=root,
    )
    selection = select_views(model, config)
    warning_count = report_warnings([*model.warnings, *selection.warnings], args)

    if not args.quiet:
        source_files = {p.source_path for p in model.processes}
        print(f"Catalogue: {len(model.hierarchy)} elements ({len(model.elements_in_use())} in use)")
        print(f"Parsed {len(source_files)} flow files, {len(model.processes)} processes")
        print(
            f"Relationships: {len(model.direct_relationships)} direct, "
            f"{len(model.implied_relationships)} implied"
        )
        if warning_count:
            print(f"✓ Model valid ({warning_count} warnings)")
        else:
            print("✓ Model valid")

    return 0
