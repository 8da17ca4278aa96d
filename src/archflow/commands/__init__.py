"""
archflow.commands - CLI command implementations
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

from archflow.config import config_root, get_config
from archflow.graph.parsers import ParseWarning


def load_configuration(args: argparse.Namespace) -> Tuple[Dict[str, Any], Path]:
    """Load configuration and the directory its relative paths start from."""
    config_path = getattr(args, "config", None)
    start = Path.cwd()
    return get_config(config_path, start), config_root(config_path, start)


def report_warnings(warnings: Iterable[ParseWarning], args: argparse.Namespace) -> int:
    """Print warnings to stderr unless quiet. Returns the number of warnings."""
    count = 0
    for warning in warnings:
        count += 1
        if not args.quiet:
            print(f"Warning: {warning}", file=sys.stderr)
    return count
