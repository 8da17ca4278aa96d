"""
archflow.cli - Command-line interface.

Main entry point for the archflow CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from archflow import __version__
from archflow.commands import build, init, validate
from archflow.config import OUTPUT_FORMATS


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="archflow",
        description="Architecture models from interaction flows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  archflow build                      # Write workspace.dsl from catalogue/ and flows/
  archflow build --format json -o -   # Print the model as JSON
  archflow validate                   # Parse everything, report problems
  archflow init                       # Create .archflow.toml in current directory

For detailed command help: archflow <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"archflow {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build the architecture workspace",
    )
    _add_input_arguments(build_parser)
    build_parser.add_argument(
        "--format",
        choices=list(OUTPUT_FORMATS),
        help="Output format (default: from config, dsl)",
    )
    build_parser.add_argument(
        "-o",
        "--output",
        help="Output file path ('-' for stdout)",
        metavar="PATH",
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Parse catalogue and flows without writing output",
    )
    _add_input_arguments(validate_parser)

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Create .archflow.toml configuration",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing configuration",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version",
    )

    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--catalogue",
        type=Path,
        help="Catalogue directory (default: from config)",
        metavar="DIR",
    )
    parser.add_argument(
        "--flows",
        type=Path,
        help="Flow file or directory (default: from config)",
        metavar="DIR",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        # Dispatch to command handlers
        if args.command == "build":
            return build.run(args)
        elif args.command == "validate":
            return validate.run(args)
        elif args.command == "init":
            return init.run(args)
        elif args.command == "version":
            return version_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"archflow {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
