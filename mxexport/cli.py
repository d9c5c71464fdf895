"""
Command-line interface for the Mendix model export.

Exports the non-persistable entities of every configured Mendix app to a
single Excel workbook, one worksheet per app.

Supports configuration from:
- Command line arguments (highest priority)
- mxexport.yaml config file
- Default values (fallback)

All progress and error messages go to stderr.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .batch import RunStatus, run_export
from .config import ConfigurationError, ExportConfig, load_config


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mxexport",
        description="Export Mendix domain model metadata to an Excel workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mxexport
  mxexport --config mxexport.yaml --app PAM --app COOL
  mxexport --source ./model-exports --json
  mxexport --results-dir ./out --output-name review.xlsx

Configuration:
  Applications, paths and the model server are read from mxexport.yaml in
  the current directory, or from the file given with --config. The Mendix
  PAT is read from config/token.txt unless --token-file is given.
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to mxexport.yaml config file",
    )
    parser.add_argument(
        "--token-file",
        type=Path,
        help="File containing the Mendix personal access token",
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        help="Directory for the generated files",
    )
    parser.add_argument(
        "-o",
        "--output-name",
        help="File name of the generated workbook",
    )
    parser.add_argument(
        "-s",
        "--source",
        type=Path,
        help="Read models from a directory of JSON exports instead of the model server",
    )
    parser.add_argument(
        "-a",
        "--app",
        action="append",
        dest="apps",
        metavar="NAME",
        help="Only export this application (repeatable)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also write the exported rows as JSON next to the workbook",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Report every entity and attribute found",
    )

    return parser


def apply_overrides(config: ExportConfig, args: argparse.Namespace) -> ExportConfig:
    """Apply command line overrides to the loaded configuration."""
    if args.token_file:
        config.paths.token_file = str(args.token_file)
    if args.results_dir:
        config.paths.results_dir = str(args.results_dir)
    if args.output_name:
        config.paths.output_filename = args.output_name
    if args.source:
        config.repository.type = "local"
        config.repository.path = str(args.source)
    return config


def run(args: argparse.Namespace) -> int:
    """Load configuration, run the export and report the outcome."""
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = apply_overrides(config, args)

    outcome = run_export(
        config,
        app_names=args.apps,
        write_json=args.json,
        verbose=args.verbose,
    )

    if outcome.status is not RunStatus.CONFIGURATION_ERROR:
        print(f"\nApplications exported: {len(outcome.rows)}", file=sys.stderr)
        print(f"Rows written: {outcome.total_rows}", file=sys.stderr)
        if outcome.failures:
            print(f"Failed applications: {', '.join(outcome.failures)}", file=sys.stderr)

    return outcome.exit_code


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the model export CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return run(args)
    except Exception as e:
        print(f"A critical unhandled error occurred: {e!r}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
