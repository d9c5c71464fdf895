"""
Batch driver for the Mendix model export.

Runs the extraction for every configured application in order, isolating
failures per application, then writes the workbook once. The result of a run
is a single ExportOutcome; turning it into a process exit status is left to
the caller.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .config import ConfigurationError, ExportConfig, read_platform_token
from .extractor import ExtractionError, extract_application
from .models import ExportRow
from .repository import ModelRepository, create_repository
from .workbook import create_workbook, save_workbook


class RunStatus(str, Enum):
    """Final state of an export run."""

    SUCCESS = "success"
    CONFIGURATION_ERROR = "configuration_error"
    PARTIAL_FAILURE = "partial_failure"
    WRITE_ERROR = "write_error"


@dataclass
class ExportOutcome:
    """Result of an export run."""

    status: RunStatus
    failures: list[str] = field(default_factory=list)
    output_path: Path | None = None
    json_output_path: Path | None = None
    rows: dict[str, list[ExportRow]] = field(default_factory=dict)
    message: str = ""

    @property
    def exit_code(self) -> int:
        """Process exit status for this outcome."""
        return 0 if self.status is RunStatus.SUCCESS else 1

    @property
    def total_rows(self) -> int:
        """Number of rows written across all applications."""
        return sum(len(rows) for rows in self.rows.values())


def report_extraction_failure(error: ExtractionError) -> None:
    """Print a diagnostic for a failed application, with hints."""
    print(
        f"\nAn error occurred during the extraction process for '{error.app_name}': "
        f"{error.cause}",
        file=sys.stderr,
    )
    print("\nPlease check the following:", file=sys.stderr)
    print(
        "1. The token file holds a Mendix PAT that includes 'mx:modelrepository:repo:read'.",
        file=sys.stderr,
    )
    print(
        f"2. The App ID '{error.app.app_id}' and Branch '{error.app.branch}' "
        "are correct and you have access.",
        file=sys.stderr,
    )


def output_json(
    rows: dict[str, list[ExportRow]],
    failures: list[str],
    output_file: str | Path,
) -> Path:
    """Write the extracted rows as JSON, grouped by application."""
    result = {
        "metadata": {
            "source": "Mendix model export",
            "exported_at": datetime.now().isoformat(),
            "total_count": sum(len(r) for r in rows.values()),
            "failures": failures,
        },
        "applications": {
            name: [row.model_dump() for row in app_rows]
            for name, app_rows in rows.items()
        },
    }

    output_file = Path(output_file)
    output_file.write_text(
        json.dumps(result, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return output_file


def _open_repository(config: ExportConfig) -> ModelRepository:
    token = None
    if config.repository.type == "platform":
        token = read_platform_token(config.paths.token_file)
    return create_repository(config.repository, token=token)


def run_export(
    config: ExportConfig,
    app_names: list[str] | None = None,
    repository: ModelRepository | None = None,
    write_json: bool = False,
    verbose: bool = False,
) -> ExportOutcome:
    """Run the export for all (or the selected) configured applications.

    Args:
        config: Export configuration
        app_names: Restrict the run to these application names
        repository: Model source (created from config when None)
        write_json: Also write the rows as JSON next to the workbook
        verbose: Report every entity and attribute found

    Returns:
        ExportOutcome describing the run
    """
    print("Starting Mendix model extraction process...", file=sys.stderr)

    results_dir = Path(config.paths.results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)

    try:
        applications = config.select_applications(app_names)
        if repository is None:
            repository = _open_repository(config)
    except (ConfigurationError, FileNotFoundError) as e:
        print(str(e), file=sys.stderr)
        return ExportOutcome(status=RunStatus.CONFIGURATION_ERROR, message=str(e))

    if not applications:
        print("Warning: no applications configured.", file=sys.stderr)

    workbook = create_workbook()
    used_worksheet_names: set[str] = set()
    failures: list[str] = []
    rows: dict[str, list[ExportRow]] = {}

    for app_name, app in applications.items():
        try:
            rows[app_name] = extract_application(
                app_name,
                app,
                workbook,
                used_worksheet_names,
                repository,
                verbose=verbose,
            )
        except ExtractionError as e:
            failures.append(app_name)
            report_extraction_failure(e)

    output_path = config.paths.output_path

    try:
        save_workbook(workbook, output_path)
    except OSError as e:
        message = f"Failed to write Excel workbook to '{output_path}': {e}"
        print(message, file=sys.stderr)
        return ExportOutcome(
            status=RunStatus.WRITE_ERROR,
            failures=failures,
            rows=rows,
            message=message,
        )

    json_output_path = None
    if write_json:
        json_output_path = config.paths.json_output_path
        try:
            output_json(rows, failures, json_output_path)
        except OSError as e:
            message = f"Failed to write JSON export to '{json_output_path}': {e}"
            print(message, file=sys.stderr)
            return ExportOutcome(
                status=RunStatus.WRITE_ERROR,
                failures=failures,
                output_path=output_path,
                rows=rows,
                message=message,
            )

    if failures:
        message = f"Extraction finished with failures for: {', '.join(failures)}"
        print(f"\n{message}", file=sys.stderr)
        return ExportOutcome(
            status=RunStatus.PARTIAL_FAILURE,
            failures=failures,
            output_path=output_path,
            json_output_path=json_output_path,
            rows=rows,
            message=message,
        )

    message = f"Successfully generated {output_path.name} at {output_path}"
    print(message, file=sys.stderr)
    return ExportOutcome(
        status=RunStatus.SUCCESS,
        output_path=output_path,
        json_output_path=json_output_path,
        rows=rows,
        message=message,
    )
