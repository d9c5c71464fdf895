"""
Extract the non-persistable entity attributes of a single Mendix app.

The extraction walks modules -> entities -> attributes in the order given by
the model snapshot and writes one workbook row per attribute of every root,
non-persistable entity.
"""

from __future__ import annotations

import sys

from openpyxl import Workbook

from .classify import UNKNOWN_TYPE_LABEL, classify_attribute_type, is_non_persistable_entity
from .config import ApplicationConfig
from .models import ExportRow
from .repository import ModelRepository
from .workbook import add_export_worksheet, append_export_row, generate_unique_worksheet_name


class ExtractionError(RuntimeError):
    """Raised when the extraction of one application fails."""

    def __init__(self, app_name: str, app: ApplicationConfig, cause: BaseException):
        self.app_name = app_name
        self.app = app
        self.cause = cause
        super().__init__(f"Extraction failed for '{app_name}': {cause}")


def extract_application(
    app_name: str,
    app: ApplicationConfig,
    workbook: Workbook,
    used_worksheet_names: set[str],
    repository: ModelRepository,
    verbose: bool = False,
) -> list[ExportRow]:
    """Extract one application into its own worksheet.

    The worksheet is created once the model snapshot is available. Rows
    written before a failure stay in the worksheet.

    Args:
        app_name: Display name of the application (basis of the sheet name)
        app: App id and branch to extract
        workbook: Shared output workbook
        used_worksheet_names: Worksheet names already allocated in this run
        repository: Source of model snapshots
        verbose: Also report every entity and attribute found

    Returns:
        The rows written to the worksheet

    Raises:
        ExtractionError: If the snapshot cannot be created or read
    """
    print(
        f"\nTargeting App: {app_name} (ID: {app.app_id}), Branch: {app.branch}",
        file=sys.stderr,
    )

    try:
        return _extract(app_name, app, workbook, used_worksheet_names, repository, verbose)
    except Exception as e:
        raise ExtractionError(app_name, app, e) from e


def _extract(
    app_name: str,
    app: ApplicationConfig,
    workbook: Workbook,
    used_worksheet_names: set[str],
    repository: ModelRepository,
    verbose: bool,
) -> list[ExportRow]:
    print(
        "Creating a temporary snapshot of the model. This may take a few moments...",
        file=sys.stderr,
    )
    snapshot = repository.create_snapshot(app)

    print(f"Opening the model from {repository.describe()}...", file=sys.stderr)
    modules = snapshot.list_modules()

    worksheet_name = generate_unique_worksheet_name(app_name, used_worksheet_names)
    worksheet = add_export_worksheet(workbook, worksheet_name)

    rows: list[ExportRow] = []

    for module in modules:
        print(f"\nProcessing Module: {module.name}", file=sys.stderr)
        domain_model = snapshot.load_domain_model(module)

        for entity in domain_model.entities:
            if not is_non_persistable_entity(entity):
                continue
            if verbose:
                print(f"-- Found Entity: {entity.name}", file=sys.stderr)

            for attribute in entity.attributes:
                attribute_type = classify_attribute_type(attribute.type)
                if verbose:
                    detail = attribute_type
                    if attribute_type == UNKNOWN_TYPE_LABEL and attribute.type_tag:
                        detail = f"{attribute_type}, declared {attribute.type_tag}"
                    print(
                        f"---- Found Attribute: {attribute.name} (Type: {detail})",
                        file=sys.stderr,
                    )

                row = ExportRow(
                    module_name=module.name,
                    entity_name=entity.name,
                    attribute_name=attribute.name,
                    attribute_type=attribute_type,
                )
                append_export_row(worksheet, row)
                rows.append(row)

    print(
        f"\nExtraction complete for {app_name}: {len(rows)} attributes "
        f"in worksheet '{worksheet_name}'.",
        file=sys.stderr,
    )
    return rows
