"""
Excel workbook output for the model export.

One worksheet per application, with a bold header row and a fixed column
layout. Worksheet names follow Excel's rules: at most 31 characters and none
of ``\\ / * [ ] : ?``.
"""

from __future__ import annotations

import re
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .models import ExportRow


MAX_WORKSHEET_NAME_LENGTH = 31
DEFAULT_WORKSHEET_NAME = "Sheet"
INVALID_WORKSHEET_CHARS = re.compile(r"[\\/*\[\]:?]")

# (header, width) in column order
EXPORT_COLUMNS = [
    ("moduleName", 30),
    ("entityName", 30),
    ("attributeName", 30),
    ("attributeType", 20),
]


def generate_unique_worksheet_name(app_name: str, used_names: set[str]) -> str:
    """Derive a valid, unused worksheet name from an application name.

    The chosen name is added to ``used_names``. Excel compares sheet names
    case-insensitively, so names differing only in case count as collisions.

    Args:
        app_name: Display name of the application
        used_names: Names already allocated in this workbook

    Returns:
        Worksheet name of at most 31 characters
    """
    sanitized = INVALID_WORKSHEET_CHARS.sub("_", app_name.strip())
    if not sanitized:
        sanitized = DEFAULT_WORKSHEET_NAME
    sanitized = sanitized[:MAX_WORKSHEET_NAME_LENGTH]

    taken = {name.casefold() for name in used_names}

    candidate = sanitized
    counter = 1
    while candidate.casefold() in taken:
        suffix = f"_{counter}"
        base_length = min(MAX_WORKSHEET_NAME_LENGTH - len(suffix), len(sanitized))
        candidate = f"{sanitized[:base_length]}{suffix}"
        counter += 1

    used_names.add(candidate)
    return candidate


def create_workbook() -> Workbook:
    """Create an empty workbook without openpyxl's default sheet."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    return workbook


def add_export_worksheet(workbook: Workbook, title: str) -> Worksheet:
    """Add a worksheet with the export header row.

    Raises:
        ValueError: If the title clashes with an existing sheet
    """
    if title.casefold() in {name.casefold() for name in workbook.sheetnames}:
        raise ValueError(f"Worksheet name already in use: {title}")

    worksheet = workbook.create_sheet(title=title)
    worksheet.append([header for header, _ in EXPORT_COLUMNS])

    bold = Font(bold=True)
    for cell in worksheet[1]:
        cell.font = bold

    for index, (_, width) in enumerate(EXPORT_COLUMNS, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width

    return worksheet


def append_export_row(worksheet: Worksheet, row: ExportRow) -> None:
    """Append one export row below the existing rows."""
    worksheet.append(list(row.as_tuple()))


def save_workbook(workbook: Workbook, output_path: Path | str) -> Path:
    """Write the workbook to disk.

    A workbook needs at least one sheet to be valid, so an empty placeholder
    sheet is added when no application produced one.

    Raises:
        OSError: If the file cannot be written
    """
    output_path = Path(output_path)
    if not workbook.worksheets:
        workbook.create_sheet(title=DEFAULT_WORKSHEET_NAME)
    workbook.save(output_path)
    return output_path
