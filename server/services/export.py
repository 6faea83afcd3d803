"""Admin export — the full submission history as CSV or XLSX."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Font

from server.models.submission import EXPORT_COLUMNS, Submission

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_BASENAME = "wall-submissions"

# Column widths in the spreadsheet, in EXPORT_COLUMNS order
_XLSX_WIDTHS = {
    "id": 36,
    "name": 22,
    "region": 18,
    "question": 50,
    "tile_index": 10,
    "image_url": 60,
    "created_at": 24,
}
_COLUMN_LETTERS = "ABCDEFG"


def _csv_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_csv(submissions: Iterable[Submission]) -> str:
    """
    Render history as CSV. Every field is double-quoted; embedded quotes are doubled.

    Args:
        submissions: Rows ordered by created_at ASC

    Returns:
        CSV text with a header row
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for submission in submissions:
        row = submission.export_row()
        writer.writerow([_csv_value(row[col]) for col in EXPORT_COLUMNS])
    return buf.getvalue()


def to_xlsx(submissions: Iterable[Submission]) -> bytes:
    """
    Render history as a one-sheet workbook with a bold header row.

    Args:
        submissions: Rows ordered by created_at ASC

    Returns:
        XLSX file bytes
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Submissions"

    ws.append(list(EXPORT_COLUMNS))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for letter, col in zip(_COLUMN_LETTERS, EXPORT_COLUMNS, strict=True):
        ws.column_dimensions[letter].width = _XLSX_WIDTHS[col]

    for submission in submissions:
        row = submission.export_row()
        values = []
        for col in EXPORT_COLUMNS:
            value = row[col]
            if col == "id":
                value = str(value)
            elif isinstance(value, datetime) and value.tzinfo is not None:
                # Excel has no timezone-aware datetimes
                value = value.replace(tzinfo=None)
            values.append(value)
        ws.append(values)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def attachment_header(extension: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{EXPORT_BASENAME}.{extension}"'}
