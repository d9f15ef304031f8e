"""
Beneficiary spreadsheet I/O.

Reads uploaded .xlsx / .csv beneficiary lists into row dicts for
services.import_beneficiaries, and builds the blank .xlsx template.
"""

import csv
import io
from datetime import date, datetime

from core.exceptions import ValidationError

# (row key, header) in template column order
BENEFICIARY_COLUMNS = [
    ("student_no", "Student No."),
    ("last_name", "Last Name"),
    ("first_name", "First Name"),
    ("middle_name", "Middle Name"),
    ("extension_name", "Extension Name"),
    ("award_no", "Award No."),
    ("date_disbursed", "Date Disbursed (YYYY-MM-DD)"),
    ("amount", "Amount"),
    ("remarks", "Remarks"),
]

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def _cell(value):
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""
    return str(value).strip()


def _to_row(values):
    keys = [key for key, _ in BENEFICIARY_COLUMNS]
    cells = list(values)[: len(keys)]
    cells += [None] * (len(keys) - len(cells))
    return {key: _cell(value) for key, value in zip(keys, cells)}


def _read_xlsx(content):
    from openpyxl import load_workbook

    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:  # zip, xml and key errors from corrupt files
        raise ValidationError(f"Failed to read Excel file: {exc}")

    try:
        ws = wb.active
        return [_to_row(row) for row in ws.iter_rows(min_row=2, values_only=True)]
    finally:
        wb.close()


def _read_csv(content):
    try:
        text_content = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text_content = content.decode("latin-1")
    reader = csv.reader(io.StringIO(text_content))
    next(reader, None)  # header
    return [_to_row(row) for row in reader]


def read_beneficiary_rows(uploaded_file):
    """
    Parse an uploaded beneficiary list. The first row is a header; columns
    follow BENEFICIARY_COLUMNS order.

    Returns:
        list[dict]: One dict per data row, blank rows included
    """
    name = (getattr(uploaded_file, "name", "") or "").lower()
    ext = name.rsplit(".", 1)[-1] if "." in name else ""

    if getattr(uploaded_file, "size", 0) > MAX_UPLOAD_BYTES:
        raise ValidationError("The file size must not exceed 5MB.")

    content = uploaded_file.read()
    if ext in ("xlsx", "xlsm"):
        return _read_xlsx(content)
    if ext == "csv":
        return _read_csv(content)
    raise ValidationError("Please upload an Excel (.xlsx) or CSV file.")


def beneficiary_template():
    """
    Blank beneficiary import template.
    Returns (bytes, filename).
    """
    from openpyxl import Workbook
    from openpyxl.styles import Font, PatternFill, Border, Side
    from openpyxl.utils import get_column_letter

    wb = Workbook()
    ws = wb.active
    ws.title = "Beneficiaries"

    header_font = Font(bold=True)
    header_fill = PatternFill(
        start_color="DDDDDD", end_color="DDDDDD", fill_type="solid"
    )
    thin_border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )

    for col, (_, header) in enumerate(BENEFICIARY_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin_border
        ws.column_dimensions[get_column_letter(col)].width = max(14, len(header) + 2)

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer.read(), "beneficiary_import_template.xlsx"
