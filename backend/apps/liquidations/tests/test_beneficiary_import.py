import io
from datetime import datetime

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase
from openpyxl import Workbook, load_workbook

from core.exceptions import ValidationError
from apps.liquidations.beneficiary_import import (
    BENEFICIARY_COLUMNS,
    MAX_UPLOAD_BYTES,
    beneficiary_template,
    read_beneficiary_rows,
)

HEADERS = [header for _, header in BENEFICIARY_COLUMNS]


def _xlsx(rows):
    wb = Workbook()
    ws = wb.active
    ws.append(HEADERS)
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class ReadBeneficiaryRowsTests(SimpleTestCase):
    def test_reads_csv(self):
        content = (
            ",".join(HEADERS)
            + "\n2024-0001,Santos,Maria,,,TES-1,2024-09-15,\"20,000.00\",\n"
        ).encode("utf-8-sig")
        rows = read_beneficiary_rows(SimpleUploadedFile("list.csv", content))

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["student_no"], "2024-0001")
        self.assertEqual(rows[0]["amount"], "20,000.00")
        self.assertEqual(rows[0]["middle_name"], "")

    def test_reads_short_csv_rows(self):
        content = b"h1,h2,h3\n2024-0002,Reyes,Jose\n"
        rows = read_beneficiary_rows(SimpleUploadedFile("list.CSV", content))
        self.assertEqual(rows[0]["first_name"], "Jose")
        self.assertEqual(rows[0]["remarks"], "")

    def test_reads_latin1_csv(self):
        content = "h\n2024-0003,Peña,Ana\n".encode("latin-1")
        rows = read_beneficiary_rows(SimpleUploadedFile("list.csv", content))
        self.assertEqual(rows[0]["last_name"], "Peña")

    def test_reads_xlsx(self):
        content = _xlsx(
            [["2024-0001", "Santos", "Maria", None, None, "TES-1", datetime(2024, 9, 15), 20000, None]]
        )
        rows = read_beneficiary_rows(SimpleUploadedFile("list.xlsx", content))

        self.assertEqual(rows[0]["date_disbursed"], "2024-09-15")
        self.assertEqual(rows[0]["amount"], "20000")
        self.assertEqual(rows[0]["middle_name"], "")

    def test_corrupt_xlsx(self):
        with self.assertRaises(ValidationError):
            read_beneficiary_rows(SimpleUploadedFile("list.xlsx", b"not a zip"))

    def test_unsupported_extension(self):
        with self.assertRaises(ValidationError):
            read_beneficiary_rows(SimpleUploadedFile("list.pdf", b"%PDF"))

    def test_oversized_upload(self):
        upload = SimpleUploadedFile("list.csv", b"x" * (MAX_UPLOAD_BYTES + 1))
        with self.assertRaises(ValidationError):
            read_beneficiary_rows(upload)


class BeneficiaryTemplateTests(SimpleTestCase):
    def test_template_has_headers(self):
        content, filename = beneficiary_template()
        self.assertEqual(filename, "beneficiary_import_template.xlsx")

        ws = load_workbook(io.BytesIO(content)).active
        self.assertEqual(ws.title, "Beneficiaries")
        self.assertEqual([cell.value for cell in ws[1]], HEADERS)
        self.assertEqual(ws.max_row, 1)
