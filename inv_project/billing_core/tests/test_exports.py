import io
from datetime import datetime, timezone as dt_timezone

from django.test import TestCase
from openpyxl import load_workbook

from ..services import ledger
from ..services.exports import SHEET_NAMES, company_workbook_bytes, workbook_filename
from .helpers import make_cart, make_company, make_user

NOW = datetime(2026, 2, 19, 10, 15, 30, tzinfo=dt_timezone.utc)


class CompanyWorkbookTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.company = make_company(self.user, name="Raj Builders & Developers", pending="100")

    def open(self):
        filename, content = company_workbook_bytes(self.company, NOW)
        return filename, load_workbook(io.BytesIO(content))

    def test_filename_is_sanitised(self):
        self.assertEqual(workbook_filename(self.company), "Raj_Builders___Developers_Report.xlsx")

    def test_empty_company_has_placeholders(self):
        filename, wb = self.open()
        self.assertEqual(tuple(wb.sheetnames), SHEET_NAMES)
        self.assertEqual(wb["Invoices"]["A1"].value, "No invoices found")
        self.assertEqual(wb["Item Details"]["A1"].value, "No items found")
        self.assertEqual(wb["Payment History"]["A1"].value, "No payments recorded")
        info = {row[0]: row[1] for row in wb["Company Info"].iter_rows(min_row=3, values_only=True)}
        self.assertEqual(info["Company Name"], "Raj Builders & Developers")
        self.assertEqual(info["GST No."], "N/A")
        self.assertEqual(info["Pending Amount"], "Rs. 100.00")
        self.assertEqual(info["Report Generated"], "19 Feb 2026, 03:45:30 pm")

    def test_rows_for_invoices_lines_and_payments(self):
        created = ledger.create_invoice(
            self.user, make_cart(self.company, ("Sand", "100", "2"), ("Bolts", "5", "3")))
        ledger.record_payment(self.user, self.company.pk, "50", note="cash")
        _, wb = self.open()

        invoices = list(wb["Invoices"].values)
        self.assertEqual(invoices[0][0], "Invoice No.")
        self.assertEqual(invoices[1][0], created.invoice.invoice_number)
        self.assertEqual(invoices[1][2], 215.0)
        self.assertEqual(invoices[1][6], 2)

        items = list(wb["Item Details"].values)
        self.assertEqual([row[2] for row in items[1:]], ["Sand", "Bolts"])

        payments = list(wb["Payment History"].values)
        self.assertEqual(payments[1][1:], (50.0, 315.0, 265.0, "cash"))
