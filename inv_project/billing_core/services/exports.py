import io
import re

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from ..models import CompanyPayment, Invoice
from .layout import format_ist, format_inr

SHEET_NAMES = ("Company Info", "Invoices", "Item Details", "Payment History")

INVOICE_COLUMNS = ("Invoice No.", "Date (IST)", "Total Amount", "Amount Received",
                   "Balance Due", "Status", "Items Count")
ITEM_COLUMNS = ("Date (IST)", "Invoice No.", "Item Name", "HSN", "Unit", "Quantity",
                "Unit Price", "Discount %", "Total Amount")
PAYMENT_COLUMNS = ("Date (IST)", "Amount Received", "Previous Balance", "New Balance", "Note")


def workbook_filename(company) -> str:
    safe = re.sub(r"[^a-zA-Z0-9]", "_", company.name or "")[:30]
    return f"{safe}_Report.xlsx"


def _set_widths(ws, widths):
    for idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def _table(ws, columns, rows, empty_label, widths):
    """Header row then data rows; a one-cell placeholder when empty."""
    if not rows:
        ws.append([empty_label])
        ws["A1"].font = Font(bold=True)
        _set_widths(ws, widths[:1])
        return
    ws.append(list(columns))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)
    _set_widths(ws, widths)


def build_company_workbook(company, now=None) -> Workbook:
    """Read-only report for one customer: info, invoices, lines, payments."""
    now = now or timezone.now()
    invoices = list(
        Invoice.objects.filter(company=company)
        .prefetch_related("lines")
        .order_by("created_at", "id")
    )
    payments = list(CompanyPayment.objects.filter(company=company).order_by("created_at", "id"))
    total_revenue = sum((inv.total_amount for inv in invoices), 0)

    wb = Workbook()
    info = wb.active
    info.title = SHEET_NAMES[0]
    info.append(["Company Report"])
    info["A1"].font = Font(bold=True, size=13)
    info.append([])
    for label, value in (
        ("Company Name", company.name),
        ("GST No.", company.gst_no or "N/A"),
        ("Address", company.address or "N/A"),
        ("State", company.state or "N/A"),
        ("State Code", company.state_code or "N/A"),
        ("Pending Amount", f"Rs. {format_inr(company.pending_amount)}"),
        ("Total Invoices", len(invoices)),
        ("Total Revenue", f"Rs. {format_inr(total_revenue)}"),
        ("Report Generated", format_ist(now)),
    ):
        info.append([label, value])
    _set_widths(info, (20, 40))

    _table(
        wb.create_sheet(SHEET_NAMES[1]),
        INVOICE_COLUMNS,
        [
            [
                inv.invoice_number,
                format_ist(inv.created_at),
                float(inv.total_amount),
                float(inv.amount_received),
                float(inv.balance_due),
                inv.status,
                len(inv.lines.all()),
            ]
            for inv in invoices
        ],
        "No invoices found",
        (16, 28, 14, 16, 12, 10, 12),
    )

    _table(
        wb.create_sheet(SHEET_NAMES[2]),
        ITEM_COLUMNS,
        [
            [
                format_ist(inv.created_at),
                inv.invoice_number,
                line.item_name or "Item",
                line.item_hsn or "",
                line.item_unit or "pcs",
                float(line.quantity),
                float(line.unit_price),
                float(line.discount),
                round(float(line.line_total), 2),
            ]
            for inv in invoices
            for line in inv.lines.all()
        ],
        "No items found",
        (28, 16, 24, 10, 8, 10, 12, 12, 14),
    )

    _table(
        wb.create_sheet(SHEET_NAMES[3]),
        PAYMENT_COLUMNS,
        [
            [
                format_ist(p.created_at),
                float(p.amount),
                float(p.previous_balance),
                float(p.new_balance),
                p.note or "",
            ]
            for p in payments
        ],
        "No payments recorded",
        (28, 16, 16, 14, 30),
    )
    return wb


def company_workbook_bytes(company, now=None):
    """(filename, xlsx bytes) for the download view."""
    buffer = io.BytesIO()
    build_company_workbook(company, now).save(buffer)
    return workbook_filename(company), buffer.getvalue()
