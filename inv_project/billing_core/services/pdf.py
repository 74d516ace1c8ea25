import io
import logging
from xml.sax.saxutils import escape

from django.conf import settings
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..models import BankDetails, SellerInfo
from .layout import (
    DEFAULT_MODE_OF_PAYMENT,
    build_layout,
    format_ist,
    normalize_document,
)

logger = logging.getLogger(__name__)

FONT_NORMAL = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
MARGIN = 10 * mm
CONTENT_WIDTH = A4[0] - 2 * MARGIN
BORDER = 0.75


def _styles():
    base = getSampleStyleSheet()
    normal = ParagraphStyle("inv_normal", parent=base["Normal"], fontName=FONT_NORMAL,
                            fontSize=8, leading=10)
    return {
        "normal": normal,
        "bold": ParagraphStyle("inv_bold", parent=normal, fontName=FONT_BOLD),
        "right": ParagraphStyle("inv_right", parent=normal, alignment=TA_RIGHT),
        "bold_right": ParagraphStyle("inv_bold_right", parent=normal, fontName=FONT_BOLD,
                                     alignment=TA_RIGHT),
        "center": ParagraphStyle("inv_center", parent=normal, alignment=TA_CENTER),
        "title": ParagraphStyle("inv_title", parent=normal, fontName=FONT_BOLD, fontSize=14,
                                leading=18, alignment=TA_CENTER),
        "seller": ParagraphStyle("inv_seller", parent=normal, fontName=FONT_BOLD, fontSize=11,
                                 leading=14),
        "footer": ParagraphStyle("inv_footer", parent=normal, fontName="Helvetica-Oblique",
                                 alignment=TA_CENTER),
    }


def _p(text, style):
    # escape first, then keep the layout's line breaks
    return Paragraph(escape(str(text)).replace("\n", "<br/>"), style)


def _labelled(label, value, style):
    if not label:
        return _p(value, style)
    return Paragraph(f"<b>{escape(label)}</b>{escape(str(value))}", style)


def _widths(percentages, total=CONTENT_WIDTH):
    return [total * pct / 100 for pct in percentages]


def _boxed(table, *extra):
    table.setStyle(TableStyle([
        ("BOX", (0, 0), (-1, -1), BORDER, colors.black),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        *extra,
    ]))
    return table


def render_invoice_pdf(layout) -> bytes:
    """Draw an InvoiceLayout on A4 and return the PDF bytes."""
    st = _styles()
    sec = {s.kind: s for s in layout.sections}
    story = []

    # Title bar
    story.append(_boxed(
        Table([[_p(sec["title"].rows[0][0], st["title"])]], colWidths=[CONTENT_WIDTH]),
        ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#EFEFEF")),
    ))

    # Seller + buyer on the left, meta grid on the right
    seller_rows = sec["seller"].rows
    left = [_p(seller_rows[0][1], st["seller"])]
    left += [_labelled(label, value, st["normal"]) for label, value in seller_rows[1:]]
    left.append(Spacer(1, 3 * mm))
    left.append(_p(sec["buyer"].title, st["bold"]))
    buyer_rows = sec["buyer"].rows
    left.append(_p(buyer_rows[0][1], st["bold"]))
    left += [_labelled(label, value, st["normal"]) for label, value in buyer_rows[1:]]

    half = CONTENT_WIDTH / 2
    meta_data = [
        [[_p(l_label, st["normal"]), _p(l_value, st["bold"])],
         [_p(r_label, st["normal"]), _p(r_value, st["bold"])]]
        for l_label, l_value, r_label, r_value in sec["meta"].rows
    ]
    meta_table = Table(meta_data, colWidths=[half / 2, half / 2])
    meta_table.setStyle(TableStyle([
        ("INNERGRID", (0, 0), (-1, -1), BORDER / 2, colors.black),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.append(_boxed(
        Table([[left, meta_table]], colWidths=[half, half]),
        ("LINEAFTER", (0, 0), (0, -1), BORDER, colors.black),
        ("LEFTPADDING", (1, 0), (1, 0), 0),
        ("RIGHTPADDING", (1, 0), (1, 0), 0),
        ("TOPPADDING", (1, 0), (1, 0), 0),
        ("BOTTOMPADDING", (1, 0), (1, 0), 0),
    ))

    # Line items + subtotal row
    items = sec["items"]
    widths = _widths(items.widths)
    header = [_p(cell, st["bold"] if i == 1 else ParagraphStyle(
        "inv_head", parent=st["bold"], alignment=TA_CENTER)) for i, cell in enumerate(items.rows[0])]
    body = []
    for row in items.rows[1:]:
        body.append([
            _p(row[0], st["center"]),
            _p(row[1], st["normal"]),
            _p(row[2], st["center"]),
            _p(row[3], st["center"]),
            _p(row[4], st["center"]),
            _p(row[5], st["right"]),
            _p(row[6], st["right"]),
        ])
    sub = sec["subtotal"].rows[0]
    subtotal_row = [
        _p(sub[0], st["normal"]),
        _p(sub[1], st["bold_right"]),
        _p(sub[2], ParagraphStyle("inv_bold_center", parent=st["bold"], alignment=TA_CENTER)),
        _p(sub[3], ParagraphStyle("inv_bold_center2", parent=st["bold"], alignment=TA_CENTER)),
        _p(sub[4], st["normal"]),
        _p(sub[5], st["bold_right"]),
        _p(sub[6], st["bold_right"]),
    ]
    story.append(_boxed(
        Table([header] + body + [subtotal_row], colWidths=widths, repeatRows=1),
        ("INNERGRID", (0, 0), (-1, -1), BORDER / 2, colors.black),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EFEFEF")),
        ("LINEABOVE", (0, -1), (-1, -1), BORDER, colors.black),
    ))

    # Round off / tax / grand total, value column aligned with Amount
    amount_col = widths[-1]
    summary_rows, bold_rows = [], []
    for kind in ("round_off", "tax", "grand_total"):
        if kind not in sec:
            continue
        label, value = sec[kind].rows[0]
        style_l, style_r = (st["bold_right"], st["bold_right"]) if sec[kind].bold else (st["right"], st["right"])
        if sec[kind].bold:
            bold_rows.append(len(summary_rows))
        summary_rows.append([_p(label, style_l), _p(value, style_r)])
    summary = Table(summary_rows, colWidths=[CONTENT_WIDTH - amount_col, amount_col])
    story.append(_boxed(
        summary,
        ("INNERGRID", (0, 0), (-1, -1), BORDER / 2, colors.black),
        *[("BACKGROUND", (0, r), (-1, r), colors.HexColor("#EFEFEF")) for r in bold_rows],
    ))

    # Amount in words | balances
    words = sec["amount_in_words"]
    words_cell = [_p(words.title, st["normal"]), _p(words.rows[0][0], st["bold"]),
                  _p(words.rows[1][0], st["right"])]
    balance_cell = Table(
        [[_p(label, st["bold"]), _p(value, st["bold_right"])] for label, value in sec["balances"].rows],
        colWidths=[CONTENT_WIDTH * 0.2, CONTENT_WIDTH * 0.2],
    )
    story.append(_boxed(
        Table([[words_cell, balance_cell]], colWidths=_widths((60, 40))),
        ("LINEAFTER", (0, 0), (0, -1), BORDER, colors.black),
    ))

    # Declaration | bank details + signature
    declaration = sec["declaration"]
    declaration_cell = [_p(declaration.title, st["bold"]), _p(declaration.rows[0][0], st["normal"])]
    bank = sec["bank"]
    bank_cell = [_p(bank.title, st["bold"])]
    bank_cell += [_labelled(label, value, st["normal"]) for label, value in bank.rows]
    bank_cell.append(Spacer(1, 6 * mm))
    signature = sec["signature"].rows
    bank_cell.append(_p(signature[0][0], st["bold_right"]))
    bank_cell.append(Spacer(1, 4 * mm))
    bank_cell.append(_p(signature[1][0], st["right"]))
    story.append(_boxed(
        Table([[declaration_cell, bank_cell]], colWidths=_widths((50, 50))),
        ("LINEAFTER", (0, 0), (0, -1), BORDER, colors.black),
    ))

    story.append(_boxed(
        Table([[_p(sec["footer"].rows[0][0], st["footer"])]], colWidths=[CONTENT_WIDTH]),
    ))

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=layout.filename,
    )
    doc.build(story)
    return buffer.getvalue()


# ----------------------------
# Persisted invoice -> document
# ----------------------------
def _seller_source(owner):
    info = SellerInfo.objects.filter(owner=owner).first()
    if info is None:
        logger.debug("no SellerInfo for owner %s, using BILLING defaults", owner.pk)
        return settings.BILLING["DEFAULT_SELLER"]
    return {
        "name": info.name,
        "address_lines": [info.full_address()],
        "gst_no": info.gst_no,
        "state": info.state,
        "state_code": info.state_code,
        "contact": [info.phone] if info.phone else [],
        "email": info.email,
        "website": info.website,
    }


def _bank_source(owner):
    details = BankDetails.objects.filter(owner=owner).first()
    if details is None:
        logger.debug("no BankDetails for owner %s, using BILLING defaults", owner.pk)
        return settings.BILLING["DEFAULT_BANK"]
    return details


def build_invoice_document(invoice, previous_balance=None, options=None):
    """Assemble the printable document for a persisted invoice.

    previous_balance is the customer's pending amount before this invoice
    (the ledger returns it), 0 when re-printing from history.
    """
    company = invoice.company
    meta = {
        "invoice_no": invoice.invoice_number,
        "invoice_date": format_ist(invoice.created_at),
        "mode_of_payment": DEFAULT_MODE_OF_PAYMENT,
    }
    if options is not None:
        meta["motor_vehicle_no"] = getattr(options, "vehicle_no", "")
        meta["dispatched_through"] = (getattr(options, "transport_mode", "") or "").title()
    return normalize_document(
        seller=_seller_source(invoice.owner),
        buyer={
            "name": company.name,
            "address": company.address,
            "gst_no": company.gst_no,
            "state": company.state,
            "state_code": company.state_code,
            "contact": company.phone,
            "email": company.email,
        },
        meta=meta,
        bank=_bank_source(invoice.owner),
        lines=list(invoice.lines.all()),
        previous_balance=previous_balance,
        tax_amount=invoice.tax_amount,
    )


def invoice_pdf(invoice, previous_balance=None, options=None):
    """(filename, pdf bytes) for a persisted invoice."""
    layout = build_layout(build_invoice_document(invoice, previous_balance, options))
    return layout.filename, render_invoice_pdf(layout)
