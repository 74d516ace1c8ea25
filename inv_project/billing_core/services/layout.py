"""
Invoice document layout.

Two pure steps:
    normalize_document()  loosely-typed input -> InvoiceDocument (never raises)
    build_layout()        InvoiceDocument -> ordered list of Sections

The PDF renderer (services.pdf) only draws what build_layout returns.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional
from zoneinfo import ZoneInfo

from django.conf import settings
from django.db.models import QuerySet
from django.utils import timezone

from .money import ZERO, InvoiceTotals, current_balance, line_total, q2, to_amount, to_decimal

logger = logging.getLogger(__name__)

NBSP = "\u00a0"

# Sl No / Description / Quantity / No of boxes / No of item / Rate / Amount
COLUMN_WIDTHS = (6, 33, 10, 10, 10, 12, 19)
TABLE_HEADER = (
    "Sl No.",
    "Description of Goods",
    "Quantity",
    "No of boxes",
    "No of item\n(per box)",
    "Rate\n(per item)",
    "Amount",
)

DECLARATION = (
    "We declare that this invoice shows the actual price of the goods "
    "described and that all particulars are true and correct."
)
FOOTER_NOTE = "This is a Computer Generated Invoice"
DEFAULT_MODE_OF_PAYMENT = "Cash/Bank"


# ----------------------------
# Number formatting
# ----------------------------
_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _two_digits(num):
    if num < 20:
        return _ONES[num]
    tens, ones = divmod(num, 10)
    return _TENS[tens] + (f" {_ONES[ones]}" if ones else "")


def _three_digits(num):
    hundreds, rest = divmod(num, 100)
    parts = []
    if hundreds:
        parts.append(f"{_ONES[hundreds]} Hundred")
    if rest:
        parts.append(_two_digits(rest))
    return " ".join(parts)


def _indian_words(num):
    # num > 0
    parts = []
    crore, num = divmod(num, 10_000_000)
    if crore:
        # counts above 999 crore recurse ("One Thousand Crore")
        parts.append(f"{_indian_words(crore) if crore > 999 else _three_digits(crore)} Crore")
    lakh, num = divmod(num, 100_000)
    if lakh:
        parts.append(f"{_two_digits(lakh)} Lakh")
    thousand, num = divmod(num, 1000)
    if thousand:
        parts.append(f"{_two_digits(thousand)} Thousand")
    if num:
        parts.append(_three_digits(num))
    return " ".join(parts)


def amount_in_words(amount) -> str:
    """Whole rupees in words with Indian grouping.

    Paise are rounded half-up into the rupee value. 0 gives "Zero",
    100000 gives "One Lakh", 10000000 gives "One Crore".
    """
    whole = int(to_decimal(amount).to_integral_value(rounding=ROUND_HALF_UP))
    if whole <= 0:
        if whole < 0:
            logger.debug("amount_in_words: negative amount %s shown as zero", amount)
        return "Zero"
    return _indian_words(whole)


def amount_in_words_phrase(amount) -> str:
    return f"INR {amount_in_words(amount)} Only"


def format_inr(amount) -> str:
    """2 decimals with Indian digit grouping, e.g. 12,34,567.89"""
    value = q2(amount)
    sign = "-" if value < 0 else ""
    whole, _, paise = f"{abs(value):.2f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{paise}"


def rupees(amount) -> str:
    return f"Rs. {format_inr(amount)}"


def format_quantity(value) -> str:
    value = to_decimal(value)
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value.normalize():f}"


def format_ist(value) -> str:
    """Date/time in the display zone, e.g. "19 Feb 2026, 03:45:30 pm"."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        zone = ZoneInfo(settings.BILLING["DISPLAY_TIME_ZONE"])
        if timezone.is_naive(value):
            value = timezone.make_aware(value, dt_timezone.utc)
        local = value.astimezone(zone)
        return local.strftime("%d %b %Y, %I:%M:%S ") + local.strftime("%p").lower()
    if isinstance(value, date):
        return value.strftime("%d %b %Y")
    return str(value)


def invoice_filename(invoice_number) -> str:
    return f"Invoice_{(invoice_number or '').replace('/', '_')}.pdf"


# ----------------------------
# Normalized document
# ----------------------------
@dataclass
class Party:
    name: str = ""
    address_lines: List[str] = field(default_factory=list)
    gst_no: str = ""
    pan: str = ""
    state: str = ""
    state_code: str = ""
    place_of_supply: str = ""
    contact: List[str] = field(default_factory=list)
    email: str = ""
    website: str = ""


@dataclass
class InvoiceMeta:
    invoice_no: str = ""
    invoice_date: str = ""
    delivery_note: str = ""
    mode_of_payment: str = ""
    reference_no: str = ""
    other_references: str = ""
    buyer_order_no: str = ""
    buyer_order_date: str = ""
    dispatch_doc_no: str = ""
    delivery_note_date: str = ""
    dispatched_through: str = ""
    destination: str = ""
    bill_of_lading_no: str = ""
    motor_vehicle_no: str = ""
    terms_of_delivery: str = ""


@dataclass
class BankInfo:
    account_holder_name: str = ""
    bank_name: str = ""
    account_no: str = ""
    branch_and_ifsc: str = ""
    swift_code: str = ""


@dataclass
class DocumentLine:
    sl_no: int
    description: str = ""
    hsn: str = ""
    unit: str = ""
    quantity: Decimal = ZERO
    rate: Decimal = ZERO
    amount: Decimal = ZERO  # unrounded line total
    boxes: Optional[int] = None
    items_per_box: Optional[int] = None

    @property
    def has_boxes(self):
        return bool(self.boxes and self.items_per_box and self.boxes > 0 and self.items_per_box > 0)


@dataclass
class InvoiceDocument:
    seller: Party
    buyer: Party
    meta: InvoiceMeta
    bank: BankInfo
    lines: List[DocumentLine]
    previous_balance: Decimal = ZERO
    tax_amount: Decimal = ZERO
    title: str = ""


def _get(source, *keys, default=""):
    """First present, non-None value among keys on a dict or object."""
    if source is None:
        return default
    for key in keys:
        if isinstance(source, dict):
            value = source.get(key)
        else:
            value = getattr(source, key, None)
        if value is not None:
            return value
    return default


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return format_ist(value)
    return str(value).strip()


def _lines_of(value) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [_text(v) for v in value if _text(v)]
    return [line.strip() for line in str(value).splitlines() if line.strip()]


def _rows_of(value) -> list:
    if isinstance(value, (list, tuple, QuerySet)):
        return list(value)
    return []


def _positive_int(value):
    number = to_amount(value)
    return int(number) if number > 0 else None


def _normalize_party(source, fallback_name="") -> Party:
    state = _text(_get(source, "state"))
    return Party(
        name=_text(_get(source, "name")) or fallback_name,
        address_lines=_lines_of(_get(source, "address_lines", "address")),
        gst_no=_text(_get(source, "gst_no", "gstin")),
        pan=_text(_get(source, "pan")),
        state=state,
        state_code=_text(_get(source, "state_code", "stateCode")),
        place_of_supply=_text(_get(source, "place_of_supply", "placeOfSupply")) or state,
        contact=_lines_of(_get(source, "contact", "phone")),
        email=_text(_get(source, "email")),
        website=_text(_get(source, "website")),
    )


def _normalize_meta(source) -> InvoiceMeta:
    meta = InvoiceMeta()
    for name in InvoiceMeta.__dataclass_fields__:
        setattr(meta, name, _text(_get(source, name)))
    return meta


def _normalize_bank(source) -> BankInfo:
    branch_and_ifsc = _text(_get(source, "branch_and_ifsc"))
    if not branch_and_ifsc:
        branch = _text(_get(source, "branch"))
        ifsc = _text(_get(source, "ifsc_code", "ifsc"))
        branch_and_ifsc = ", ".join(p for p in [branch, ifsc] if p)
    return BankInfo(
        account_holder_name=_text(_get(source, "account_holder_name", "account_name")),
        bank_name=_text(_get(source, "bank_name")),
        account_no=_text(_get(source, "account_no", "account_number")),
        branch_and_ifsc=branch_and_ifsc,
        swift_code=_text(_get(source, "swift_code")),
    )


def _normalize_line(source, sl_no) -> DocumentLine:
    rate = to_amount(_get(source, "rate", "unit_price", default=None))
    quantity = to_amount(_get(source, "quantity", default=None))
    discount = to_amount(_get(source, "discount", default=None))
    amount = _get(source, "amount", "line_total", default=None)
    amount = to_amount(amount) if amount is not None else line_total(rate, quantity, discount)
    boxes = _positive_int(_get(source, "boxes", default=None))
    items_per_box = _positive_int(_get(source, "items_per_box", "itemsPerBox", default=None))
    return DocumentLine(
        sl_no=sl_no,
        description=_text(_get(source, "description", "item_name", "name")),
        hsn=_text(_get(source, "hsn", "item_hsn")),
        unit=_text(_get(source, "unit", "item_unit")),
        quantity=quantity,
        rate=rate,
        amount=amount,
        boxes=boxes,
        items_per_box=items_per_box,
    )


def normalize_document(*, seller=None, buyer=None, meta=None, bank=None,
                       lines=None, previous_balance=None, tax_amount=None,
                       title=None) -> InvoiceDocument:
    """Turn dicts / model instances / None into a complete InvoiceDocument.

    Every missing field becomes "" or 0, and so does an amount too large
    to be money. Never raises.
    """
    rows = _rows_of(lines)
    document = InvoiceDocument(
        seller=_normalize_party(seller),
        buyer=_normalize_party(buyer),
        meta=_normalize_meta(meta),
        bank=_normalize_bank(bank),
        lines=[_normalize_line(row, idx) for idx, row in enumerate(rows, start=1)],
        previous_balance=q2(to_amount(previous_balance)),
        tax_amount=q2(to_amount(tax_amount)),
        title=_text(title) or settings.BILLING["DOCUMENT_TITLE"],
    )
    if not document.meta.mode_of_payment:
        document.meta.mode_of_payment = DEFAULT_MODE_OF_PAYMENT
    if not rows:
        logger.debug("normalize_document: no line items for %r", document.meta.invoice_no)
    return document


# ----------------------------
# Layout
# ----------------------------
@dataclass
class Section:
    kind: str
    rows: list = field(default_factory=list)
    title: str = ""
    bold: bool = False
    widths: tuple = ()


@dataclass
class InvoiceLayout:
    sections: List[Section]
    totals: InvoiceTotals
    current_balance: Decimal
    filename: str

    def section(self, kind) -> Section:
        return next(s for s in self.sections if s.kind == kind)

    @property
    def kinds(self):
        return [s.kind for s in self.sections]


def _blank(value) -> str:
    # keep every cell, even when empty, so columns stay aligned
    return value if value not in (None, "") else NBSP


def document_totals(document: InvoiceDocument) -> InvoiceTotals:
    subtotal = sum((line.amount for line in document.lines), ZERO)
    round_off = q2(subtotal) - subtotal
    tax = document.tax_amount
    return InvoiceTotals(
        subtotal=subtotal,
        round_off=round_off,
        tax=tax,
        grand_total=q2(subtotal + round_off + tax),
    )


def _seller_rows(seller: Party):
    rows = [("", seller.name)]
    rows += [("", line) for line in seller.address_lines]
    if seller.gst_no:
        rows.append(("GSTIN/UIN: ", seller.gst_no))
    if seller.state:
        rows.append(("State Name : ", f"{seller.state}, Code : {seller.state_code}"))
    if seller.contact:
        rows.append(("Contact : ", ",".join(seller.contact)))
    if seller.email:
        rows.append(("E-Mail : ", seller.email))
    if seller.website:
        rows.append(("", seller.website))
    return rows


def _buyer_rows(buyer: Party):
    rows = [("", buyer.name)]
    rows += [("", line) for line in buyer.address_lines]
    if buyer.gst_no:
        rows.append(("GSTIN/UIN: ", buyer.gst_no))
    if buyer.pan:
        rows.append(("PAN: ", buyer.pan))
    if buyer.state:
        rows.append(("State: ", f"{buyer.state}, Code: {buyer.state_code}"))
    if buyer.place_of_supply:
        rows.append(("Place of Supply: ", buyer.place_of_supply))
    if buyer.contact:
        rows.append(("Contact: ", ",".join(buyer.contact)))
    if buyer.email:
        rows.append(("Email: ", buyer.email))
    return rows


def _meta_rows(meta: InvoiceMeta):
    pairs = [
        ("Invoice No.", meta.invoice_no, "Dated", meta.invoice_date),
        ("Delivery Note", meta.delivery_note, "Mode/Terms of Payment", meta.mode_of_payment),
        ("Reference No. & Date", meta.reference_no, "Other References", meta.other_references),
        ("Buyer's Order No.", meta.buyer_order_no, "Dated", meta.buyer_order_date),
        ("Dispatch Doc No.", meta.dispatch_doc_no, "Delivery Note Date", meta.delivery_note_date),
        ("Dispatched through", meta.dispatched_through, "Destination", meta.destination),
        ("Bill of Lading/LR-RR No.", meta.bill_of_lading_no, "Motor Vehicle No.", meta.motor_vehicle_no),
        ("Terms of Delivery", meta.terms_of_delivery, "", ""),
    ]
    return [[_blank(cell) for cell in row] for row in pairs]


def _item_rows(lines: List[DocumentLine]):
    rows = []
    for line in lines:
        description = line.description or "—"
        if line.has_boxes:
            description = f"{description}\n{line.items_per_box}NOS X {line.boxes} BOX"
        rows.append([
            str(line.sl_no),
            description,
            _blank(format_quantity(line.quantity) if line.quantity else ""),
            _blank(str(line.boxes) if line.has_boxes else ""),
            _blank(str(line.items_per_box) if line.has_boxes else ""),
            f"{q2(line.rate):.2f}",
            rupees(line.amount),
        ])
    return rows


def build_layout(document: InvoiceDocument) -> InvoiceLayout:
    """Ordered sections of the A4 invoice. Pure, no I/O."""
    totals = document_totals(document)
    balance = current_balance(document.previous_balance, totals.grand_total)

    quantity_sum = sum((line.quantity for line in document.lines), ZERO)
    boxes_sum = sum(line.boxes for line in document.lines if line.has_boxes)

    sections = [
        Section("title", rows=[[document.title]], bold=True),
        Section("seller", rows=_seller_rows(document.seller)),
        Section("meta", rows=_meta_rows(document.meta)),
        Section("buyer", rows=_buyer_rows(document.buyer), title="Buyer (Bill to)"),
        Section("items", rows=[list(TABLE_HEADER)] + _item_rows(document.lines),
                widths=COLUMN_WIDTHS),
        Section("subtotal", rows=[[
            NBSP,
            "Total",
            _blank(format_quantity(quantity_sum) if quantity_sum else ""),
            _blank(str(boxes_sum) if boxes_sum else ""),
            NBSP,
            "Subtotal",
            rupees(totals.subtotal),
        ]], widths=COLUMN_WIDTHS),
        Section("round_off", rows=[["Round Off", rupees(totals.round_off)]]),
    ]
    if totals.tax:
        sections.append(Section("tax", rows=[["Tax", rupees(totals.tax)]]))
    sections += [
        Section("grand_total", rows=[["Grand Total", rupees(totals.grand_total)]], bold=True),
        Section("amount_in_words", title="Amount Chargeable (in words)",
                rows=[[amount_in_words_phrase(totals.grand_total)], ["E. & O.E"]]),
    ]

    balance_rows = []
    if document.previous_balance:
        balance_rows.append(["Previous Balance:", f"{rupees(document.previous_balance)} Dr"])
    balance_rows.append(["Current Balance:", f"{rupees(balance)} Dr"])
    sections.append(Section("balances", rows=balance_rows))

    sections.append(Section("declaration", title="Declaration", rows=[[DECLARATION]]))

    bank = document.bank
    bank_rows = [
        ["A/c Holder's Name: ", bank.account_holder_name],
        ["Bank Name: ", bank.bank_name],
        ["A/c No.: ", bank.account_no],
        ["Branch & IFSC: ", bank.branch_and_ifsc],
    ]
    if bank.swift_code:
        bank_rows.append(["SWIFT Code: ", bank.swift_code])
    sections.append(Section("bank", title="Company's Bank Details", rows=bank_rows))
    sections.append(Section("signature", rows=[[f"for {document.seller.name}"], ["Authorised Signatory"]]))
    sections.append(Section("footer", rows=[[FOOTER_NOTE]]))

    return InvoiceLayout(
        sections=sections,
        totals=totals,
        current_balance=balance,
        filename=invoice_filename(document.meta.invoice_no),
    )
