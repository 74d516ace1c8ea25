import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from decimal import ROUND_FLOOR, Decimal
from typing import Iterator, List, Optional

from django.conf import settings
from django.utils import timezone

from ..exceptions import LedgerValidationError, RecordNotFound
from .money import (ZERO, check_amount, discount_amount, line_amount, line_total, q2, to_decimal,
                    validate_line_inputs)

logger = logging.getLogger(__name__)

SESSION_KEY = "billing_cart"


def _whole(value) -> int:
    """floor(value) for anything numeric, 1 for anything else."""
    number = to_decimal(value)
    if number == 0:
        return 1
    return int(number.to_integral_value(rounding=ROUND_FLOOR))


def quantity_from_boxes(boxes, items_per_box):
    """Total pieces for a boxes × items-per-box entry.

    Both factors are floored and clamped at 1. Blank or non-numeric
    input counts as one box / one item.
    """
    boxes = max(1, _whole(boxes))
    items_per_box = max(1, _whole(items_per_box))
    return boxes, items_per_box, boxes * items_per_box


@dataclass
class CartLine:
    line_id: str
    item_id: Optional[int]
    name: str
    hsn: str = ""
    unit: str = ""
    rate: Decimal = ZERO
    tax_rate: Decimal = ZERO
    quantity: Decimal = Decimal("1")
    discount: Decimal = ZERO
    boxes: Optional[int] = None
    items_per_box: Optional[int] = None

    @property
    def amount(self):
        return line_amount(self.rate, self.quantity)

    @property
    def total(self):
        return line_total(self.rate, self.quantity, self.discount)

    def as_tuple(self):
        return (self.rate, self.quantity, self.discount, self.tax_rate)

    def to_dict(self):
        data = asdict(self)
        for key in ("rate", "tax_rate", "quantity", "discount"):
            data[key] = str(data[key])
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            line_id=data["line_id"],
            item_id=data.get("item_id"),
            name=data.get("name") or "",
            hsn=data.get("hsn") or "",
            unit=data.get("unit") or "",
            rate=to_decimal(data.get("rate")),
            tax_rate=to_decimal(data.get("tax_rate")),
            quantity=to_decimal(data.get("quantity"), Decimal("1")),
            discount=to_decimal(data.get("discount")),
            boxes=data.get("boxes"),
            items_per_box=data.get("items_per_box"),
        )


@dataclass
class InvoiceOptions:
    """Per-invoice extras chosen on the review step."""
    payment_terms: str = "30days"
    due_date: Optional[date] = None
    transport_mode: str = "road"
    vehicle_no: str = ""
    notes: str = ""

    @classmethod
    def default(cls, today=None):
        today = today or timezone.localdate()
        days = settings.BILLING["DEFAULT_DUE_DAYS"]
        return cls(due_date=today + timedelta(days=days))


@dataclass
class PricedLine:
    line: CartLine
    amount: Decimal
    discount_amount: Decimal
    total: Decimal


def price_lines(lines) -> Iterator[PricedLine]:
    """Yield each line with its amount, discount and (unrounded) total."""
    for line in lines:
        yield PricedLine(
            line=line,
            amount=line_amount(line.rate, line.quantity),
            discount_amount=discount_amount(line.rate, line.quantity, line.discount),
            total=line_total(line.rate, line.quantity, line.discount),
        )


@dataclass
class InvoiceCart:
    """Wizard state: chosen customer, lines and options.

    Lives in the user's session (see middleware.InvoiceCartMiddleware)
    and is handed to the ledger explicitly.
    """
    company_id: Optional[int] = None
    lines: List[CartLine] = field(default_factory=list)
    options: InvoiceOptions = field(default_factory=InvoiceOptions)
    editing_invoice_id: Optional[int] = None
    editing_invoice_number: Optional[str] = None

    # ---------- lines ----------
    def find_line(self, line_id) -> CartLine:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        raise RecordNotFound(f"Cart line {line_id} not found")

    def _find_item_line(self, item_id):
        if item_id is None:
            return None
        return next((line for line in self.lines if line.item_id == item_id), None)

    def add_item(self, *, item=None, name=None, hsn=None, unit=None, rate=None,
                 quantity=None, boxes=None, items_per_box=None, tax_rate=None,
                 discount=ZERO) -> CartLine:
        """Add an inventory item (or a free-text line) to the cart.

        Adding an item that is already in the cart increases its quantity
        and overwrites its rate with the new price. With boxes given the
        quantity is boxes × items_per_box.
        """
        item_id = item.pk if item is not None else None
        name = name if name is not None else getattr(item, "name", "")
        if not (name or "").strip():
            raise LedgerValidationError("Line item needs a name")

        price = max(ZERO, q2(check_amount(
            rate if rate is not None else getattr(item, "rate", ZERO), "Rate")))
        if boxes is not None or items_per_box is not None:
            boxes, items_per_box, qty = quantity_from_boxes(boxes, items_per_box)
            qty = Decimal(qty)
        else:
            qty = q2(to_decimal(quantity, Decimal("1")))
            if qty <= 0:
                raise LedgerValidationError("Quantity must be positive")

        existing = self._find_item_line(item_id)
        if existing is not None:
            merged = existing.quantity + qty
            validate_line_inputs(price, merged, existing.discount)
            existing.quantity = merged
            existing.rate = price
            logger.debug("cart: merged item %s, quantity now %s", item_id, existing.quantity)
            return existing

        discount = self._checked_discount(discount)
        validate_line_inputs(price, qty, discount)
        line = CartLine(
            line_id=uuid.uuid4().hex,
            item_id=item_id,
            name=name,
            hsn=hsn if hsn is not None else getattr(item, "hsn", ""),
            unit=unit if unit is not None else getattr(item, "unit", ""),
            rate=price,
            tax_rate=to_decimal(tax_rate if tax_rate is not None else getattr(item, "gst_rate", ZERO)),
            quantity=qty,
            discount=discount,
            boxes=boxes,
            items_per_box=items_per_box,
        )
        self.lines.append(line)
        return line

    def edit_line(self, line_id, *, boxes=None, items_per_box=None, rate=None,
                  quantity=None) -> CartLine:
        """Replace quantity, rate and the box breakdown of one line."""
        line = self.find_line(line_id)
        new_boxes, new_per_box, new_qty = line.boxes, line.items_per_box, line.quantity
        if boxes is not None or items_per_box is not None:
            # a missing factor keeps the value already on the line
            new_boxes, new_per_box, qty = quantity_from_boxes(
                boxes if boxes is not None else line.boxes,
                items_per_box if items_per_box is not None else line.items_per_box,
            )
            new_qty = Decimal(qty)
        elif quantity is not None:
            new_qty = q2(to_decimal(quantity, Decimal("1")))
            if new_qty <= 0:
                raise LedgerValidationError("Quantity must be positive")
            new_boxes = new_per_box = None
        new_rate = max(ZERO, q2(check_amount(rate, "Rate"))) if rate is not None else line.rate
        validate_line_inputs(new_rate, new_qty, line.discount)

        line.boxes, line.items_per_box = new_boxes, new_per_box
        line.quantity, line.rate = new_qty, new_rate
        return line

    def remove_line(self, line_id):
        line = self.find_line(line_id)
        self.lines.remove(line)
        return line

    def set_discount(self, line_id, percent) -> CartLine:
        line = self.find_line(line_id)
        line.discount = self._checked_discount(percent)
        return line

    @staticmethod
    def _checked_discount(percent):
        percent = q2(percent)
        if percent < 0 or percent > 100:
            raise LedgerValidationError("Discount must be between 0 and 100")
        return percent

    # ---------- customer / options ----------
    def set_company(self, company):
        self.company_id = company.pk if company is not None else None

    def set_options(self, **changes):
        for key, value in changes.items():
            if not hasattr(self.options, key):
                raise LedgerValidationError(f"Unknown invoice option {key!r}")
            setattr(self.options, key, value)

    def reset(self):
        self.company_id = None
        self.lines = []
        self.options = InvoiceOptions.default()
        self.editing_invoice_id = None
        self.editing_invoice_number = None

    @property
    def is_empty(self):
        return not self.lines

    # ---------- edit mode ----------
    def begin_editing(self, invoice):
        """Load a persisted invoice into the cart for editing.

        Lines keep their snapshot name/HSN/unit even when the inventory
        item they came from has since been deleted.
        """
        self.reset()
        self.company_id = invoice.company_id
        self.editing_invoice_id = invoice.pk
        self.editing_invoice_number = invoice.invoice_number
        self.options.due_date = invoice.due_date
        for row in invoice.lines.all():
            self.lines.append(CartLine(
                line_id=uuid.uuid4().hex,
                item_id=row.inventory_item_id,
                name=row.item_name,
                hsn=row.item_hsn or "",
                unit=row.item_unit or "",
                rate=row.unit_price,
                tax_rate=row.tax_rate,
                quantity=row.quantity or Decimal("1"),
                discount=row.discount,
                boxes=row.boxes,
                items_per_box=row.items_per_box,
            ))

    # ---------- session storage ----------
    def to_session(self):
        opts = asdict(self.options)
        opts["due_date"] = self.options.due_date.isoformat() if self.options.due_date else None
        return {
            "company_id": self.company_id,
            "lines": [line.to_dict() for line in self.lines],
            "options": opts,
            "editing_invoice_id": self.editing_invoice_id,
            "editing_invoice_number": self.editing_invoice_number,
        }

    @classmethod
    def from_session(cls, data):
        if not data:
            cart = cls()
            cart.options = InvoiceOptions.default()
            return cart
        opts = dict(data.get("options") or {})
        if opts.get("due_date"):
            opts["due_date"] = date.fromisoformat(opts["due_date"])
        known = {k: v for k, v in opts.items() if k in InvoiceOptions.__dataclass_fields__}
        return cls(
            company_id=data.get("company_id"),
            lines=[CartLine.from_dict(row) for row in data.get("lines", [])],
            options=InvoiceOptions(**known),
            editing_invoice_id=data.get("editing_invoice_id"),
            editing_invoice_number=data.get("editing_invoice_number"),
        )
