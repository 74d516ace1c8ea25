from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable, Optional, Tuple

from django.conf import settings

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
# money columns are max_digits=18, decimal_places=2
MAX_AMOUNT = Decimal("1e16")


# ----------------------------
# Coercion and rounding
# ----------------------------
def to_decimal(value, default=ZERO) -> Decimal:
    """Coerce int / float / str / Decimal to Decimal.

    Floats go through str() so 0.1 stays 0.1. Anything unparsable
    (None, "", "abc", NaN) becomes `default`.
    """
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def to_amount(value, default=ZERO) -> Decimal:
    """to_decimal, with magnitudes no money column can hold treated as unparsable."""
    number = to_decimal(value, default)
    return number if abs(number) < MAX_AMOUNT else default


def check_amount(value, label="Amount") -> Decimal:
    """Raise LedgerValidationError when value is too large to store."""
    from ..exceptions import LedgerValidationError

    number = to_decimal(value)
    if abs(number) >= MAX_AMOUNT:
        raise LedgerValidationError(f"{label} is too large")
    return number


def q2(value) -> Decimal:
    # half away from zero, the way invoices are printed
    number = to_decimal(value)
    with localcontext() as ctx:
        # quantize needs every integer digit plus two decimals
        ctx.prec = max(ctx.prec, number.adjusted() + 3)
        return number.quantize(CENT, rounding=ROUND_HALF_UP)


# ----------------------------
# Per-line arithmetic
# ----------------------------
def line_amount(rate, quantity) -> Decimal:
    return to_decimal(rate) * to_decimal(quantity)


def discount_amount(rate, quantity, discount_percent) -> Decimal:
    return line_amount(rate, quantity) * to_decimal(discount_percent) / HUNDRED


def line_total(rate, quantity, discount_percent=ZERO) -> Decimal:
    """Exact (unrounded) line total: rate × quantity less the discount."""
    return line_amount(rate, quantity) - discount_amount(rate, quantity, discount_percent)


def validate_line_inputs(rate, quantity, discount_percent=ZERO):
    """Raise LedgerValidationError for a negative rate / quantity, a value
    too large to store or a discount outside [0, 100]."""
    from ..exceptions import LedgerValidationError

    check_amount(rate, "Rate")
    check_amount(quantity, "Quantity")
    check_amount(line_total(rate, quantity, discount_percent), "Line total")
    if to_decimal(rate) < 0:
        raise LedgerValidationError("Rate must be >= 0")
    if to_decimal(quantity) < 0:
        raise LedgerValidationError("Quantity must be >= 0")
    discount = to_decimal(discount_percent)
    if discount < 0 or discount > HUNDRED:
        raise LedgerValidationError("Discount must be between 0 and 100")


# ----------------------------
# Invoice totals
# ----------------------------
@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal     # exact sum of line totals
    round_off: Decimal    # round2(subtotal) - subtotal, |round_off| < 0.01
    tax: Decimal
    grand_total: Decimal  # subtotal + round_off + tax, always 2dp

    @property
    def rounded_subtotal(self) -> Decimal:
        return self.subtotal + self.round_off


def tax_enabled() -> bool:
    return bool(settings.BILLING.get("TAX_ENABLED", False))


def compute_totals(lines: Iterable[Tuple], *, with_tax: Optional[bool] = None) -> InvoiceTotals:
    """Totals for (rate, quantity, discount_percent[, tax_rate]) tuples.

    Line totals are summed unrounded and rounded once. Tax is zero unless
    enabled, in which case each line contributes line_total × tax_rate / 100.
    """
    if with_tax is None:
        with_tax = tax_enabled()

    subtotal = ZERO
    tax_base = ZERO
    for line in lines:
        rate, quantity, discount = line[0], line[1], line[2]
        total = line_total(rate, quantity, discount)
        subtotal += total
        if with_tax and len(line) > 3:
            tax_base += total * to_decimal(line[3]) / HUNDRED

    round_off = q2(subtotal) - subtotal
    tax = q2(tax_base) if with_tax else ZERO.quantize(CENT)
    grand_total = q2(subtotal + round_off + tax)
    return InvoiceTotals(
        subtotal=subtotal,
        round_off=round_off,
        tax=tax,
        grand_total=grand_total,
    )


# ----------------------------
# Balance helpers
# ----------------------------
def apply_delta(old_pending, delta) -> Decimal:
    """New pending balance after a signed change, clamped at zero."""
    return max(ZERO.quantize(CENT), q2(to_decimal(old_pending) + to_decimal(delta)))


def current_balance(previous_balance, grand_total) -> Decimal:
    """Balance printed on the invoice: what was owed plus this invoice."""
    return apply_delta(previous_balance, grand_total)
