import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from ..exceptions import (BillingError, LedgerConflict, LedgerValidationError,
                          RecordNotFound, StorageFailure)
from ..models import (Company, CompanyPayment, InventoryItem, Invoice,
                      InvoiceLineItem)
from .money import apply_delta, check_amount, compute_totals, q2, to_decimal, validate_line_inputs
from .numbering import allocate_invoice_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of one balance transition.

    previous_balance is what the customer owed before the transition,
    the PDF prints it as "Previous Balance".
    """
    previous_balance: Decimal
    new_balance: Decimal
    invoice: Optional[Invoice] = None
    payment: Optional[CompanyPayment] = None


# ----------------------------
# Transaction plumbing
# ----------------------------
@contextmanager
def ledger_transaction(action, owner):
    """One atomic block per transition. Any failure rolls everything back.

    Database errors are logged and surface as StorageFailure. A unique
    constraint race surfaces as LedgerConflict. Model validation errors
    surface as LedgerValidationError.
    """
    try:
        with transaction.atomic():
            yield
    except BillingError:
        raise
    except ValidationError as exc:
        raise LedgerValidationError(exc.messages) from exc
    except IntegrityError as exc:
        logger.warning("%s hit a constraint for owner %s: %s", action, owner.pk, exc)
        raise LedgerConflict(f"{action} conflicts with stored data") from exc
    except DatabaseError as exc:
        logger.exception("%s failed for owner %s", action, owner.pk)
        raise StorageFailure(f"{action} failed, nothing was saved") from exc


def _lock_company(owner, company_id) -> Company:
    company = (
        Company.objects.select_for_update()
        .filter(owner=owner, pk=company_id)
        .first()
    )
    if company is None:
        raise RecordNotFound(f"Company {company_id} not found")
    return company


def _lock_invoice(owner, invoice_id) -> Invoice:
    invoice = (
        Invoice.objects.select_for_update()
        .filter(owner=owner, pk=invoice_id)
        .first()
    )
    if invoice is None:
        raise RecordNotFound(f"Invoice {invoice_id} not found")
    return invoice


def _set_pending(company, new_pending, now):
    company.pending_amount = new_pending
    company.last_transaction = now
    company.save(update_fields=["pending_amount", "last_transaction"])


def _log_transition(action, owner, company, previous, new, **extra):
    details = " ".join(f"{k}={v}" for k, v in extra.items())
    logger.info(
        "%s owner=%s company=%s pending %s -> %s %s",
        action, owner.pk, company.pk, previous, new, details,
    )


# ----------------------------
# Cart -> invoice rows
# ----------------------------
def _validate_cart(cart):
    """Reject an unusable cart before anything is written."""
    if not cart.company_id:
        raise LedgerValidationError("Select a customer first")
    if not cart.lines:
        raise LedgerValidationError("Add at least one item")
    for line in cart.lines:
        if not (line.name or "").strip():
            raise LedgerValidationError("Every line needs an item name")
        validate_line_inputs(line.rate, line.quantity, line.discount)
        if line.quantity <= 0:
            raise LedgerValidationError(f"Quantity for {line.name} must be positive")


def _cart_totals(cart):
    return compute_totals(line.as_tuple() for line in cart.lines)


def _insert_lines(owner, invoice, lines):
    # items deleted since they were added keep only their snapshot
    wanted = {line.item_id for line in lines if line.item_id}
    live = set(
        InventoryItem.objects.for_owner(owner)
        .filter(pk__in=wanted)
        .values_list("pk", flat=True)
    )
    for position, line in enumerate(lines, start=1):
        InvoiceLineItem(
            invoice=invoice,
            inventory_item_id=line.item_id if line.item_id in live else None,
            item_name=line.name.strip(),
            item_hsn=line.hsn or "",
            item_unit=line.unit or "",
            quantity=line.quantity,
            unit_price=line.rate,
            discount=line.discount,
            tax_rate=line.tax_rate,
            boxes=line.boxes,
            items_per_box=line.items_per_box,
            position=position,
        ).save()


# ----------------------------
# Invoice transitions
# ----------------------------
def create_invoice(owner, cart, *, due_date=None, now=None) -> LedgerResult:
    """absent -> sent. Adds the invoice total to the customer's pending amount."""
    now = now or timezone.now()
    _validate_cart(cart)
    totals = _cart_totals(cart)

    with ledger_transaction("create_invoice", owner):
        company = _lock_company(owner, cart.company_id)
        if company.is_deleted:
            raise LedgerValidationError(f"{company.name} is in junk, restore it first")

        invoice = Invoice(
            owner=owner,
            invoice_number=allocate_invoice_number(owner, now),
            company=company,
            total_amount=totals.grand_total,
            tax_amount=totals.tax,
            status="sent",
            due_date=due_date or cart.options.due_date,
            created_at=now,
            updated_at=now,
        )
        invoice.save()
        _insert_lines(owner, invoice, cart.lines)

        previous = company.pending_amount
        new = apply_delta(previous, invoice.total_amount)
        _set_pending(company, new, now)
        _log_transition("create_invoice", owner, company, previous, new,
                        invoice=invoice.invoice_number, total=invoice.total_amount)

    return LedgerResult(previous, new, invoice=invoice)


def update_invoice(owner, invoice_id, cart, *, now=None) -> LedgerResult:
    """sent|updated -> updated. Lines are replaced, the number is kept.

    The customer's pending amount moves by (new total - prior total). When
    the invoice moves to another customer, the prior total leaves the old
    customer and the new total lands on the new one.
    """
    now = now or timezone.now()
    _validate_cart(cart)
    totals = _cart_totals(cart)

    with ledger_transaction("update_invoice", owner):
        invoice = _lock_invoice(owner, invoice_id)
        if invoice.status == "paid":
            raise LedgerConflict(f"Invoice {invoice.invoice_number} is paid and cannot be edited")
        invoice.transition_to("updated")

        prior_total = invoice.total_amount
        old_company_id = invoice.company_id
        # lock in pk order so two edits never wait on each other crosswise
        locked = {
            c.pk: c
            for c in Company.objects.select_for_update()
            .filter(owner=owner, pk__in={old_company_id, cart.company_id})
            .order_by("pk")
        }
        company = locked.get(cart.company_id)
        if company is None:
            raise RecordNotFound(f"Company {cart.company_id} not found")
        moved = company.pk != old_company_id
        if moved and company.is_deleted:
            raise LedgerValidationError(f"{company.name} is in junk, restore it first")

        invoice.company = company
        invoice.total_amount = totals.grand_total
        invoice.tax_amount = totals.tax
        invoice.updated_at = now
        if cart.options.due_date:
            invoice.due_date = cart.options.due_date
        invoice.save()

        invoice.lines.all().delete()
        _insert_lines(owner, invoice, cart.lines)

        if moved:
            old_company = locked[old_company_id]
            old_previous = old_company.pending_amount
            old_new = apply_delta(old_previous, -prior_total)
            _set_pending(old_company, old_new, now)
            _log_transition("update_invoice", owner, old_company, old_previous, old_new,
                            invoice=invoice.invoice_number, moved_out=prior_total)
            previous = company.pending_amount
            new = apply_delta(previous, invoice.total_amount)
        else:
            previous = company.pending_amount
            new = apply_delta(previous, invoice.total_amount - prior_total)
        _set_pending(company, new, now)
        _log_transition("update_invoice", owner, company, previous, new,
                        invoice=invoice.invoice_number, prior=prior_total,
                        total=invoice.total_amount)

    return LedgerResult(previous, new, invoice=invoice)


def delete_invoice(owner, invoice_id, *, now=None) -> LedgerResult:
    """sent|updated -> absent. Removes the invoice total from pending."""
    now = now or timezone.now()
    with ledger_transaction("delete_invoice", owner):
        invoice = _lock_invoice(owner, invoice_id)
        if invoice.status == "paid":
            raise LedgerConflict(f"Invoice {invoice.invoice_number} is paid and cannot be deleted")
        company = _lock_company(owner, invoice.company_id)

        previous = company.pending_amount
        new = apply_delta(previous, -invoice.total_amount)
        _set_pending(company, new, now)
        number, total = invoice.invoice_number, invoice.total_amount
        invoice.delete()  # lines cascade
        _log_transition("delete_invoice", owner, company, previous, new,
                        invoice=number, total=total)

    return LedgerResult(previous, new, invoice=invoice)


def mark_invoice_paid(owner, invoice_id, *, now=None) -> LedgerResult:
    """sent|updated -> paid. Records the invoice as settled.

    Money received is tracked through record_payment, so the customer's
    pending amount is left alone here.
    """
    now = now or timezone.now()
    with ledger_transaction("mark_invoice_paid", owner):
        invoice = _lock_invoice(owner, invoice_id)
        invoice.transition_to("paid")
        invoice.amount_received = invoice.total_amount
        invoice.updated_at = now
        invoice.save()
        pending = invoice.company.pending_amount
        logger.info("mark_invoice_paid owner=%s invoice=%s", owner.pk, invoice.invoice_number)

    return LedgerResult(pending, pending, invoice=invoice)


# ----------------------------
# Payment transitions
# ----------------------------
def record_payment(owner, company_id, amount, *, note=None, idempotency_key=None,
                   now=None) -> LedgerResult:
    """Append a payment and lower the customer's pending amount.

    Over-payment is rejected, not clamped. Replaying an idempotency key
    returns the original entry; reusing it for a different payment raises
    LedgerConflict.
    """
    now = now or timezone.now()
    value = q2(check_amount(amount, "Payment amount"))
    if value <= 0:
        raise LedgerValidationError("Payment amount must be a positive number")
    key = (idempotency_key or "").strip() or None

    with ledger_transaction("record_payment", owner):
        company = _lock_company(owner, company_id)

        if key is not None:
            existing = CompanyPayment.objects.for_owner(owner).filter(idempotency_key=key).first()
            if existing is not None:
                if existing.company_id != company.pk or existing.amount != value:
                    raise LedgerConflict("Idempotency key already used for a different payment")
                logger.info("record_payment replay owner=%s key=%s", owner.pk, key)
                return LedgerResult(existing.previous_balance, existing.new_balance, payment=existing)

        if company.is_deleted:
            raise LedgerValidationError(f"{company.name} is in junk, restore it first")
        previous = company.pending_amount
        if value > previous:
            raise LedgerValidationError(
                f"Payment {value} exceeds pending amount {previous}")

        new = apply_delta(previous, -value)
        payment = CompanyPayment(
            owner=owner,
            company=company,
            amount=value,
            previous_balance=previous,
            new_balance=new,
            note=(note or "").strip() or None,
            idempotency_key=key,
            created_at=now,
        )
        payment.save()
        _set_pending(company, new, now)
        _log_transition("record_payment", owner, company, previous, new, amount=value)

    return LedgerResult(previous, new, payment=payment)


def delete_payment(owner, payment_id, *, now=None) -> LedgerResult:
    """Remove a payment entry and put its amount back on pending."""
    now = now or timezone.now()
    with ledger_transaction("delete_payment", owner):
        payment = (
            CompanyPayment.objects.select_for_update()
            .filter(owner=owner, pk=payment_id)
            .first()
        )
        if payment is None:
            raise RecordNotFound(f"Payment {payment_id} not found")
        company = _lock_company(owner, payment.company_id)

        previous = company.pending_amount
        new = apply_delta(previous, payment.amount)
        _set_pending(company, new, now)
        amount = payment.amount
        payment.delete()
        _log_transition("delete_payment", owner, company, previous, new, amount=amount)

    return LedgerResult(previous, new, payment=payment)


# ----------------------------
# Lookups
# ----------------------------
def find_invoice(owner, term) -> Invoice:
    """Most recent invoice whose number contains term (case-insensitive)."""
    term = (term or "").strip()
    if not term:
        raise LedgerValidationError("Enter an invoice number to search")
    invoice = (
        Invoice.objects.for_owner(owner)
        .filter(invoice_number__icontains=term)
        .select_related("company")
        .order_by("-created_at", "-id")
        .first()
    )
    if invoice is None:
        raise RecordNotFound(f"No invoice matching {term!r}")
    return invoice
