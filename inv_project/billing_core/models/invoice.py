from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..exceptions import LedgerConflict
from ..managers import TenantManager
from ..services.money import line_total as compute_line_total
from .company import Company
from .item import InventoryItem

INV_STATUS_CHOICES = [
    ("sent", "Sent"),
    ("updated", "Updated"),
    ("paid", "Paid"),
]


class Invoice(models.Model):  # Represents a customer invoice

    # Multi-tenant: invoice belongs to the user who issued it
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="invoices",
    )

    # human-readable (e.g. "INV/2504/0137"), generated once, never regenerated
    invoice_number = models.CharField(max_length=32)

    # Billed customer. Purging the customer removes its invoices too
    company = models.ForeignKey(
        Company, on_delete=models.CASCADE, related_name="invoices"
    )

    # round2(sum of line totals) + tax, as of the last save
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    amount_received = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=10, choices=INV_STATUS_CHOICES, default="sent"
    )
    """ Workflow:
        sent = issued, never edited.
        updated = edited at least once (number unchanged).
        paid = fully settled, no further edits. """

    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        db_table = "invoices"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["owner", "invoice_number"], name="invoices_owner_number_idx"),
            models.Index(fields=["owner", "company"], name="invoices_owner_company_idx"),
            models.Index(fields=["owner", "created_at"], name="invoices_owner_created_idx"),
        ]
        constraints = [
            # Within one tenant, each invoice number must be unique
            models.UniqueConstraint(
                fields=["owner", "invoice_number"],
                name="uq_invoice_owner_number",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0)
                & models.Q(tax_amount__gte=0)
                & models.Q(amount_received__gte=0),
                name="inv_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"Inv {self.invoice_number or self.pk}"

    @property
    def balance_due(self):
        return max(self.total_amount - self.amount_received, Decimal("0.00"))

    def clean(self):
        """Make paid invoices immutable in all code paths
        (admin, JSON views, services)"""
        if self.pk and self.status == "paid":
            orig = Invoice.objects.get(pk=self.pk)
            changed_fields = [
                field
                for field in ["invoice_number", "total_amount", "company_id"]
                if getattr(orig, field) != getattr(self, field)
            ]
            if changed_fields:
                raise ValidationError(
                    f"Cannot modify {changed_fields} on a paid invoice."
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # will trigger clean()
        return super().save(*args, **kwargs)

    def transition_to(self, new_status):
        """Validate and set the next status. The caller saves."""
        allowed = {
            "sent": ["updated", "paid"],
            "updated": ["updated", "paid"],
            "paid": [],  # "paid" → (no further transitions)
        }
        if new_status not in allowed.get(self.status, []):
            raise LedgerConflict(
                f"Cannot go from {self.status} to {new_status}")
        self.status = new_status


class InvoiceLineItem(models.Model):
    # Each line is a snapshot of an inventory item at the time of invoicing

    invoice = models.ForeignKey(
        Invoice, on_delete=models.CASCADE, related_name="lines")

    # Deleting the inventory item keeps the line (snapshot fields survive)
    inventory_item = models.ForeignKey(
        InventoryItem,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="invoice_lines",
    )
    item_name = models.CharField(max_length=200)
    item_hsn = models.CharField(max_length=20, blank=True, default="")
    item_unit = models.CharField(max_length=20, blank=True, default="")

    # Core pricing: quantity × unit_price less discount % = line_total
    quantity = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("1")
    )
    unit_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    discount = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    tax_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    # Stored unrounded, rounding happens once on the invoice subtotal
    line_total = models.DecimalField(
        max_digits=28, decimal_places=8, default=Decimal("0")
    )

    # Optional packaging breakdown (quantity = boxes × items_per_box)
    boxes = models.PositiveIntegerField(null=True, blank=True)
    items_per_box = models.PositiveIntegerField(null=True, blank=True)

    # display order on the invoice
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "invoice_line_items"
        ordering = ["position", "id"]
        indexes = [
            models.Index(fields=["invoice", "position"], name="inv_lines_invoice_pos_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0)
                & models.Q(unit_price__gte=0),
                name="invl_non_negative_amounts",
            ),
            models.CheckConstraint(
                condition=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                name="invl_discount_percent_range",
            ),
        ]

    def __str__(self):
        return f"Invoice: {self.invoice.invoice_number} - Item: {self.item_name} - Total: {self.line_total}"

    def clean(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError("Quantity must be >= 0")
        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError("Unit price must be >= 0")
        if self.discount is not None and not (0 <= self.discount <= 100):
            raise ValidationError("Discount must be between 0 and 100")

        # Tenant safety: a line may only snapshot the invoice owner's items
        if self.inventory_item_id and self.invoice_id:
            item_owner = (
                InventoryItem.objects.only("owner_id")
                .get(pk=self.inventory_item_id).owner_id
            )
            if item_owner != self.invoice.owner_id:
                raise ValidationError(
                    "Invoice line item must belong to the invoice owner")

    def save(self, *args, **kwargs):
        # line_total is always derived, never trusted from the caller
        self.line_total = compute_line_total(
            self.unit_price or Decimal("0"),
            self.quantity or Decimal("0"),
            self.discount or Decimal("0"),
        )
        self.full_clean()
        return super().save(*args, **kwargs)
