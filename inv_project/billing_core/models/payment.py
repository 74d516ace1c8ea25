from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..managers import TenantManager
from .company import Company


class CompanyPayment(models.Model):
    """Append-only journal of payments received from a customer.

    Only payments are journaled here. Invoice creation, edits and deletes
    move Company.pending_amount without leaving a row in this table.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="company_payments",
    )
    company = models.ForeignKey(
        Company, on_delete=models.CASCADE, related_name="payments"
    )

    amount = models.DecimalField(max_digits=18, decimal_places=2)
    # pending_amount before / after this payment was applied
    previous_balance = models.DecimalField(max_digits=18, decimal_places=2)
    new_balance = models.DecimalField(max_digits=18, decimal_places=2)
    note = models.TextField(null=True, blank=True)

    # Client supplied key, makes retried submissions safe
    idempotency_key = models.CharField(max_length=64, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        db_table = "company_payments"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["owner", "company", "created_at"],
                name="payments_owner_company_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["owner", "idempotency_key"],
                condition=models.Q(idempotency_key__isnull=False),
                name="uq_payment_owner_idempotency_key",
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_amount_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(new_balance__gte=0),
                name="payment_new_balance_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.company} paid {self.amount} ({self.previous_balance} → {self.new_balance})"

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError("Payment amount must be positive")
        if self.new_balance is not None and self.new_balance < Decimal("0"):
            raise ValidationError("New balance cannot be negative")
        if self.company_id and self.owner_id:
            if self.company.owner_id != self.owner_id:
                raise ValidationError("Payment must belong to the company owner")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
