from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..managers import CompanyManager


# ---------- Company (customer) ----------
# Represents a client who receives invoices and owes money (AR side)
class Company(models.Model):
    # Multi-tenant: every customer belongs to the user who created it
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="companies",
    )

    name = models.CharField(max_length=200)
    gst_no = models.CharField(max_length=32, blank=True, default="")
    address = models.TextField(blank=True, default="")
    # state + state code pair, display only (place of supply on the PDF)
    state = models.CharField(max_length=100, blank=True, default="")
    state_code = models.CharField(max_length=8, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    # Running ledger balance: unpaid invoices net of payments.
    # Never negative, every mutation goes through services.money.apply_delta
    pending_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    last_transaction = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    # Soft delete ("junk"): restorable until the retention window passes
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Enforce tenant scoping + soft delete helpers
    objects = CompanyManager()

    class Meta:
        db_table = "companies"
        verbose_name_plural = "companies"
        indexes = [
            models.Index(fields=["owner", "name"], name="companies_owner_name_idx"),
            models.Index(fields=["owner", "is_deleted"], name="companies_owner_deleted_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(pending_amount__gte=0),
                name="company_pending_non_negative",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.pending_amount is not None and self.pending_amount < 0:
            raise ValidationError("Pending amount cannot be negative")
        if self.is_deleted and self.deleted_at is None:
            raise ValidationError("Deleted companies must carry deleted_at")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    """ Soft delete lifecycle """

    def purge_after(self):
        # Moment the company becomes eligible for hard delete
        if not self.is_deleted or self.deleted_at is None:
            return None
        days = settings.BILLING["SOFT_DELETE_RETENTION_DAYS"]
        return self.deleted_at + timedelta(days=days)

    def days_until_purge(self, now=None):
        """Whole days left in the restore window (0 once eligible for purge)."""
        purge_at = self.purge_after()
        if purge_at is None:
            return None
        remaining = purge_at - (now or timezone.now())
        if remaining <= timedelta(0):
            return 0
        # round partial days up, the way the junk list shows it
        return remaining.days + (1 if remaining.seconds or remaining.microseconds else 0)

    def is_purgeable(self, now=None):
        purge_at = self.purge_after()
        return purge_at is not None and purge_at <= (now or timezone.now())
