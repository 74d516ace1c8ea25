from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Lower

from ..managers import TenantManager


# ---------- Inventory items ----------
class InventoryItem(models.Model):  # Represents something the business sells

    # Multi-tenant: each item belongs to the user who created it
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="inventory_items",
    )

    name = models.CharField(max_length=200)
    # HSN tax classification code, carried to invoice lines for display only
    hsn = models.CharField(max_length=20, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")

    # standard price per unit
    rate = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    stock = models.IntegerField(default=0)
    unit = models.CharField(max_length=20, default="pcs")
    # GST percentage (0 for this jurisdiction's output by default)
    gst_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        db_table = "inventory_items"
        indexes = [
            models.Index(fields=["owner", "name"], name="inv_items_owner_name_idx"),
        ]
        constraints = [
            # Item names are unique per tenant, ignoring case
            models.UniqueConstraint(
                Lower("name"), "owner", name="uq_owner_item_name_ci"
            ),
            models.CheckConstraint(
                condition=models.Q(rate__gte=0),
                name="item_rate_non_negative",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError("Item name is required")
        if self.rate is not None and self.rate < 0:
            raise ValidationError("Rate must be >= 0")
        if self.gst_rate is not None and not (0 <= self.gst_rate <= 100):
            raise ValidationError("GST rate must be between 0 and 100")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
