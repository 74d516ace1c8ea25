from django.conf import settings
from django.db import models


# ---------- Seller profile (PDF header) ----------
class SellerInfo(models.Model):
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="seller_info",
    )
    name = models.CharField(max_length=200)
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    state_code = models.CharField(max_length=8, blank=True, default="")
    pincode = models.CharField(max_length=12, blank=True, default="")
    gst_no = models.CharField(max_length=32, blank=True, default="")
    pan = models.CharField(max_length=16, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    website = models.CharField(max_length=200, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "seller_info"
        verbose_name_plural = "seller info"

    def __str__(self):
        return self.name

    def full_address(self):
        # "street, city, state - pincode" with empty parts skipped
        place = ", ".join(p for p in [self.address, self.city, self.state] if p)
        if self.pincode:
            place = f"{place} - {self.pincode}" if place else self.pincode
        return place


# ---------- Bank details (PDF footer) ----------
class BankDetails(models.Model):
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bank_details",
    )
    account_name = models.CharField(max_length=200, blank=True, default="")
    bank_name = models.CharField(max_length=200, blank=True, default="")
    account_number = models.CharField(max_length=40, blank=True, default="")
    ifsc_code = models.CharField(max_length=20, blank=True, default="")
    branch = models.CharField(max_length=200, blank=True, default="")
    swift_code = models.CharField(max_length=20, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bank_details"
        verbose_name_plural = "bank details"

    def __str__(self):
        return f"{self.bank_name} {self.account_number}".strip()
