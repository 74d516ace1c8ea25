from django.contrib import admin

from ..models import BankDetails, SellerInfo
from .mixins import TenantAdminMixin


@admin.register(SellerInfo)
class SellerInfoAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("owner", "name", "gst_no", "state", "phone", "updated_at")
    search_fields = ("name", "gst_no")


@admin.register(BankDetails)
class BankDetailsAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("owner", "bank_name", "account_number", "ifsc_code", "branch", "updated_at")
    search_fields = ("bank_name", "ifsc_code")
