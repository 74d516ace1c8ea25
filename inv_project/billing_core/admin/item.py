from django.contrib import admin

from ..models import InventoryItem
from .mixins import TenantAdminMixin


# Register `InventoryItem` model
@admin.register(InventoryItem)
class InventoryItemAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "name", "hsn", "category", "rate", "gst_rate", "stock", "unit")
    search_fields = ("name", "hsn", "category")
    list_filter = ("category", "unit")
    ordering = ("name",)
