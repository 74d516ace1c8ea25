from django.contrib import admin

from ..models import InvoiceLineItem


class InvoiceLineItemInline(admin.TabularInline):
    """Shows the line snapshot under an Invoice page (read-only)."""

    model = InvoiceLineItem
    extra = 0
    fields = (
        "position", "item_name", "item_hsn", "item_unit", "quantity",
        "boxes", "items_per_box", "unit_price", "discount", "line_total",
    )
    readonly_fields = fields
    ordering = ("position", "id")
    can_delete = False

    # lines are rewritten as a whole by the ledger, never one by one
    def has_add_permission(self, request, obj=None):
        return False
