from django.contrib import admin, messages

from ..exceptions import BillingError
from ..models import CompanyPayment, Invoice
from ..services import ledger
from .actions import mark_invoices_paid
from .inlines import InvoiceLineItemInline
from .ReadOnly import ReadOnlyAdmin


class LedgerDeleteMixin:
    """Route admin deletes through a ledger transition so the
    customer's pending amount stays consistent."""

    ledger_delete = None

    def _ledger_delete(self, request, obj):
        try:
            self.ledger_delete(obj.owner, obj.pk)
        except BillingError as exc:
            self.message_user(request, f"{obj}: {exc}", level=messages.ERROR)
            return False
        return True

    def delete_model(self, request, obj):
        self._ledger_delete(request, obj)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self._ledger_delete(request, obj)


# Register `Invoice` model
@admin.register(Invoice)
class InvoiceAdmin(LedgerDeleteMixin, ReadOnlyAdmin):
    list_display = (
        "id",
        "invoice_number",
        "company",
        "created_at",
        "due_date",
        "status",
        "total_amount",
        "amount_received",
    )
    list_filter = ("status", "created_at")
    search_fields = ("invoice_number", "company__name")
    actions = [mark_invoices_paid]
    inlines = [InvoiceLineItemInline]
    ledger_delete = staticmethod(ledger.delete_invoice)

    def get_queryset(self, request):
        # company name is shown on every row
        return super().get_queryset(request).select_related("company")

    def has_delete_permission(self, request, obj=None):
        # paid invoices are final
        if obj and obj.status == "paid":
            return False
        return super().has_delete_permission(request, obj)


# Register `CompanyPayment` model
@admin.register(CompanyPayment)
class CompanyPaymentAdmin(LedgerDeleteMixin, ReadOnlyAdmin):
    list_display = ("id", "company", "amount", "previous_balance", "new_balance", "created_at")
    search_fields = ("company__name", "note")
    list_filter = ("created_at",)
    ledger_delete = staticmethod(ledger.delete_payment)

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("company")
