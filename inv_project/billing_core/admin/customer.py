from django.contrib import admin, messages

from ..exceptions import BillingError
from ..models import Company
from ..services import customers
from .actions import move_companies_to_junk, restore_companies
from .mixins import TenantAdminMixin


@admin.register(Company)
class CompanyAdmin(TenantAdminMixin, admin.ModelAdmin):
    """Customers. Deleting here is the permanent purge, which only
    applies to companies already in junk."""

    list_display = ("id", "name", "gst_no", "state", "pending_amount",
                    "last_transaction", "is_deleted", "days_left")
    list_filter = ("is_deleted", "state")
    search_fields = ("name", "gst_no", "phone", "email")
    ordering = ("name",)
    actions = [move_companies_to_junk, restore_companies]
    # balance and junk state only move through the ledger
    readonly_fields = ("pending_amount", "last_transaction", "is_deleted", "deleted_at",
                       "created_at")

    @admin.display(description="Days until purge")
    def days_left(self, obj):
        return obj.days_until_purge()

    def has_delete_permission(self, request, obj=None):
        if obj and not obj.is_deleted:
            return False
        return super().has_delete_permission(request, obj)

    def _purge(self, request, obj):
        try:
            customers.purge_company(obj.owner, obj.pk)
        except BillingError as exc:
            self.message_user(request, f"{obj}: {exc}", level=messages.ERROR)

    def delete_model(self, request, obj):
        self._purge(request, obj)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self._purge(request, obj)
