from django.contrib import admin
from django.core.exceptions import PermissionDenied

from .mixins import TenantAdminMixin


class ReadOnlyAdmin(TenantAdminMixin, admin.ModelAdmin):
    """Base admin for rows that only change through the ledger."""

    list_per_page = 50

    # make every model field readonly
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    # the change page is still viewable; saving is refused below
    def has_change_permission(self, request, obj=None):
        return True

    def save_model(self, request, obj, form, change):
        raise PermissionDenied("Rows cannot be changed via the admin.")
