from django.contrib import admin, messages

from ..exceptions import BillingError
from ..services import customers, ledger

# ---------- Admin actions ----------
# Each action goes through the service layer so the same rules apply
# as in the API. One failing row does not stop the rest of the batch.


def _run_each(modeladmin, request, queryset, verb, call):
    done = 0
    total = queryset.count()
    for obj in queryset:
        try:
            call(obj)
            done += 1
        except BillingError as exc:
            modeladmin.message_user(request, f"{obj}: {exc}", level=messages.ERROR)
    modeladmin._report(request, done, total, verb)


@admin.action(description="Move selected companies to junk")
def move_companies_to_junk(modeladmin, request, queryset):
    _run_each(
        modeladmin, request, queryset.filter(is_deleted=False), "Moved to junk",
        lambda c: customers.soft_delete_company(c.owner, c.pk),
    )


@admin.action(description="Restore selected companies from junk")
def restore_companies(modeladmin, request, queryset):
    _run_each(
        modeladmin, request, queryset.filter(is_deleted=True), "Restored",
        lambda c: customers.restore_company(c.owner, c.pk),
    )


@admin.action(description="Mark selected invoices as Paid")
def mark_invoices_paid(modeladmin, request, queryset):
    # paid rules (no paid -> paid) are enforced by Invoice.transition_to
    _run_each(
        modeladmin, request, queryset, "Marked paid",
        lambda inv: ledger.mark_invoice_paid(inv.owner, inv.pk),
    )
