from django.db.models import QuerySet
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .exceptions import LedgerConflict
from .models import Company

""" Block hard delete of a customer that was never moved to junk."""


# pre_delete fires just before Django deletes each Company row.
# origin is what the delete was called on: a Company (or a Company queryset)
# means someone deleted the customer directly; anything else is a cascade
# from the owning user and is let through.
@receiver(pre_delete, sender=Company)
def prevent_delete_active_company(sender, instance, origin=None, **kwargs):
    direct = isinstance(origin, Company) or (
        isinstance(origin, QuerySet) and origin.model is Company
    )
    if direct and not instance.is_deleted:
        raise LedgerConflict(
            f"Move {instance.name} to junk before deleting it permanently.")
