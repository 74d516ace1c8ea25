from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to an owner (the signed-in user)
# -----------------------------------------
# Define subclass of Django’s QuerySet
class TenantQuerySet(models.QuerySet):
    def for_owner(self, owner):         # Add queryset helper
        return self.filter(owner=owner) # Apply filter


# Attach TenantQuerySet to .objects
class TenantManager(models.Manager):

    def get_queryset(self): # ensure every model gets TenantQuerySet(so .for_owner() is always available)
        return TenantQuerySet(self.model, using=self._db)

    def for_owner(self, owner): # can call for_owner() directly on objects
        return self.get_queryset().for_owner(owner)

    # every model using TenantManager can call:
    # Invoice.objects.for_owner(request.user)


# ---------- Customers (soft delete aware) ----------
class CompanyQuerySet(TenantQuerySet):
    def active(self, owner):
        return self.filter(
                            owner=owner,       # enforce tenant scoping
                            is_deleted=False   # hide customers moved to junk
                        )

    def deleted(self, owner):
        return self.filter(owner=owner, is_deleted=True)

    # Junk customers whose restore window has passed
    def purgeable(self, now=None):
        now = now or timezone.now()
        days = settings.BILLING["SOFT_DELETE_RETENTION_DAYS"]
        return self.filter(is_deleted=True, deleted_at__lte=now - timedelta(days=days))


class CompanyManager(TenantManager):
    def get_queryset(self):
        return CompanyQuerySet(self.model, using=self._db)

    def active(self, owner):
        return self.get_queryset().active(owner)

    def deleted(self, owner):
        return self.get_queryset().deleted(owner)

    def purgeable(self, now=None):
        return self.get_queryset().purgeable(now)

