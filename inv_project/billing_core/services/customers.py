import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import LedgerConflict, LedgerValidationError, RecordNotFound
from ..models import Company
from .ledger import ledger_transaction
from .money import ZERO, check_amount, q2

logger = logging.getLogger(__name__)

CONTACT_FIELDS = ("name", "gst_no", "address", "state", "state_code", "phone", "email")


def get_company(owner, company_id, *, include_deleted=False) -> Company:
    qs = Company.objects.for_owner(owner)
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    company = qs.filter(pk=company_id).first()
    if company is None:
        raise RecordNotFound(f"Company {company_id} not found")
    return company


def _clean_contact(fields):
    unknown = set(fields) - set(CONTACT_FIELDS)
    if unknown:
        raise LedgerValidationError(f"Unknown company fields: {', '.join(sorted(unknown))}")
    data = {k: (v or "").strip() for k, v in fields.items()}
    if "name" in data and not data["name"]:
        raise LedgerValidationError("Company name is required")
    if data.get("gst_no"):
        data["gst_no"] = data["gst_no"].upper()
    return data


def create_company(owner, *, pending_amount=ZERO, **fields) -> Company:
    """Add a customer. An opening balance may be given, never below 0."""
    data = _clean_contact(fields)
    if not data.get("name"):
        raise LedgerValidationError("Company name is required")
    opening = max(ZERO, q2(check_amount(pending_amount, "Opening balance")))
    with ledger_transaction("create_company", owner):
        company = Company(owner=owner, pending_amount=opening, **data)
        company.save()
    logger.info("create_company owner=%s company=%s opening=%s", owner.pk, company.pk, opening)
    return company


def update_company(owner, company_id, *, pending_amount=None, **fields) -> Company:
    """Edit contact fields. An explicit opening-balance edit is clamped at 0."""
    data = _clean_contact(fields)
    with ledger_transaction("update_company", owner):
        company = (
            Company.objects.select_for_update()
            .filter(owner=owner, pk=company_id)
            .first()
        )
        if company is None:
            raise RecordNotFound(f"Company {company_id} not found")
        for key, value in data.items():
            setattr(company, key, value)
        if pending_amount is not None:
            previous = company.pending_amount
            company.pending_amount = max(ZERO, q2(check_amount(pending_amount, "Opening balance")))
            company.last_transaction = timezone.now()
            logger.info("update_company owner=%s company=%s pending %s -> %s (manual)",
                        owner.pk, company.pk, previous, company.pending_amount)
        company.save()
    return company


# ----------------------------
# Junk (soft delete) lifecycle
# ----------------------------
def soft_delete_company(owner, company_id, *, now=None) -> Company:
    now = now or timezone.now()
    with ledger_transaction("soft_delete_company", owner):
        company = get_company(owner, company_id)
        company.is_deleted = True
        company.deleted_at = now
        company.save(update_fields=["is_deleted", "deleted_at"])
    logger.info("soft_delete_company owner=%s company=%s", owner.pk, company.pk)
    return company


def restore_company(owner, company_id) -> Company:
    with ledger_transaction("restore_company", owner):
        company = Company.objects.deleted(owner).filter(pk=company_id).first()
        if company is None:
            raise RecordNotFound(f"No junk company {company_id}")
        company.is_deleted = False
        company.deleted_at = None
        company.save(update_fields=["is_deleted", "deleted_at"])
    logger.info("restore_company owner=%s company=%s", owner.pk, company.pk)
    return company


def purge_company(owner, company_id):
    """Hard delete a junk company with its invoices and payments."""
    with ledger_transaction("purge_company", owner):
        company = Company.objects.for_owner(owner).filter(pk=company_id).first()
        if company is None:
            raise RecordNotFound(f"Company {company_id} not found")
        if not company.is_deleted:
            raise LedgerConflict("Move the company to junk before deleting it permanently")
        name = company.name
        company.delete()
    logger.info("purge_company owner=%s company=%s (%s)", owner.pk, company_id, name)


def days_until_purge(company, now=None):
    return company.days_until_purge(now)


def purge_expired_companies(now=None) -> int:
    """Hard delete every junk company past the retention window.

    Runs across all owners (scheduled task). Returns the number purged.
    """
    now = now or timezone.now()
    purged = 0
    for company in Company.objects.purgeable(now).order_by("pk"):
        with transaction.atomic():
            company.delete()
        purged += 1
    if purged:
        logger.info("purge_expired_companies removed %d companies", purged)
    return purged
