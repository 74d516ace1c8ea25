import logging
import random
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from ..exceptions import LedgerConflict
from ..models import Invoice

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()


def generate_invoice_number(now=None, rng=None) -> str:
    """INV/YYMM/NNNN with NNNN drawn from 0000-9998."""
    zone = ZoneInfo(settings.BILLING["DISPLAY_TIME_ZONE"])
    now = timezone.localtime(now or timezone.now(), zone)
    rng = rng or _rng
    return f"INV/{now:%y%m}/{rng.randrange(0, 9999):04d}"


def allocate_invoice_number(owner, now=None, rng=None) -> str:
    """A number not yet used by this owner.

    Retries on collision, then gives up with LedgerConflict. The
    uq_invoice_owner_number constraint still guards concurrent inserts.
    """
    attempts = settings.BILLING["INVOICE_NUMBER_ATTEMPTS"]
    for attempt in range(1, attempts + 1):
        number = generate_invoice_number(now, rng)
        if not Invoice.objects.for_owner(owner).filter(invoice_number=number).exists():
            return number
        logger.info("invoice number %s taken for owner %s (attempt %d)", number, owner.pk, attempt)
    raise LedgerConflict(f"Could not allocate a free invoice number after {attempts} attempts")
