from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.conf import settings
from django.test import TestCase, override_settings

from ..exceptions import LedgerConflict
from ..models import Invoice
from ..services.numbering import allocate_invoice_number, generate_invoice_number
from .helpers import make_company, make_user


class FixedRandom:
    """Stand-in for random.SystemRandom yielding a fixed sequence."""

    def __init__(self, *values):
        self.values = list(values)

    def randrange(self, start, stop):
        value = self.values.pop(0) if len(self.values) > 1 else self.values[0]
        assert start <= value < stop
        return value


# 20:00 UTC on 31 Jan is already February in India
LATE_JANUARY_UTC = datetime(2026, 1, 31, 20, 0, tzinfo=dt_timezone.utc)


class InvoiceNumberTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.company = make_company(self.user)

    def test_format_uses_display_zone_month(self):
        self.assertEqual(generate_invoice_number(LATE_JANUARY_UTC, FixedRandom(42)), "INV/2602/0042")
        self.assertEqual(generate_invoice_number(LATE_JANUARY_UTC, FixedRandom(9998)), "INV/2602/9998")

    def test_collision_retries(self):
        Invoice(owner=self.user, company=self.company, invoice_number="INV/2602/0042",
                total_amount=Decimal("1.00")).save()
        number = allocate_invoice_number(self.user, LATE_JANUARY_UTC, FixedRandom(42, 7))
        self.assertEqual(number, "INV/2602/0007")

    def test_numbers_are_per_owner(self):
        Invoice(owner=self.user, company=self.company, invoice_number="INV/2602/0042",
                total_amount=Decimal("1.00")).save()
        other = make_user("bob")
        self.assertEqual(allocate_invoice_number(other, LATE_JANUARY_UTC, FixedRandom(42)),
                         "INV/2602/0042")

    @override_settings(BILLING={**settings.BILLING, "INVOICE_NUMBER_ATTEMPTS": 3})
    def test_gives_up_after_configured_attempts(self):
        Invoice(owner=self.user, company=self.company, invoice_number="INV/2602/0042",
                total_amount=Decimal("1.00")).save()
        with self.assertRaises(LedgerConflict):
            allocate_invoice_number(self.user, LATE_JANUARY_UTC, FixedRandom(42))
