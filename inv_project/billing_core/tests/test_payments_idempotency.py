from decimal import Decimal

from django.test import TestCase

from ..exceptions import LedgerConflict
from ..models import Company, CompanyPayment
from ..services import ledger
from .helpers import make_company, make_user


class PaymentIdempotencyTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.company = make_company(self.user, pending="5000")

    def test_replay_returns_the_original_payment(self):
        first = ledger.record_payment(self.user, self.company.pk, "1000", idempotency_key="k-1")
        again = ledger.record_payment(self.user, self.company.pk, "1000", idempotency_key="k-1")
        self.assertEqual(first.payment.pk, again.payment.pk)
        self.assertEqual(again.new_balance, Decimal("4000.00"))
        self.assertEqual(CompanyPayment.objects.count(), 1)
        self.assertEqual(Company.objects.get(pk=self.company.pk).pending_amount, Decimal("4000.00"))

    def test_key_reused_for_a_different_payment(self):
        ledger.record_payment(self.user, self.company.pk, "1000", idempotency_key="k-1")
        with self.assertRaises(LedgerConflict):
            ledger.record_payment(self.user, self.company.pk, "999", idempotency_key="k-1")
        other = make_company(self.user, name="BuildWell Infrastructure", pending="5000")
        with self.assertRaises(LedgerConflict):
            ledger.record_payment(self.user, other.pk, "1000", idempotency_key="k-1")

    def test_keys_are_scoped_per_owner(self):
        bob = make_user("bob")
        bobs = make_company(bob, pending="5000")
        ledger.record_payment(self.user, self.company.pk, "1000", idempotency_key="shared")
        result = ledger.record_payment(bob, bobs.pk, "1000", idempotency_key="shared")
        self.assertEqual(result.new_balance, Decimal("4000.00"))
        self.assertEqual(CompanyPayment.objects.count(), 2)

    def test_blank_key_means_no_key(self):
        ledger.record_payment(self.user, self.company.pk, "10", idempotency_key="  ")
        ledger.record_payment(self.user, self.company.pk, "10", idempotency_key="")
        self.assertEqual(CompanyPayment.objects.filter(idempotency_key__isnull=True).count(), 2)
