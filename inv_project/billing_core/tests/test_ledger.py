from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, TransactionTestCase

from ..exceptions import (LedgerConflict, LedgerValidationError, RecordNotFound,
                          StorageFailure)
from ..models import Company, CompanyPayment, Invoice
from ..services import customers, inventory, ledger
from .helpers import make_cart, make_company, make_user


class LedgerScenarioTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.company = make_company(self.user, pending="2000")

    def pending(self, company=None):
        return Company.objects.get(pk=(company or self.company).pk).pending_amount

    def test_invoice_payment_walkthrough(self):
        # opening 2000, invoice 1500, pay 1000, reject 9999, delete payment
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "500", "3")))
        self.assertEqual(created.previous_balance, Decimal("2000.00"))
        self.assertEqual(created.new_balance, Decimal("3500.00"))
        self.assertEqual(self.pending(), Decimal("3500.00"))
        self.assertEqual(created.invoice.status, "sent")
        self.assertEqual(created.invoice.total_amount, Decimal("1500.00"))

        paid = ledger.record_payment(self.user, self.company.pk, "1000", note="cash")
        self.assertEqual((paid.previous_balance, paid.new_balance),
                         (Decimal("3500.00"), Decimal("2500.00")))
        self.assertEqual(paid.payment.new_balance, Decimal("2500.00"))

        with self.assertRaises(LedgerValidationError):
            ledger.record_payment(self.user, self.company.pk, "9999")
        self.assertEqual(self.pending(), Decimal("2500.00"))
        self.assertEqual(CompanyPayment.objects.count(), 1)

        removed = ledger.delete_payment(self.user, paid.payment.pk)
        self.assertEqual(removed.new_balance, Decimal("3500.00"))
        self.assertEqual(self.pending(), Decimal("3500.00"))

    def test_create_then_delete_restores_balance(self):
        created = ledger.create_invoice(
            self.user, make_cart(self.company, ("Sand", "33.33", "3", "10"), ("Bolts", "50", "36")))
        # 89.991 + 1800 rounds once to 1889.99
        self.assertEqual(created.invoice.total_amount, Decimal("1889.99"))
        self.assertEqual(created.invoice.lines.count(), 2)
        ledger.delete_invoice(self.user, created.invoice.pk)
        self.assertEqual(self.pending(), Decimal("2000.00"))
        self.assertFalse(Invoice.objects.exists())

    def test_lines_keep_their_position_and_snapshot(self):
        created = ledger.create_invoice(
            self.user, make_cart(self.company, ("Sand", "10", "1"), ("Bolts", "5", "2")))
        lines = list(created.invoice.lines.all())
        self.assertEqual([l.item_name for l in lines], ["Sand", "Bolts"])
        self.assertEqual([l.position for l in lines], [1, 2])
        self.assertEqual(lines[1].line_total, Decimal("10"))

    def test_update_moves_pending_by_the_difference(self):
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "1000", "1")))
        cart = make_cart(self.company, ("Sand", "600", "1"))
        updated = ledger.update_invoice(self.user, created.invoice.pk, cart)
        self.assertEqual(updated.invoice.status, "updated")
        self.assertEqual(updated.invoice.invoice_number, created.invoice.invoice_number)
        self.assertEqual(self.pending(), Decimal("2600.00"))
        self.assertEqual(updated.invoice.lines.get().unit_price, Decimal("600.00"))

    def test_edit_to_same_total_leaves_pending_alone(self):
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "500", "2")))
        # different lines, same total
        result = ledger.update_invoice(self.user, created.invoice.pk,
                                       make_cart(self.company, ("Bolts", "250", "4")))
        self.assertEqual(result.previous_balance, result.new_balance)
        self.assertEqual(self.pending(), Decimal("3000.00"))

    def test_update_to_another_company(self):
        other = make_company(self.user, name="BuildWell Infrastructure")
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "1000", "1")))
        ledger.update_invoice(self.user, created.invoice.pk, make_cart(other, ("Sand", "1200", "1")))
        self.assertEqual(self.pending(), Decimal("2000.00"))
        self.assertEqual(self.pending(other), Decimal("1200.00"))
        self.assertEqual(Invoice.objects.get().company_id, other.pk)

    def test_pending_never_goes_below_zero(self):
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "1000", "1")))
        customers.update_company(self.user, self.company.pk, pending_amount="200")
        result = ledger.delete_invoice(self.user, created.invoice.pk)
        self.assertEqual(result.new_balance, Decimal("0.00"))
        self.assertEqual(self.pending(), Decimal("0.00"))

    def test_paid_invoice_is_final(self):
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "1000", "1")))
        paid = ledger.mark_invoice_paid(self.user, created.invoice.pk)
        self.assertEqual(paid.invoice.status, "paid")
        self.assertEqual(paid.invoice.amount_received, Decimal("1000.00"))
        # marking paid does not touch pending
        self.assertEqual(self.pending(), Decimal("3000.00"))

        with self.assertRaises(LedgerConflict):
            ledger.update_invoice(self.user, created.invoice.pk,
                                  make_cart(self.company, ("Sand", "1", "1")))
        with self.assertRaises(LedgerConflict):
            ledger.delete_invoice(self.user, created.invoice.pk)
        with self.assertRaises(LedgerConflict):
            ledger.mark_invoice_paid(self.user, created.invoice.pk)
        self.assertEqual(self.pending(), Decimal("3000.00"))

    def test_cart_is_validated_before_writing(self):
        empty = make_cart(self.company)
        with self.assertRaises(LedgerValidationError):
            ledger.create_invoice(self.user, empty)
        no_company = make_cart(None, ("Sand", "1", "1"))
        with self.assertRaises(LedgerValidationError):
            ledger.create_invoice(self.user, no_company)
        self.assertFalse(Invoice.objects.exists())

    def test_junk_company_cannot_be_billed_or_paid(self):
        customers.soft_delete_company(self.user, self.company.pk)
        with self.assertRaises(LedgerValidationError):
            ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "1", "1")))
        with self.assertRaises(LedgerValidationError):
            ledger.record_payment(self.user, self.company.pk, "10")

    def test_non_positive_payment(self):
        for amount in ("0", "-5", "abc", None):
            with self.assertRaises(LedgerValidationError):
                ledger.record_payment(self.user, self.company.pk, amount)

    def test_payment_too_large_to_store(self):
        with self.assertRaises(LedgerValidationError):
            ledger.record_payment(self.user, self.company.pk, "1e40")
        self.assertEqual(self.pending(), Decimal("2000.00"))
        self.assertFalse(CompanyPayment.objects.exists())

    def test_deleted_inventory_item_keeps_line_snapshot(self):
        item = inventory.add_item(self.user, name="Cement (OPC 53)", hsn="25231000",
                                  rate="380", unit="Bags")
        cart = make_cart(self.company)
        cart.add_item(item=item, quantity=2)
        inventory.delete_item(self.user, item.pk)
        created = ledger.create_invoice(self.user, cart)
        line = created.invoice.lines.get()
        self.assertIsNone(line.inventory_item_id)
        self.assertEqual(line.item_name, "Cement (OPC 53)")
        self.assertEqual(line.item_unit, "Bags")


class LookupTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.company = make_company(self.user)

    def test_find_invoice_by_partial_number(self):
        created = ledger.create_invoice(self.user, make_cart(self.company, ("Sand", "1", "1")))
        suffix = created.invoice.invoice_number[-4:]
        self.assertEqual(ledger.find_invoice(self.user, suffix.lower()).pk, created.invoice.pk)

    def test_find_invoice_errors(self):
        with self.assertRaises(LedgerValidationError):
            ledger.find_invoice(self.user, "  ")
        with self.assertRaises(RecordNotFound):
            ledger.find_invoice(self.user, "INV/9999")

    def test_unknown_ids(self):
        with self.assertRaises(RecordNotFound):
            ledger.delete_invoice(self.user, 999)
        with self.assertRaises(RecordNotFound):
            ledger.delete_payment(self.user, 999)
        with self.assertRaises(RecordNotFound):
            ledger.record_payment(self.user, 999, "10")


class LedgerSequenceTests(TestCase):
    """Pending follows the clamped running process, step by step."""

    def test_clamped_process_from_zero(self):
        user = make_user()
        company = make_company(user)
        expected = Decimal("0.00")

        def step(result, delta):
            nonlocal expected
            expected = max(Decimal("0.00"), expected + Decimal(delta))
            self.assertEqual(result.new_balance, expected)
            self.assertEqual(Company.objects.get(pk=company.pk).pending_amount, expected)
            self.assertGreaterEqual(expected, 0)

        a = ledger.create_invoice(user, make_cart(company, ("Sand", "300", "1")))
        step(a, "300")
        b = ledger.create_invoice(user, make_cart(company, ("Bolts", "200", "1")))
        step(b, "200")
        pay = ledger.record_payment(user, company.pk, "450")
        step(pay, "-450")
        # 50 - 200 clamps to 0, and so does the delete after it
        step(ledger.update_invoice(user, a.invoice.pk, make_cart(company, ("Sand", "100", "1"))), "-200")
        step(ledger.delete_invoice(user, b.invoice.pk), "-200")
        step(ledger.delete_payment(user, pay.payment.pk), "450")
        self.assertEqual(expected, Decimal("450.00"))


class LedgerAtomicityTests(TransactionTestCase):
    def test_storage_failure_rolls_back(self):
        user = make_user()
        company = make_company(user, pending="2000")
        cart = make_cart(company, ("Sand", "100", "1"))
        with mock.patch.object(ledger, "_set_pending", side_effect=DatabaseError("disk full")):
            with self.assertRaises(StorageFailure):
                ledger.create_invoice(user, cart)
        self.assertFalse(Invoice.objects.exists())
        self.assertEqual(Company.objects.get(pk=company.pk).pending_amount, Decimal("2000.00"))
