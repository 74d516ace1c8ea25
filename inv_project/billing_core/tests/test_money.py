from decimal import Decimal

from django.test import SimpleTestCase, override_settings
from django.conf import settings

from ..exceptions import LedgerValidationError
from ..services.money import (apply_delta, check_amount, compute_totals, current_balance,
                              line_total, q2, to_amount, to_decimal, validate_line_inputs)


def billing(**overrides):
    return override_settings(BILLING={**settings.BILLING, **overrides})


class CoercionTests(SimpleTestCase):
    def test_float_goes_through_str(self):
        self.assertEqual(to_decimal(0.1), Decimal("0.1"))

    def test_unparsable_values_become_default(self):
        self.assertEqual(to_decimal("abc"), Decimal("0"))
        self.assertEqual(to_decimal(None, Decimal("1")), Decimal("1"))
        self.assertEqual(to_decimal(float("nan")), Decimal("0"))
        # bools are not amounts
        self.assertEqual(to_decimal(True), Decimal("0"))

    def test_q2_rounds_half_away_from_zero(self):
        self.assertEqual(q2("2.345"), Decimal("2.35"))
        self.assertEqual(q2("-2.345"), Decimal("-2.35"))
        self.assertEqual(q2("2.344"), Decimal("2.34"))

    def test_q2_handles_values_past_default_precision(self):
        self.assertEqual(str(q2("12345678901234567890123456789.555")),
                         "12345678901234567890123456789.56")
        self.assertEqual(q2("1e40"), Decimal("1e40"))
        self.assertEqual(q2("1e40").as_tuple().exponent, -2)

    def test_amounts_beyond_money_columns(self):
        # 16 integer digits fit a max_digits=18 column
        self.assertEqual(to_amount("9999999999999999.99"), Decimal("9999999999999999.99"))
        self.assertEqual(to_amount("1e16"), Decimal("0"))
        self.assertEqual(to_amount("-1e30", Decimal("5")), Decimal("5"))
        self.assertEqual(check_amount("250.5"), Decimal("250.5"))
        with self.assertRaises(LedgerValidationError):
            check_amount("1e40", "Payment amount")


class LineTotalTests(SimpleTestCase):
    def test_plain_line(self):
        self.assertEqual(line_total(Decimal("50"), 36), Decimal("1800"))

    def test_discount_is_a_percentage(self):
        self.assertEqual(line_total(Decimal("100"), 3, Decimal("10")), Decimal("270"))

    def test_line_total_is_not_rounded(self):
        self.assertEqual(line_total(Decimal("10.005"), 1), Decimal("10.005"))

    def test_invalid_inputs_are_rejected(self):
        with self.assertRaises(LedgerValidationError):
            validate_line_inputs(Decimal("-1"), 1)
        with self.assertRaises(LedgerValidationError):
            validate_line_inputs(1, Decimal("-2"))
        with self.assertRaises(LedgerValidationError):
            validate_line_inputs(1, 1, Decimal("101"))
        with self.assertRaises(LedgerValidationError):
            validate_line_inputs("1e30", 1)
        with self.assertRaises(LedgerValidationError):
            # each factor fits, the product does not
            validate_line_inputs("1e10", "1e10")


class TotalsTests(SimpleTestCase):
    def test_subtotal_rounded_once_with_round_off(self):
        totals = compute_totals([
            (Decimal("10.005"), 1, 0),
            (Decimal("0.333"), 3, 0),
        ], with_tax=False)
        self.assertEqual(totals.subtotal, Decimal("11.004"))
        self.assertEqual(totals.round_off, Decimal("-0.004"))
        self.assertEqual(totals.grand_total, Decimal("11.00"))
        self.assertEqual(totals.rounded_subtotal, Decimal("11.000"))
        self.assertLess(abs(totals.round_off), Decimal("0.01"))

    def test_tax_zero_when_disabled(self):
        totals = compute_totals([(Decimal("100"), 1, 0, Decimal("18"))], with_tax=False)
        self.assertEqual(totals.tax, Decimal("0.00"))
        self.assertEqual(totals.grand_total, Decimal("100.00"))

    def test_tax_per_line_when_enabled(self):
        totals = compute_totals([
            (Decimal("100"), 1, 0, Decimal("18")),
            (Decimal("50"), 2, Decimal("10"), Decimal("5")),
        ], with_tax=True)
        # 18.00 + 90 * 5% = 22.50
        self.assertEqual(totals.tax, Decimal("22.50"))
        self.assertEqual(totals.grand_total, Decimal("212.50"))

    def test_tax_follows_setting(self):
        lines = [(Decimal("100"), 1, 0, Decimal("28"))]
        with billing(TAX_ENABLED=True):
            self.assertEqual(compute_totals(lines).grand_total, Decimal("128.00"))
        with billing(TAX_ENABLED=False):
            self.assertEqual(compute_totals(lines).grand_total, Decimal("100.00"))

    def test_empty_cart(self):
        totals = compute_totals([])
        self.assertEqual(totals.grand_total, Decimal("0.00"))


class BalanceTests(SimpleTestCase):
    def test_apply_delta_clamps_at_zero(self):
        self.assertEqual(apply_delta(Decimal("100"), Decimal("-250")), Decimal("0.00"))

    def test_apply_delta_adds(self):
        self.assertEqual(apply_delta(Decimal("2000"), Decimal("1500")), Decimal("3500.00"))

    def test_current_balance(self):
        self.assertEqual(current_balance(Decimal("2000"), Decimal("1500.00")), Decimal("3500.00"))
        self.assertEqual(current_balance(0, Decimal("0.00")), Decimal("0.00"))


class LineTotalBoundTests(SimpleTestCase):
    def test_total_never_exceeds_amount(self):
        for rate in ("0", "0.01", "49.99", "1000"):
            for quantity in ("0", "1", "2.5", "36"):
                for discount in ("0", "12.5", "100"):
                    total = line_total(Decimal(rate), Decimal(quantity), Decimal(discount))
                    expected = Decimal(rate) * Decimal(quantity) * (1 - Decimal(discount) / 100)
                    self.assertEqual(total, expected)
                    self.assertLessEqual(total, Decimal(rate) * Decimal(quantity))
