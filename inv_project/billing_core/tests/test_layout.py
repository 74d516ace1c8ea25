from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase

from ..services.layout import (NBSP, TABLE_HEADER, amount_in_words, amount_in_words_phrase,
                               build_layout, format_inr, format_ist, invoice_filename,
                               normalize_document)


class AmountInWordsTests(SimpleTestCase):
    def test_zero_and_small(self):
        self.assertEqual(amount_in_words(0), "Zero")
        self.assertEqual(amount_in_words(7), "Seven")
        self.assertEqual(amount_in_words(19), "Nineteen")
        self.assertEqual(amount_in_words(45), "Forty Five")

    def test_indian_grouping(self):
        self.assertEqual(amount_in_words(100000), "One Lakh")
        self.assertEqual(amount_in_words(10000000), "One Crore")
        self.assertEqual(amount_in_words(1800), "One Thousand Eight Hundred")
        self.assertEqual(
            amount_in_words(12345678),
            "One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight",
        )

    def test_paise_round_into_rupees(self):
        self.assertEqual(amount_in_words(Decimal("99.50")), "One Hundred")
        self.assertEqual(amount_in_words(Decimal("99.49")), "Ninety Nine")

    def test_large_crore_counts(self):
        self.assertEqual(amount_in_words(10000000000), "One Thousand Crore")

    def test_negative_reads_as_zero(self):
        self.assertEqual(amount_in_words(-5), "Zero")

    def test_phrase(self):
        self.assertEqual(amount_in_words_phrase(Decimal("3500.00")), "INR Three Thousand Five Hundred Only")


class FormattingTests(SimpleTestCase):
    def test_format_inr(self):
        self.assertEqual(format_inr(0), "0.00")
        self.assertEqual(format_inr(Decimal("999.5")), "999.50")
        self.assertEqual(format_inr(Decimal("1234567.891")), "12,34,567.89")
        self.assertEqual(format_inr(100000), "1,00,000.00")
        self.assertEqual(format_inr(Decimal("-1500")), "-1,500.00")

    def test_format_ist(self):
        moment = datetime(2026, 2, 19, 10, 15, 30, tzinfo=dt_timezone.utc)
        self.assertEqual(format_ist(moment), "19 Feb 2026, 03:45:30 pm")
        self.assertEqual(format_ist(date(2026, 2, 19)), "19 Feb 2026")
        self.assertEqual(format_ist(None), "")

    def test_invoice_filename(self):
        self.assertEqual(invoice_filename("INV/2602/0042"), "Invoice_INV_2602_0042.pdf")


class NormalizeTests(SimpleTestCase):
    def test_missing_everything_still_builds(self):
        document = normalize_document()
        self.assertEqual(document.lines, [])
        self.assertEqual(document.previous_balance, Decimal("0.00"))
        self.assertEqual(document.meta.mode_of_payment, "Cash/Bank")
        self.assertEqual(document.buyer.name, "")

    def test_line_amount_derived_when_absent(self):
        document = normalize_document(lines=[{"name": "Sand", "rate": "100", "quantity": "3",
                                              "discount": "10"}])
        self.assertEqual(document.lines[0].amount, Decimal("270"))
        self.assertEqual(document.lines[0].sl_no, 1)

    def test_bank_branch_and_ifsc_are_joined(self):
        document = normalize_document(bank={"branch": "Pune Main", "ifsc_code": "SBIN0000123"})
        self.assertEqual(document.bank.branch_and_ifsc, "Pune Main, SBIN0000123")

    def test_amounts_too_large_for_money_become_zero(self):
        document = normalize_document(
            previous_balance="1e40",
            lines=[{"name": "Sand", "rate": "1e30", "quantity": "2"},
                   {"name": "Bolts", "rate": "50", "quantity": "2", "boxes": "1e40"}],
        )
        self.assertEqual(document.previous_balance, Decimal("0.00"))
        self.assertEqual(document.lines[0].rate, Decimal("0"))
        self.assertEqual(document.lines[0].amount, Decimal("0"))
        self.assertIsNone(document.lines[1].boxes)
        layout = build_layout(document)
        self.assertEqual(layout.section("grand_total").rows, [["Grand Total", "Rs. 100.00"]])

    def test_huge_but_storable_lines_still_lay_out(self):
        # rate and quantity each fit, their product needs 32 digits
        document = normalize_document(lines=[{"name": "Sand", "rate": "1e15", "quantity": "1e15"}])
        layout = build_layout(document)
        self.assertTrue(layout.section("amount_in_words").rows[0][0].endswith("Crore Only"))

    def test_lines_that_are_not_a_list_are_ignored(self):
        for lines in (7, "Sand", {"name": "Sand"}):
            document = normalize_document(lines=lines)
            self.assertEqual(document.lines, [])
            self.assertIn("items", build_layout(document).kinds)


class LayoutTests(SimpleTestCase):
    def make_layout(self, previous_balance=0, tax_amount=0, lines=None):
        document = normalize_document(
            seller={"name": "Demo Traders", "address": "12, Market Road\nPune",
                    "gst_no": "27ABCDE1234F1Z5", "state": "Maharashtra", "state_code": "27"},
            buyer={"name": "Sharma Constructions Pvt Ltd", "state": "Maharashtra",
                   "state_code": "27"},
            meta={"invoice_no": "INV/2602/0042", "invoice_date": "19 Feb 2026"},
            bank={"account_name": "Demo Traders", "bank_name": "SBI"},
            lines=lines if lines is not None else [
                {"name": "Bolts", "rate": "50", "quantity": "36", "boxes": 3, "items_per_box": 12},
                {"name": "Sand", "rate": "0.333", "quantity": "3"},
            ],
            previous_balance=previous_balance,
            tax_amount=tax_amount,
        )
        return build_layout(document)

    def test_section_order(self):
        layout = self.make_layout()
        self.assertEqual(layout.kinds, [
            "title", "seller", "meta", "buyer", "items", "subtotal", "round_off",
            "grand_total", "amount_in_words", "balances", "declaration", "bank",
            "signature", "footer",
        ])

    def test_tax_row_only_when_nonzero(self):
        layout = self.make_layout(tax_amount="18")
        self.assertIn("tax", layout.kinds)
        self.assertEqual(layout.kinds.index("tax"), layout.kinds.index("round_off") + 1)

    def test_totals_and_words(self):
        layout = self.make_layout()
        self.assertEqual(layout.totals.subtotal, Decimal("1800.999"))
        self.assertEqual(layout.totals.grand_total, Decimal("1801.00"))
        self.assertEqual(layout.section("round_off").rows, [["Round Off", "Rs. 0.00"]])
        words = layout.section("amount_in_words")
        self.assertEqual(words.title, "Amount Chargeable (in words)")
        self.assertEqual(words.rows[0], ["INR One Thousand Eight Hundred One Only"])

    def test_boxes_description_and_columns(self):
        items = self.make_layout().section("items")
        self.assertEqual(items.rows[0], list(TABLE_HEADER))
        bolts = items.rows[1]
        self.assertEqual(bolts[1], "Bolts\n12NOS X 3 BOX")
        self.assertEqual(bolts[2:5], ["36", "3", "12"])
        self.assertEqual(bolts[6], "Rs. 1,800.00")
        sand = items.rows[2]
        self.assertEqual(sand[3:5], [NBSP, NBSP])

    def test_meta_grid_blanks_are_nbsp(self):
        meta = self.make_layout().section("meta")
        self.assertEqual(len(meta.rows), 8)
        self.assertTrue(all(len(row) == 4 for row in meta.rows))
        self.assertEqual(meta.rows[0], ["Invoice No.", "INV/2602/0042", "Dated", "19 Feb 2026"])
        self.assertEqual(meta.rows[1][3], "Cash/Bank")
        self.assertEqual(meta.rows[7][2:], [NBSP, NBSP])

    def test_balances(self):
        layout = self.make_layout(previous_balance="2000")
        self.assertEqual(layout.section("balances").rows, [
            ["Previous Balance:", "Rs. 2,000.00 Dr"],
            ["Current Balance:", "Rs. 3,801.00 Dr"],
        ])
        self.assertEqual(layout.current_balance, Decimal("3801.00"))

    def test_previous_balance_hidden_when_zero(self):
        rows = self.make_layout().section("balances").rows
        self.assertEqual(rows, [["Current Balance:", "Rs. 1,801.00 Dr"]])

    def test_empty_invoice(self):
        layout = self.make_layout(lines=[])
        self.assertEqual(len(layout.section("items").rows), 1)
        self.assertEqual(layout.totals.grand_total, Decimal("0.00"))
        self.assertEqual(layout.section("amount_in_words").rows[0], ["INR Zero Only"])

    def test_signature_and_filename(self):
        layout = self.make_layout()
        self.assertEqual(layout.section("signature").rows[0], ["for Demo Traders"])
        self.assertEqual(layout.filename, "Invoice_INV_2602_0042.pdf")
