from decimal import Decimal

from django.test import TestCase

from ..services import ledger, profile
from ..services.layout import build_layout, normalize_document
from ..services.pdf import build_invoice_document, invoice_pdf, render_invoice_pdf
from .helpers import make_cart, make_company, make_user


class InvoicePdfTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.company = make_company(self.user, pending="2000")
        cart = make_cart(self.company, ("Sand", "500", "3"))
        cart.add_item(name="Bolts", rate=Decimal("50"), boxes=3, items_per_box=12)
        self.created = ledger.create_invoice(self.user, cart)

    def test_renders_a_pdf(self):
        filename, content = invoice_pdf(self.created.invoice,
                                        previous_balance=self.created.previous_balance)
        self.assertTrue(content.startswith(b"%PDF"))
        self.assertEqual(filename, "Invoice_" + self.created.invoice.invoice_number.replace("/", "_") + ".pdf")

    def test_document_uses_saved_profile(self):
        profile.save_seller_info(self.user, name="Demo Traders", gst_no="27abcde1234f1z5")
        profile.save_bank_details(self.user, bank_name="SBI", branch="Pune", ifsc_code="sbin0000123")
        document = build_invoice_document(self.created.invoice, self.created.previous_balance)
        self.assertEqual(document.seller.name, "Demo Traders")
        self.assertEqual(document.seller.gst_no, "27ABCDE1234F1Z5")
        self.assertEqual(document.bank.branch_and_ifsc, "Pune, SBIN0000123")
        self.assertEqual(document.buyer.name, self.company.name)

    def test_balances_on_the_document(self):
        document = build_invoice_document(self.created.invoice, self.created.previous_balance)
        layout = build_layout(document)
        # 1500 + 1800
        self.assertEqual(layout.totals.grand_total, Decimal("3300.00"))
        self.assertEqual(layout.current_balance, Decimal("5300.00"))
        self.assertEqual(layout.section("items").rows[2][1], "Bolts\n12NOS X 3 BOX")

    def test_empty_document_still_renders(self):
        content = render_invoice_pdf(build_layout(normalize_document()))
        self.assertTrue(content.startswith(b"%PDF"))
