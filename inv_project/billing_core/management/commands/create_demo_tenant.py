from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from billing_core.models import Company, InventoryItem
from billing_core.services import customers, inventory, ledger, profile
from billing_core.services.cart import InvoiceCart

User = get_user_model()

DEMO_ITEMS = [
    # name, hsn, rate, stock, unit, gst_rate
    ("Steel Bars (10mm)", "72142000", "5500", 150, "MT", "18"),
    ("Cement (OPC 53)", "25231000", "380", 500, "Bags", "28"),
    ("TMT Bars (12mm)", "72142000", "5800", 80, "MT", "18"),
    ("Bricks (Red)", "69041000", "8", 10000, "Pcs", "12"),
    ("Sand (River)", "26059000", "2500", 200, "CFT", "5"),
    ("PVC Pipes (4\")", "39172900", "450", 250, "Pcs", "18"),
]

DEMO_COMPANIES = [
    # name, address, state, state_code, phone, opening balance
    ("Sharma Constructions Pvt Ltd", "123, Industrial Area, Sector 5", "Maharashtra", "27",
     "+91 90000 00001", "2000"),
    ("BuildWell Infrastructure", "456, Business Park, Phase 2", "Karnataka", "29",
     "+91 90000 00002", "2000"),
    ("Raj Builders & Developers", "789, Commercial Complex, Ring Road", "Delhi", "07",
     "+91 90000 00003", "0"),
]


class Command(BaseCommand):
    help = (
        "Create a demo user with seller profile, inventory, customers and a sample invoice."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--business-name",
            default="Demo Traders",
            help="Seller name printed on invoices.",
        )
        parser.add_argument(
            "--username", default="demo", help="Username for the demo user."
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    def handle(self, *args, **options):
        username = options["username"]
        password = options["password"]

        # 1. User (the owner of every demo row)
        user, created = User.objects.get_or_create(
            username=username, defaults={"email": f"{username}@example.com"}
        )
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.SUCCESS(f"Created user: {username} (pw={password})"))
        else:
            self.stdout.write(f"Using existing user: {username}")

        # 2. Seller and bank profile
        profile.save_seller_info(
            user,
            name=options["business_name"],
            address="12, Market Road",
            city="Pune",
            state="Maharashtra",
            state_code="27",
            pincode="411001",
            gst_no="27abcde1234f1z5",
            phone="+91 90000 00000",
        )
        profile.save_bank_details(
            user,
            account_name=options["business_name"],
            bank_name="State Bank of India",
            account_number="00000012345678",
            ifsc_code="sbin0000123",
            branch="Pune Main",
        )
        self.stdout.write(self.style.SUCCESS("Saved seller profile and bank details"))

        # 3. Inventory (skip names that already exist)
        for name, hsn, rate, stock, unit, gst_rate in DEMO_ITEMS:
            if InventoryItem.objects.for_owner(user).filter(name__iexact=name).exists():
                continue
            inventory.add_item(user, name=name, hsn=hsn, rate=rate, stock=stock,
                               unit=unit, gst_rate=gst_rate)
        self.stdout.write(self.style.SUCCESS(f"Inventory: {len(DEMO_ITEMS)} items"))

        # 4. Customers with opening balances
        for name, address, state, code, phone, opening in DEMO_COMPANIES:
            if Company.objects.active(user).filter(name=name).exists():
                continue
            customers.create_company(user, name=name, address=address, state=state,
                                     state_code=code, phone=phone, pending_amount=opening)
        self.stdout.write(self.style.SUCCESS(f"Customers: {len(DEMO_COMPANIES)}"))

        # 5. One invoice and one payment through the ledger
        company = Company.objects.active(user).order_by("pk").first()
        cart = InvoiceCart.from_session(None)
        cart.set_company(company)
        cement = InventoryItem.objects.for_owner(user).get(name="Cement (OPC 53)")
        bricks = InventoryItem.objects.for_owner(user).get(name="Bricks (Red)")
        cart.add_item(item=cement, quantity=Decimal("10"))
        cart.add_item(item=bricks, boxes=5, items_per_box=100)
        created_inv = ledger.create_invoice(user, cart)
        self.stdout.write(self.style.SUCCESS(
            f"Created invoice {created_inv.invoice.invoice_number}: "
            f"pending {created_inv.previous_balance} -> {created_inv.new_balance}"
        ))

        paid = ledger.record_payment(user, company.pk, Decimal("1000"), note="Demo payment")
        self.stdout.write(self.style.SUCCESS(
            f"Recorded payment: pending {paid.previous_balance} -> {paid.new_balance}"
        ))
        self.stdout.write(self.style.SUCCESS("Demo tenant setup complete!"))
