import django.db.models.deletion
import django.db.models.functions.text
import django.utils.timezone
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("gst_no", models.CharField(blank=True, default="", max_length=32)),
                ("address", models.TextField(blank=True, default="")),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                ("state_code", models.CharField(blank=True, default="", max_length=8)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("pending_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("last_transaction", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("is_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="companies", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "companies",
                "verbose_name_plural": "companies",
                "indexes": [
                    models.Index(fields=["owner", "name"], name="companies_owner_name_idx"),
                    models.Index(fields=["owner", "is_deleted"], name="companies_owner_deleted_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(pending_amount__gte=0), name="company_pending_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("hsn", models.CharField(blank=True, default="", max_length=20)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("stock", models.IntegerField(default=0)),
                ("unit", models.CharField(default="pcs", max_length=20)),
                ("gst_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="inventory_items", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "inventory_items",
                "indexes": [
                    models.Index(fields=["owner", "name"], name="inv_items_owner_name_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(django.db.models.functions.text.Lower("name"), models.F("owner"), name="uq_owner_item_name_ci"),
                    models.CheckConstraint(condition=models.Q(rate__gte=0), name="item_rate_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=32)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("amount_received", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("status", models.CharField(choices=[("sent", "Sent"), ("updated", "Updated"), ("paid", "Paid")], default="sent", max_length=10)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="invoices", to="billing_core.company")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="invoices", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "invoices",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["owner", "invoice_number"], name="invoices_owner_number_idx"),
                    models.Index(fields=["owner", "company"], name="invoices_owner_company_idx"),
                    models.Index(fields=["owner", "created_at"], name="invoices_owner_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("owner", "invoice_number"), name="uq_invoice_owner_number"),
                    models.CheckConstraint(
                        condition=models.Q(("total_amount__gte", 0), ("tax_amount__gte", 0), ("amount_received__gte", 0)),
                        name="inv_non_negative_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceLineItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_name", models.CharField(max_length=200)),
                ("item_hsn", models.CharField(blank=True, default="", max_length=20)),
                ("item_unit", models.CharField(blank=True, default="", max_length=20)),
                ("quantity", models.DecimalField(decimal_places=2, default=Decimal("1"), max_digits=14)),
                ("unit_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("tax_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("line_total", models.DecimalField(decimal_places=8, default=Decimal("0"), max_digits=28)),
                ("boxes", models.PositiveIntegerField(blank=True, null=True)),
                ("items_per_box", models.PositiveIntegerField(blank=True, null=True)),
                ("position", models.PositiveIntegerField(default=0)),
                ("inventory_item", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="invoice_lines", to="billing_core.inventoryitem")),
                ("invoice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="billing_core.invoice")),
            ],
            options={
                "db_table": "invoice_line_items",
                "ordering": ["position", "id"],
                "indexes": [
                    models.Index(fields=["invoice", "position"], name="inv_lines_invoice_pos_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0), ("unit_price__gte", 0)),
                        name="invl_non_negative_amounts",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("discount__gte", 0), ("discount__lte", 100)),
                        name="invl_discount_percent_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CompanyPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("previous_balance", models.DecimalField(decimal_places=2, max_digits=18)),
                ("new_balance", models.DecimalField(decimal_places=2, max_digits=18)),
                ("note", models.TextField(blank=True, null=True)),
                ("idempotency_key", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="billing_core.company")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="company_payments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "company_payments",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["owner", "company", "created_at"], name="payments_owner_company_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("idempotency_key__isnull", False)),
                        fields=("owner", "idempotency_key"),
                        name="uq_payment_owner_idempotency_key",
                    ),
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payment_amount_positive"),
                    models.CheckConstraint(condition=models.Q(("new_balance__gte", 0)), name="payment_new_balance_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SellerInfo",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("address", models.TextField(blank=True, default="")),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                ("state_code", models.CharField(blank=True, default="", max_length=8)),
                ("pincode", models.CharField(blank=True, default="", max_length=12)),
                ("gst_no", models.CharField(blank=True, default="", max_length=32)),
                ("pan", models.CharField(blank=True, default="", max_length=16)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("website", models.CharField(blank=True, default="", max_length=200)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="seller_info", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "seller_info",
                "verbose_name_plural": "seller info",
            },
        ),
        migrations.CreateModel(
            name="BankDetails",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account_name", models.CharField(blank=True, default="", max_length=200)),
                ("bank_name", models.CharField(blank=True, default="", max_length=200)),
                ("account_number", models.CharField(blank=True, default="", max_length=40)),
                ("ifsc_code", models.CharField(blank=True, default="", max_length=20)),
                ("branch", models.CharField(blank=True, default="", max_length=200)),
                ("swift_code", models.CharField(blank=True, default="", max_length=20)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="bank_details", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "bank_details",
                "verbose_name_plural": "bank details",
            },
        ),
    ]
