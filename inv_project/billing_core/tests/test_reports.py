from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase

from ..models import Invoice
from ..services import ledger
from ..services.reports import dashboard_summary
from .helpers import make_cart, make_company, make_user


class DashboardTests(TestCase):
    def setUp(self):
        self.user = make_user()
        # 10:00 IST on 19 Feb 2026
        self.now = datetime(2026, 2, 19, 4, 30, tzinfo=dt_timezone.utc)

    def test_empty_tenant_shows_two_decimals(self):
        self.assertEqual(dashboard_summary(self.user, now=self.now).as_dict(), {
            "today_sales": "0.00",
            "month_sales": "0.00",
            "total_outstanding": "0.00",
            "overdue_count": 0,
            "due_soon_count": 0,
        })

    def test_sales_outstanding_and_due_dates(self):
        company = make_company(self.user, pending="250")
        today = ledger.create_invoice(self.user, make_cart(company, ("Sand", "100", "1")),
                                      now=self.now).invoice
        earlier = ledger.create_invoice(self.user, make_cart(company, ("Bolts", "40.5", "2")),
                                        now=self.now - timedelta(days=5)).invoice
        Invoice.objects.filter(pk=today.pk).update(due_date=self.now.date() + timedelta(days=3))
        Invoice.objects.filter(pk=earlier.pk).update(due_date=self.now.date() - timedelta(days=1))

        summary = dashboard_summary(self.user, now=self.now)
        self.assertEqual(summary.as_dict()["today_sales"], "100.00")
        self.assertEqual(summary.as_dict()["month_sales"], "181.00")
        self.assertEqual(summary.total_outstanding, Decimal("431.00"))
        self.assertEqual((summary.overdue_count, summary.due_soon_count), (1, 1))
