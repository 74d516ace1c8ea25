from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from django.conf import settings
from django.db.models import DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from ..models import Company, Invoice
from .money import q2

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class DashboardSummary:
    today_sales: Decimal
    month_sales: Decimal
    total_outstanding: Decimal
    overdue_count: int
    due_soon_count: int

    def as_dict(self):
        return {
            "today_sales": str(self.today_sales),
            "month_sales": str(self.month_sales),
            "total_outstanding": str(self.total_outstanding),
            "overdue_count": self.overdue_count,
            "due_soon_count": self.due_soon_count,
        }


def _sum(qs, field):
    # SQLite drops the column scale on Sum
    return q2(qs.aggregate(
        total=Coalesce(Sum(field), ZERO, output_field=DecimalField(max_digits=18, decimal_places=2))
    )["total"])


def dashboard_summary(owner, now=None, due_soon_days=7) -> DashboardSummary:
    """Summary cards: today's and this month's sales, total outstanding,
    overdue invoices and invoices due within due_soon_days.

    Day and month boundaries follow the display time zone.
    """
    zone = ZoneInfo(settings.BILLING["DISPLAY_TIME_ZONE"])
    local_now = timezone.localtime(now or timezone.now(), zone)
    today = local_now.date()
    day_start = datetime.combine(today, time.min, tzinfo=zone)
    month_start = datetime.combine(today.replace(day=1), time.min, tzinfo=zone)

    invoices = Invoice.objects.for_owner(owner)
    unpaid = (
        invoices.exclude(status="paid")
        .annotate(due=ExpressionWrapper(
            F("total_amount") - F("amount_received"),
            output_field=DecimalField(max_digits=18, decimal_places=2),
        ))
        .filter(due__gt=0, due_date__isnull=False)
    )

    return DashboardSummary(
        today_sales=_sum(invoices.filter(created_at__gte=day_start), "total_amount"),
        month_sales=_sum(invoices.filter(created_at__gte=month_start), "total_amount"),
        total_outstanding=_sum(Company.objects.active(owner), "pending_amount"),
        overdue_count=unpaid.filter(due_date__lt=today).count(),
        due_soon_count=unpaid.filter(
            due_date__gte=today, due_date__lte=today + timedelta(days=due_soon_days)
        ).count(),
    )
