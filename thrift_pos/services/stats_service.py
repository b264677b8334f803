# ==============================================================================
# STATS SERVICE - Dashboard figures
# ==============================================================================
# Rolling windows, computed from "now":
#
#   current  = [now - 30 days, now]
#   previous = [now - 60 days, now - 30 days)
#
# Percentage change between windows:
#   (current - previous) / previous * 100   when previous > 0
#   100                                     when previous == 0 and current > 0
#   0                                       otherwise
# ==============================================================================

from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from thrift_pos.models import utcnow
from thrift_pos.repositories import ProductRepository, SalesRepository

WINDOW_DAYS = 30
RECENT_SALES_LIMIT = 10

_ONE_TICK = timedelta(microseconds=1)


def percent_change(current, previous) -> float:
    """
    Period-over-period change in percent.

    >>> percent_change(150, 100)
    50.0
    >>> percent_change(10, 0)
    100.0
    """
    current = Decimal(current)
    previous = Decimal(previous)
    if previous > 0:
        change = (current - previous) / previous * 100
        return float(change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    if current > 0:
        return 100.0
    return 0.0


class StatsService:
    """
    Dashboard statistics.

    Only reads. Every method takes an optional `now` so the windows can be
    pinned in tests.
    """

    def __init__(self, sales_repo: SalesRepository, product_repo: ProductRepository):
        self.sales_repo = sales_repo
        self.product_repo = product_repo

    def _windows(self, now):
        now = now or utcnow()
        current_start = now - timedelta(days=WINDOW_DAYS)
        previous_start = now - timedelta(days=2 * WINDOW_DAYS)
        return now, current_start, previous_start

    def get_dashboard_stats(self, now=None) -> Dict[str, Any]:
        """
        Revenue, sales count, profit and available products with their
        change against the previous 30 days.
        """
        now, current_start, previous_start = self._windows(now)
        current_end = now + _ONE_TICK

        revenue, sales = self.sales_repo.totals_between(current_start, current_end)
        prev_revenue, prev_sales = self.sales_repo.totals_between(previous_start, current_start)
        profit = self.sales_repo.profit_between(current_start, current_end)
        prev_profit = self.sales_repo.profit_between(previous_start, current_start)

        return {
            "total_revenue": float(revenue),
            "total_sales": sales,
            "total_products": self.product_repo.count_unsold(),
            "total_profit": float(profit),
            "revenue_change": percent_change(revenue, prev_revenue),
            "sales_change": percent_change(sales, prev_sales),
            # No product history is kept
            "products_change": 0.0,
            "profit_change": percent_change(profit, prev_profit),
        }

    def get_sales_over_time(self, now=None) -> List[Dict[str, Any]]:
        """Revenue and sale count per calendar date with sales, oldest first."""
        now, current_start, _ = self._windows(now)
        per_day = OrderedDict()
        for created_at, amount in self.sales_repo.amounts_between(current_start, now + _ONE_TICK):
            day = created_at.date().isoformat()
            bucket = per_day.setdefault(day, {"date": day, "revenue": Decimal("0.00"), "sales": 0})
            bucket["revenue"] += amount
            bucket["sales"] += 1
        return [
            {"date": b["date"], "revenue": float(b["revenue"]), "sales": b["sales"]}
            for b in per_day.values()
        ]

    def get_recent_sales(self, limit=RECENT_SALES_LIMIT) -> List[Dict[str, Any]]:
        return [
            {
                "id": sale.id,
                "total_amount": float(sale.total_amount),
                "payment_method": sale.payment_method.value,
                "payment_method_label": sale.payment_method.label,
                "item_count": sale.item_count,
                "created_at": sale.created_at.isoformat(),
            }
            for sale in self.sales_repo.recent(limit)
        ]
