# ==============================================================================
# SALES REPOSITORY
# ==============================================================================
# Sales, their line items, and the aggregate queries behind the dashboard.
# Time windows are half-open: start <= created_at < end (end=None: no limit).
# ==============================================================================

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from thrift_pos.models import Product, Sale, SaleItem, to_money
from thrift_pos.repositories.base import BaseRepository


def _window(query, start, end):
    query = query.where(Sale.created_at >= start)
    if end is not None:
        query = query.where(Sale.created_at < end)
    return query


class SalesRepository(BaseRepository):

    def get(self, sale_id: str) -> Optional[Sale]:
        return self.session.execute(
            select(Sale)
            .options(selectinload(Sale.items).selectinload(SaleItem.product))
            .where(Sale.id == sale_id)
        ).scalar_one_or_none()

    def recent(self, limit: int = 10) -> List[Sale]:
        """Latest sales with their items loaded, newest first."""
        return list(self.session.execute(
            select(Sale)
            .options(selectinload(Sale.items).selectinload(SaleItem.product))
            .order_by(Sale.created_at.desc())
            .limit(limit)
        ).scalars())

    def totals_between(self, start: datetime, end: Optional[datetime] = None) -> Tuple[Decimal, int]:
        row = self.session.execute(
            _window(
                select(
                    func.coalesce(func.sum(Sale.total_amount), 0),
                    func.count(Sale.id),
                ),
                start, end,
            )
        ).one()
        return to_money(row[0] or 0), int(row[1] or 0)

    def profit_between(self, start: datetime, end: Optional[datetime] = None) -> Decimal:
        """Sum of (unit_price - product cost) * quantity over the window."""
        line_profit = (SaleItem.unit_price - Product.cost_price) * SaleItem.quantity
        value = self.session.execute(
            _window(
                select(func.coalesce(func.sum(line_profit), 0))
                .select_from(SaleItem)
                .join(Sale, SaleItem.sale_id == Sale.id)
                .join(Product, SaleItem.product_id == Product.id),
                start, end,
            )
        ).scalar_one()
        return to_money(value or 0)

    def amounts_between(self, start: datetime, end: Optional[datetime] = None) -> List[Tuple[datetime, Decimal]]:
        """(created_at, total_amount) for every sale in the window, oldest first."""
        rows = self.session.execute(
            _window(
                select(Sale.created_at, Sale.total_amount).order_by(Sale.created_at),
                start, end,
            )
        ).all()
        return [(created_at, to_money(amount)) for created_at, amount in rows]
