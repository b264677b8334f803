# ==============================================================================
# LOT SERVICE
# ==============================================================================
# A lot is a batch bought from one supplier. Its cost is spread over the
# number of items the operator declares when recording it:
#
#   total_cost    = purchase_cost + washing_cost
#   cost_per_item = total_cost / total_items   (rounded to 2 decimals)
#
# The divisor is the declared capacity, not the products cataloged so far.
# ==============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError

from thrift_pos.errors import ConflictError, NotFoundError, ValidationError
from thrift_pos.models import Lot, to_money, utcnow
from thrift_pos.models.entities import CENTS
from thrift_pos.repositories import Database, LotRepository, SupplierRepository
from thrift_pos.utils import clean_text, parse_int, parse_money

logger = logging.getLogger(__name__)


def compute_lot_costs(purchase_cost, washing_cost, total_items) -> Tuple[Decimal, Decimal]:
    """
    Returns (total_cost, cost_per_item) for a lot.

    >>> compute_lot_costs(Decimal("100.00"), Decimal("20.00"), 30)
    (Decimal('120.00'), Decimal('4.00'))
    """
    if total_items <= 0:
        raise ValidationError("Total items must be at least 1.")
    total_cost = to_money(purchase_cost) + to_money(washing_cost)
    cost_per_item = (total_cost / Decimal(total_items)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return total_cost, cost_per_item


def generate_lot_number(sequence):
    return f"LOT{int(sequence):04d}"


@dataclass
class LotSummary:
    """Figures shown on the lot detail page."""
    cataloged: int
    remaining: int
    stock_cost: Decimal
    stock_value: Decimal

    @property
    def potential_profit(self) -> Decimal:
        return self.stock_value - self.stock_cost

    @property
    def is_full(self) -> bool:
        return self.remaining <= 0

    def to_dict(self):
        return {
            "cataloged": self.cataloged,
            "remaining": self.remaining,
            "stock_cost": float(self.stock_cost),
            "stock_value": float(self.stock_value),
            "potential_profit": float(self.potential_profit),
        }


def summarize_lot(lot: Lot) -> LotSummary:
    unsold = [p for p in lot.products if not p.is_sold]
    return LotSummary(
        cataloged=len(lot.products),
        remaining=max(0, lot.total_items - len(lot.products)),
        stock_cost=sum((to_money(p.cost_price) * p.stock_quantity for p in unsold), Decimal("0.00")),
        stock_value=sum((to_money(p.selling_price) * p.stock_quantity for p in unsold), Decimal("0.00")),
    )


def _parse_purchase_date(value):
    if value is None or value == "":
        return utcnow()
    if isinstance(value, datetime):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d")
    except ValueError:
        raise ValidationError("Purchase date must be YYYY-MM-DD.")


class LotService:

    def __init__(self, db: Database, lot_repo: LotRepository, supplier_repo: SupplierRepository):
        self.db = db
        self.lot_repo = lot_repo
        self.supplier_repo = supplier_repo

    def list_lots(self) -> List[Lot]:
        return self.lot_repo.list_all()

    def get_lot(self, lot_id) -> Lot:
        lot = self.lot_repo.get(lot_id)
        if lot is None:
            raise NotFoundError("Lot not found.")
        return lot

    def overview(self, lots: List[Lot]):
        """Totals across lots: money invested and declared items."""
        return {
            "lot_count": len(lots),
            "total_investment": sum((to_money(lot.total_cost) for lot in lots), Decimal("0.00")),
            "total_items": sum(lot.total_items for lot in lots),
        }

    def create_lot(
        self,
        supplier_id,
        purchase_cost,
        washing_cost,
        total_items,
        notes=None,
        purchase_date=None,
    ) -> Lot:
        """
        Records a lot and stores its computed costs.

        Args:
            supplier_id: Existing supplier
            purchase_cost: Price paid for the batch
            washing_cost: Cleaning cost for the batch (may be 0)
            total_items: Declared number of items in the batch (>= 1)
            notes: Free text
            purchase_date: 'YYYY-MM-DD' or datetime, default now

        Returns:
            The persisted lot
        """
        purchase_cost = parse_money(purchase_cost, "Purchase cost")
        washing_cost = parse_money(
            washing_cost if washing_cost not in (None, "") else "0", "Washing cost"
        )
        total_items = parse_int(total_items, "Total items", minimum=1)
        total_cost, cost_per_item = compute_lot_costs(purchase_cost, washing_cost, total_items)

        try:
            with self.db.transaction():
                supplier = self.supplier_repo.get(supplier_id)
                if supplier is None:
                    raise NotFoundError("Supplier not found.")
                lot = self.lot_repo.add(Lot(
                    lot_number=generate_lot_number(self.lot_repo.count() + 1),
                    supplier_id=supplier.id,
                    purchase_cost=purchase_cost,
                    washing_cost=washing_cost,
                    total_cost=total_cost,
                    total_items=total_items,
                    cost_per_item=cost_per_item,
                    purchase_date=_parse_purchase_date(purchase_date),
                    notes=clean_text(notes),
                ))
        except IntegrityError:
            raise ConflictError("Another lot was recorded at the same time. Please try again.")

        logger.info("Lot %s created: %s items, total %s, %s per item",
                    lot.lot_number, total_items, total_cost, cost_per_item)
        return lot
