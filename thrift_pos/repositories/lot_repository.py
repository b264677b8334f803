# ==============================================================================
# LOT REPOSITORY
# ==============================================================================

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from thrift_pos.models import Lot, Product
from thrift_pos.repositories.base import BaseRepository


class LotRepository(BaseRepository):
    """Access to the lot table, always loading supplier and products."""

    def _query(self):
        return select(Lot).execution_options(populate_existing=True).options(
            selectinload(Lot.supplier),
            selectinload(Lot.products).selectinload(Product.category),
        )

    def get(self, lot_id: str) -> Optional[Lot]:
        return self.session.execute(
            self._query().where(Lot.id == lot_id)
        ).scalar_one_or_none()

    def list_all(self) -> List[Lot]:
        """Lots ordered by purchase date, newest first."""
        return list(self.session.execute(
            self._query().order_by(Lot.purchase_date.desc(), Lot.created_at.desc())
        ).scalars())

    def count(self) -> int:
        return self.session.execute(select(func.count(Lot.id))).scalar_one()

    def product_count(self, lot_id: str) -> int:
        return self.session.execute(
            select(func.count(Product.id)).where(Product.lot_id == lot_id)
        ).scalar_one()
