# ==============================================================================
# CATALOG REPOSITORIES - Categories and suppliers
# ==============================================================================

from typing import List, Optional

from sqlalchemy import func, select

from thrift_pos.models import Category, Lot, Product, Supplier
from thrift_pos.repositories.base import BaseRepository


class CategoryRepository(BaseRepository):

    def get(self, category_id: str) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.session.execute(
            select(Category).where(func.lower(Category.name) == name.lower())
        ).scalar_one_or_none()

    def list_all(self) -> List[Category]:
        return list(self.session.execute(
            select(Category).order_by(Category.name)
        ).scalars())

    def product_count(self, category_id: str) -> int:
        return self.session.execute(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        ).scalar_one()


class SupplierRepository(BaseRepository):

    def get(self, supplier_id: str) -> Optional[Supplier]:
        return self.session.get(Supplier, supplier_id)

    def list_all(self) -> List[Supplier]:
        return list(self.session.execute(
            select(Supplier).order_by(Supplier.name)
        ).scalars())

    def lot_count(self, supplier_id: str) -> int:
        return self.session.execute(
            select(func.count(Lot.id)).where(Lot.supplier_id == supplier_id)
        ).scalar_one()
