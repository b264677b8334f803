# ==============================================================================
# PRODUCT REPOSITORY
# ==============================================================================
# Besides plain CRUD this is the existence lookup the barcode allocator uses:
# barcode_exists(barcode, excluding_product_id).
# ==============================================================================

from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload

from thrift_pos.models import Category, Lot, Product, SaleItem
from thrift_pos.repositories.base import BaseRepository


class ProductRepository(BaseRepository):

    def _query(self):
        return select(Product).options(
            selectinload(Product.category),
            selectinload(Product.lot).selectinload(Lot.supplier),
        )

    def get(self, product_id: str) -> Optional[Product]:
        return self.session.execute(
            self._query().where(Product.id == product_id)
        ).scalar_one_or_none()

    def get_for_update(self, product_id: str) -> Optional[Product]:
        """Loads a product with a row lock where the database supports it."""
        return self.session.execute(
            select(Product).where(Product.id == product_id).with_for_update()
        ).scalar_one_or_none()

    def get_by_barcode(self, barcode: str) -> Optional[Product]:
        return self.session.execute(
            self._query().where(Product.barcode == barcode)
        ).scalar_one_or_none()

    def barcode_exists(self, barcode: str, excluding_product_id: str) -> bool:
        found = self.session.execute(
            select(Product.id)
            .where(Product.barcode == barcode, Product.id != excluding_product_id)
            .limit(1)
        ).first()
        return found is not None

    def list_all(self) -> List[Product]:
        """All products, newest first."""
        return list(self.session.execute(
            self._query().order_by(Product.created_at.desc())
        ).scalars())

    def list_available(self) -> List[Product]:
        """Products that can be sold: not sold and with stock left."""
        return list(self.session.execute(
            self._query()
            .where(Product.is_sold.is_(False), Product.stock_quantity > 0)
            .order_by(Product.created_at.desc())
        ).scalars())

    def search(self, query: str) -> List[Product]:
        """Case-insensitive match on name, barcode or category name."""
        pattern = f"%{query.lower()}%"
        return list(self.session.execute(
            self._query()
            .outerjoin(Category, Product.category_id == Category.id)
            .where(or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.barcode).like(pattern),
                func.lower(Category.name).like(pattern),
            ))
            .order_by(Product.created_at.desc())
        ).scalars())

    def count_unsold(self) -> int:
        return self.session.execute(
            select(func.count(Product.id)).where(Product.is_sold.is_(False))
        ).scalar_one()

    def has_sales(self, product_id: str) -> bool:
        found = self.session.execute(
            select(SaleItem.id).where(SaleItem.product_id == product_id).limit(1)
        ).first()
        return found is not None
