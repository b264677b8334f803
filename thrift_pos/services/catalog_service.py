# ==============================================================================
# CATALOG SERVICE - Categories and suppliers
# ==============================================================================
# Simple named reference data. These are the only entities that can be
# deleted, and only while nothing references them.
# ==============================================================================

import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from thrift_pos.errors import ConflictError, InUseError, NotFoundError
from thrift_pos.models import Category, Supplier
from thrift_pos.repositories import CategoryRepository, Database, SupplierRepository
from thrift_pos.utils import clean_text

logger = logging.getLogger(__name__)


class CatalogService:

    def __init__(self, db: Database, category_repo: CategoryRepository, supplier_repo: SupplierRepository):
        self.db = db
        self.category_repo = category_repo
        self.supplier_repo = supplier_repo

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def list_categories(self) -> List[Category]:
        return self.category_repo.list_all()

    def create_category(self, name) -> Category:
        name = clean_text(name, "Category name", required=True, max_length=120)
        try:
            with self.db.transaction():
                if self.category_repo.get_by_name(name):
                    raise ConflictError(f'Category "{name}" already exists.')
                category = self.category_repo.add(Category(name=name))
        except IntegrityError:
            raise ConflictError(f'Category "{name}" already exists.')
        logger.info("Category created: %s", name)
        return category

    def delete_category(self, category_id) -> None:
        with self.db.transaction():
            category = self.category_repo.get(category_id)
            if category is None:
                raise NotFoundError("Category not found.")
            if self.category_repo.product_count(category_id):
                raise InUseError(f'Category "{category.name}" still has products.')
            self.category_repo.delete(category)
        logger.info("Category deleted: %s", category_id)

    # =========================================================================
    # SUPPLIERS
    # =========================================================================

    def list_suppliers(self) -> List[Supplier]:
        return self.supplier_repo.list_all()

    def create_supplier(self, name, phone=None, notes=None) -> Supplier:
        supplier = Supplier(
            name=clean_text(name, "Supplier name", required=True, max_length=120),
            phone=clean_text(phone, "Phone", max_length=40),
            notes=clean_text(notes),
        )
        with self.db.transaction():
            self.supplier_repo.add(supplier)
        logger.info("Supplier created: %s", supplier.name)
        return supplier

    def delete_supplier(self, supplier_id) -> None:
        with self.db.transaction():
            supplier = self.supplier_repo.get(supplier_id)
            if supplier is None:
                raise NotFoundError("Supplier not found.")
            if self.supplier_repo.lot_count(supplier_id):
                raise InUseError(f'Supplier "{supplier.name}" still has lots.')
            self.supplier_repo.delete(supplier)
        logger.info("Supplier deleted: %s", supplier_id)
