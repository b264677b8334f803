# ==============================================================================
# INVENTORY SERVICE
# ==============================================================================
# Products and their stock:
#   - creation with automatic barcode allocation
#   - price updates, mark-as-sold, deletion
#   - stock additions from the barcode scanner
#   - scan lookup (barcode first, then free-text search)
#
# RULE: a sold product has stock 0. Adding stock to it makes it sellable
# again.
# ==============================================================================

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from thrift_pos.errors import (
    BarcodeNotFoundError,
    ConflictError,
    DuplicateBarcodeError,
    InUseError,
    LotCapacityError,
    NoSearchResultsError,
    NotFoundError,
    ValidationError,
)
from thrift_pos.models import Product, new_id, to_money, utcnow
from thrift_pos.performance_logger import profile_function
from thrift_pos.repositories import (
    CategoryRepository,
    Database,
    LotRepository,
    ProductRepository,
)
from thrift_pos.services.barcode_service import BarcodeAllocator, looks_like_barcode
from thrift_pos.utils import clean_text, parse_int, parse_money

logger = logging.getLogger(__name__)

_MANUAL_BARCODE = re.compile(r'^[0-9A-Za-z]{1,64}$')


@dataclass
class ScanResult:
    """Outcome of a scan: an exact barcode hit, or search matches."""
    query: str
    product: Optional[Product] = None
    matches: List[Product] = field(default_factory=list)

    @property
    def exact(self) -> bool:
        return self.product is not None

    def to_dict(self):
        return {
            "ok": True,
            "query": self.query,
            "exact": self.exact,
            "product": self.product.to_dict() if self.product else None,
            "matches": [p.to_dict() for p in self.matches],
        }


@dataclass
class StockUpdateResult:
    products_updated: int
    units_added: int
    products: List[Product] = field(default_factory=list)

    def to_dict(self):
        return {
            "ok": True,
            "products_updated": self.products_updated,
            "units_added": self.units_added,
            "products": [p.to_dict() for p in self.products],
        }


def _is_barcode_violation(exc: IntegrityError) -> bool:
    return "barcode" in str(getattr(exc, "orig", exc)).lower()


class InventoryService:
    """
    Product catalog and stock.

    Responsibilities:
    - Create products and allocate their barcodes
    - Keep the sold/stock invariant
    - Stock additions (single and bulk scan)
    - Scan lookup for the add-stock and checkout screens
    """

    def __init__(
        self,
        db: Database,
        product_repo: ProductRepository,
        lot_repo: LotRepository,
        category_repo: CategoryRepository,
        allocator: BarcodeAllocator = None,
    ):
        self.db = db
        self.product_repo = product_repo
        self.lot_repo = lot_repo
        self.category_repo = category_repo
        self.allocator = allocator or BarcodeAllocator(product_repo)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_products(self) -> List[Product]:
        return self.product_repo.list_all()

    def list_available(self) -> List[Product]:
        return self.product_repo.list_available()

    def get_product(self, product_id) -> Product:
        product = self.product_repo.get(product_id)
        if product is None:
            raise NotFoundError("Product not found.")
        return product

    def inventory_summary(self, products: Iterable[Product]) -> Dict[str, Any]:
        """Unsold item count, value at selling price and cost, average margin."""
        unsold = [p for p in products if not p.is_sold]
        value = sum((to_money(p.selling_price) * p.stock_quantity for p in unsold), Decimal("0.00"))
        cost = sum((to_money(p.cost_price) * p.stock_quantity for p in unsold), Decimal("0.00"))
        margin = Decimal("0.0")
        if value > 0:
            margin = ((value - cost) / value * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return {
            "available_count": len(unsold),
            "inventory_value": value,
            "inventory_cost": cost,
            "margin_percent": margin,
        }

    # =========================================================================
    # CREATION
    # =========================================================================

    @profile_function(name="Create product")
    def create_product(
        self,
        name,
        selling_price,
        cost_price=None,
        barcode=None,
        category_id=None,
        lot_id=None,
        stock_quantity=1,
    ) -> Product:
        """
        Creates a product; allocates a barcode when none is supplied.

        Insert and barcode assignment happen in one transaction. When the
        product belongs to a lot and no cost is given, the lot's cost per
        item is used.

        Raises:
            ValidationError: bad input
            NotFoundError: unknown category or lot
            LotCapacityError: the lot already holds its declared items
            DuplicateBarcodeError: barcode already used by another product
        """
        name = clean_text(name, "Product name", required=True, max_length=200)
        selling_price = parse_money(selling_price, "Selling price")
        stock_quantity = parse_int(
            1 if stock_quantity in (None, "") else stock_quantity, "Stock quantity", minimum=0
        )
        barcode = clean_text(barcode)
        if barcode is not None and not _MANUAL_BARCODE.match(barcode):
            raise ValidationError("Barcode may only contain letters and digits (max 64).")
        category_id = clean_text(category_id)
        lot_id = clean_text(lot_id)

        try:
            with self.db.transaction():
                if category_id and self.category_repo.get(category_id) is None:
                    raise NotFoundError("Category not found.")

                lot = None
                if lot_id:
                    lot = self.lot_repo.get(lot_id)
                    if lot is None:
                        raise NotFoundError("Lot not found.")
                    if self.lot_repo.product_count(lot.id) >= lot.total_items:
                        raise LotCapacityError(
                            f"Lot {lot.lot_number} already holds its {lot.total_items} items."
                        )

                if cost_price in (None, ""):
                    if lot is None:
                        raise ValidationError("Cost price is required.")
                    cost = to_money(lot.cost_per_item)
                else:
                    cost = parse_money(cost_price, "Cost price")

                if barcode and self.product_repo.get_by_barcode(barcode) is not None:
                    raise DuplicateBarcodeError(barcode)

                product = self.product_repo.add(Product(
                    id=new_id(),
                    name=name,
                    barcode=barcode,
                    category_id=category_id,
                    lot_id=lot_id,
                    cost_price=cost,
                    selling_price=selling_price,
                    stock_quantity=stock_quantity,
                    is_sold=False,
                ))

                if not barcode:
                    product.barcode = self.allocator.allocate(product.id)
                    self.db.session.flush()
        except IntegrityError as exc:
            if _is_barcode_violation(exc):
                logger.warning("Barcode uniqueness violation while creating %r", name)
                raise DuplicateBarcodeError(barcode)
            raise ConflictError("Product could not be saved because of conflicting data.")

        logger.info("Product created: %s (%s) barcode=%s lot=%s",
                    product.name, product.id, product.barcode, product.lot_id)
        return self.product_repo.get(product.id)

    # =========================================================================
    # UPDATES
    # =========================================================================

    def update_product_price(self, product_id, selling_price) -> Product:
        selling_price = parse_money(selling_price, "Selling price")
        with self.db.transaction():
            product = self.get_product(product_id)
            product.selling_price = selling_price
        logger.info("Price of %s set to %s", product_id, selling_price)
        return product

    def mark_product_sold(self, product_id) -> Product:
        with self.db.transaction():
            product = self.get_product(product_id)
            product.is_sold = True
            product.sold_at = utcnow()
            product.stock_quantity = 0
        logger.info("Product %s marked as sold", product_id)
        return product

    def delete_product(self, product_id) -> None:
        with self.db.transaction():
            product = self.get_product(product_id)
            if self.product_repo.has_sales(product_id):
                raise InUseError(f'"{product.name}" appears in recorded sales and cannot be deleted.')
            self.product_repo.delete(product)
        logger.info("Product deleted: %s", product_id)

    # =========================================================================
    # STOCK
    # =========================================================================

    def _apply_stock(self, product_id, delta) -> Product:
        product = self.product_repo.get_for_update(product_id)
        if product is None:
            raise NotFoundError("Product not found.")
        if delta == 0:
            return product
        product.stock_quantity = product.stock_quantity + delta
        if product.is_sold:
            product.is_sold = False
            product.sold_at = None
        return product

    def add_stock(self, product_id, delta) -> Product:
        """
        Increments a product's stock by delta (an integer >= 0).
        A delta of 0 changes nothing.
        """
        delta = parse_int(delta, "Quantity", minimum=0)
        with self.db.transaction():
            product = self._apply_stock(product_id, delta)
            after = product.stock_quantity
        if delta:
            logger.info("Stock +%d for %s (now %d)", delta, product_id, after)
        return self.get_product(product_id)

    @profile_function(name="Add stock (bulk)")
    def add_stock_bulk(self, items) -> StockUpdateResult:
        """
        Applies several stock additions in one transaction.

        Args:
            items: Iterable of {'product_id', 'quantity'} dicts or
                   (product_id, quantity) pairs

        Returns:
            StockUpdateResult with products touched and units added
        """
        parsed = []
        for item in items or []:
            if isinstance(item, dict):
                product_id, qty = item.get("product_id"), item.get("quantity")
            else:
                product_id, qty = item
            if not product_id:
                raise ValidationError("Each item needs a product.")
            parsed.append((product_id, parse_int(qty, "Quantity", minimum=0)))
        if not parsed:
            raise ValidationError("Please scan at least one item before completing the stock update.")

        with self.db.transaction():
            touched = [self._apply_stock(product_id, qty) for product_id, qty in parsed]

        units = sum(qty for _, qty in parsed)
        logger.info("Bulk stock update: %d products, %d units", len(parsed), units)
        return StockUpdateResult(
            products_updated=len(parsed),
            units_added=units,
            products=touched,
        )

    # =========================================================================
    # SCAN LOOKUP
    # =========================================================================

    def scan(self, query) -> ScanResult:
        """
        Resolves scanner or keyboard input.

        Raises:
            BarcodeNotFoundError: 12 digits that match no product
            NoSearchResultsError: free text with no match
        """
        query = (query or "").strip()
        if not query:
            raise ValidationError("Scan or enter a barcode.")

        product = self.product_repo.get_by_barcode(query)
        if product is not None:
            return ScanResult(query=query, product=product, matches=[product])

        if looks_like_barcode(query):
            raise BarcodeNotFoundError(query)

        matches = self.product_repo.search(query)
        if not matches:
            raise NoSearchResultsError(query)
        return ScanResult(query=query, matches=matches)
