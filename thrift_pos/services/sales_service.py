# ==============================================================================
# SALES SERVICE
# ==============================================================================
# The only place that writes sales.
#
# A sale, its items and the stock decrements are one transaction: either all
# of it is stored or none of it. Products whose stock reaches 0 are marked
# sold in that same transaction.
# ==============================================================================

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping

from thrift_pos.errors import InsufficientStockError, NotFoundError, ValidationError
from thrift_pos.models import Sale, SaleItem, to_money, utcnow
from thrift_pos.performance_logger import profile_function
from thrift_pos.repositories import Database, ProductRepository, SalesRepository
from thrift_pos.services.payment_service import (
    PaymentResult,
    compute_subtotal,
    parse_payment_method,
    validate_payment,
)
from thrift_pos.utils import parse_int, parse_money

logger = logging.getLogger(__name__)


def _normalize_items(items: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Validates sale lines. Each line keeps its own price."""
    lines = []
    for item in items or []:
        product_id = item.get("product_id")
        if not product_id:
            raise ValidationError("Each sale line needs a product.")
        lines.append({
            "product_id": product_id,
            "quantity": parse_int(item.get("quantity"), "Quantity", minimum=1),
            "unit_price": parse_money(item.get("unit_price"), "Unit price"),
        })
    if not lines:
        raise ValidationError("The cart is empty.")
    return lines


def _quantities_by_product(lines) -> Dict[str, int]:
    """Total requested quantity per product, in first-seen order."""
    totals = OrderedDict()
    for line in lines:
        totals[line["product_id"]] = totals.get(line["product_id"], 0) + line["quantity"]
    return totals


class SalesService:
    """
    Records sales.

    Responsibilities:
    - Create the sale and its items from cart lines
    - Decrement stock and mark sold-out products
    - Run payment validation before anything is written
    """

    def __init__(self, db: Database, sales_repo: SalesRepository, product_repo: ProductRepository):
        self.db = db
        self.sales_repo = sales_repo
        self.product_repo = product_repo

    @profile_function(name="Complete sale")
    def complete_sale(self, items, payment_method) -> Sale:
        """
        Creates a sale atomically.

        Args:
            items: list of {'product_id', 'quantity', 'unit_price'}
            payment_method: PaymentMethod or its value

        Returns:
            The stored sale with its items

        Raises:
            ValidationError: empty cart or malformed line
            NotFoundError: a product no longer exists
            InsufficientStockError: a line asks for more than the stock
        """
        method = parse_payment_method(payment_method)
        lines = _normalize_items(items)
        total = compute_subtotal(lines)

        with self.db.transaction():
            now = utcnow()
            sale = Sale(total_amount=total, payment_method=method, created_at=now)

            # Repeated products are checked and decremented once, on their total
            for product_id, quantity in _quantities_by_product(lines).items():
                product = self.product_repo.get_for_update(product_id)
                if product is None:
                    raise NotFoundError("A product in the cart no longer exists.")
                available = 0 if product.is_sold else product.stock_quantity
                if quantity > available:
                    raise InsufficientStockError(product.name, quantity, available)

                product.stock_quantity = product.stock_quantity - quantity
                if product.stock_quantity == 0:
                    product.is_sold = True
                    product.sold_at = now

            for line in lines:
                sale.items.append(SaleItem(
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    unit_price=to_money(line["unit_price"]),
                ))

            self.sales_repo.add(sale)

        logger.info("Sale %s completed: %d lines, total %s, %s",
                    sale.id, len(lines), total, method.value)
        return self.sales_repo.get(sale.id)

    def checkout(self, items, payment_method, amount_paid=None) -> Dict[str, Any]:
        """
        Validates the payment and then completes the sale.

        Returns:
            Dict with the sale and the PaymentResult
        """
        lines = _normalize_items(items)
        payment: PaymentResult = validate_payment(
            payment_method, compute_subtotal(lines), amount_paid
        )
        sale = self.complete_sale(lines, payment.method)
        return {"sale": sale, "payment": payment}
