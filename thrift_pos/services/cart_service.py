# ==============================================================================
# CART SERVICE
# ==============================================================================
# Checkout cart kept in the Flask session under session['cart'].
# Each line: product_id, name, barcode, unit_price (str), quantity.
# Prices are snapshotted when the line is added.
# ==============================================================================

from decimal import Decimal
from typing import Any, Dict, List

from flask import session

from thrift_pos.errors import InsufficientStockError, ValidationError
from thrift_pos.models import to_money
from thrift_pos.services.inventory_service import InventoryService
from thrift_pos.services.payment_service import compute_subtotal
from thrift_pos.utils import parse_int

CART_KEY = 'cart'


class CartService:
    """
    Session-backed cart for the checkout screen.

    Responsibilities:
    - Add lines (by product id or scanned barcode)
    - Change quantities, remove lines, clear
    - Keep every line within the product's stock
    """

    def __init__(self, inventory_service: InventoryService):
        self.inventory_service = inventory_service

    def _get_cart(self) -> List[Dict[str, Any]]:
        return list(session.get(CART_KEY, []))

    def _save_cart(self, cart: List[Dict[str, Any]]) -> None:
        session[CART_KEY] = cart
        session.modified = True

    def _available(self, product) -> int:
        return 0 if product.is_sold else product.stock_quantity

    def lines(self) -> List[Dict[str, Any]]:
        """Cart lines with Decimal prices, ready for the sales service."""
        return [
            {
                'product_id': item['product_id'],
                'quantity': item['quantity'],
                'unit_price': Decimal(item['unit_price']),
            }
            for item in self._get_cart()
        ]

    def get_cart(self) -> Dict[str, Any]:
        """
        Current cart with totals.

        Returns:
            Dict with items, item_count, lines_count and subtotal
        """
        cart = self._get_cart()
        items = []
        for item in cart:
            price = Decimal(item['unit_price'])
            items.append({
                **item,
                'unit_price': float(price),
                'line_total': float(price * item['quantity']),
            })
        return {
            'items': items,
            'item_count': sum(item['quantity'] for item in cart),
            'lines_count': len(cart),
            'subtotal': float(compute_subtotal(self.lines())),
        }

    def add_product(self, product_id, quantity=1) -> Dict[str, Any]:
        """
        Adds a product, or increases its line when already in the cart.

        Raises:
            NotFoundError: unknown product
            InsufficientStockError: cart would exceed the stock
        """
        quantity = parse_int(quantity, 'Quantity', minimum=1)
        product = self.inventory_service.get_product(product_id)
        available = self._available(product)

        cart = self._get_cart()
        existing = next((i for i in cart if i['product_id'] == product.id), None)
        wanted = quantity + (existing['quantity'] if existing else 0)
        if wanted > available:
            raise InsufficientStockError(product.name, wanted, available)

        if existing:
            existing['quantity'] = wanted
        else:
            cart.append({
                'product_id': product.id,
                'name': product.name,
                'barcode': product.barcode,
                'unit_price': str(to_money(product.selling_price)),
                'quantity': quantity,
            })
        self._save_cart(cart)
        return self.get_cart()

    def add_scanned(self, query) -> Dict[str, Any]:
        """
        Adds the product whose barcode was scanned.

        Free-text matches are returned without touching the cart so the
        operator can pick one.
        """
        result = self.inventory_service.scan(query)
        if result.exact:
            cart = self.add_product(result.product.id)
            return {'added': result.product.to_dict(), 'matches': [], 'cart': cart}
        return {
            'added': None,
            'matches': [p.to_dict() for p in result.matches],
            'cart': self.get_cart(),
        }

    def update_quantity(self, product_id, quantity) -> Dict[str, Any]:
        """Sets a line's quantity; 0 removes the line."""
        quantity = parse_int(quantity, 'Quantity', minimum=0)
        if quantity == 0:
            return self.remove_item(product_id)

        cart = self._get_cart()
        existing = next((i for i in cart if i['product_id'] == product_id), None)
        if existing is None:
            raise ValidationError('That product is not in the cart.')

        product = self.inventory_service.get_product(product_id)
        available = self._available(product)
        if quantity > available:
            raise InsufficientStockError(product.name, quantity, available)

        existing['quantity'] = quantity
        self._save_cart(cart)
        return self.get_cart()

    def remove_item(self, product_id) -> Dict[str, Any]:
        cart = [i for i in self._get_cart() if i['product_id'] != product_id]
        self._save_cart(cart)
        return self.get_cart()

    def clear_cart(self) -> Dict[str, Any]:
        self._save_cart([])
        return self.get_cart()
