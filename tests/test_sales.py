from decimal import Decimal

import pytest

from thrift_pos.errors import InsufficientPaymentError, InsufficientStockError, ValidationError
from thrift_pos.models import PaymentMethod
from thrift_pos.services.payment_service import compute_subtotal, validate_payment


LINES = [
    {'product_id': 'a', 'quantity': 2, 'unit_price': Decimal('40.00')},
    {'product_id': 'b', 'quantity': 1, 'unit_price': Decimal('35.00')},
]


def test_compute_subtotal():
    assert compute_subtotal(LINES) == Decimal('115.00')
    assert compute_subtotal([]) == Decimal('0.00')


def test_cash_payment_returns_change():
    result = validate_payment('cash', Decimal('115.00'), '120')
    assert result.method is PaymentMethod.CASH
    assert result.amount_paid == Decimal('120.00')
    assert result.change == Decimal('5.00')


def test_exact_cash_has_no_change():
    assert validate_payment('cash', '115', '115.00').change == Decimal('0.00')


def test_insufficient_cash_is_rejected():
    with pytest.raises(InsufficientPaymentError) as exc:
        validate_payment('cash', Decimal('115.00'), '100')
    assert exc.value.shortfall == Decimal('15.00')
    assert exc.value.to_dict()['shortfall'] == 15.0


def test_cash_amount_required():
    with pytest.raises(ValidationError):
        validate_payment('cash', '10', None)


@pytest.mark.parametrize('method', ['promptpay', 'khonlakhrueng'])
def test_non_cash_is_exact(method):
    result = validate_payment(method, '115', None)
    assert result.amount_paid == Decimal('115.00')
    assert result.change == Decimal('0.00')


def test_unknown_payment_method():
    with pytest.raises(ValidationError):
        validate_payment('bitcoin', '10', '10')


def test_complete_sale_decrements_stock(container, make_product):
    shirt = make_product(name='Shirt', cost='20', price='40', stock_quantity=3)
    skirt = make_product(name='Skirt', cost='10', price='35', stock_quantity=1)

    sale = container.sales_service.complete_sale([
        {'product_id': shirt.id, 'quantity': 2, 'unit_price': '40.00'},
        {'product_id': skirt.id, 'quantity': 1, 'unit_price': '35.00'},
    ], 'cash')

    assert sale.total_amount == Decimal('115.00')
    assert sale.payment_method is PaymentMethod.CASH
    assert sale.item_count == 3
    assert len(sale.items) == 2

    shirt = container.inventory_service.get_product(shirt.id)
    skirt = container.inventory_service.get_product(skirt.id)
    assert shirt.stock_quantity == 1 and not shirt.is_sold
    assert skirt.stock_quantity == 0 and skirt.is_sold
    assert skirt.sold_at == sale.created_at


def test_sale_is_atomic(container, make_product):
    shirt = make_product(name='Shirt', stock_quantity=3)
    skirt = make_product(name='Skirt', stock_quantity=1)

    with pytest.raises(InsufficientStockError):
        container.sales_service.complete_sale([
            {'product_id': shirt.id, 'quantity': 2, 'unit_price': '40'},
            {'product_id': skirt.id, 'quantity': 2, 'unit_price': '35'},
        ], 'promptpay')

    assert container.inventory_service.get_product(shirt.id).stock_quantity == 3
    assert container.inventory_service.get_product(skirt.id).stock_quantity == 1
    assert container.stats_service.get_recent_sales() == []


def test_repeated_product_keeps_each_line_price(container, make_product):
    product = make_product(cost='20', price='50', stock_quantity=2)

    sale = container.sales_service.complete_sale([
        {'product_id': product.id, 'quantity': 1, 'unit_price': '50.00'},
        {'product_id': product.id, 'quantity': 1, 'unit_price': '60.00'},
    ], 'cash')

    assert len(sale.items) == 2
    assert sorted(item.unit_price for item in sale.items) == [Decimal('50.00'), Decimal('60.00')]
    assert sale.total_amount == Decimal('110.00')
    product = container.inventory_service.get_product(product.id)
    assert product.stock_quantity == 0 and product.is_sold


def test_repeated_product_stock_checked_on_total(container, make_product):
    product = make_product(stock_quantity=2)
    with pytest.raises(InsufficientStockError):
        container.sales_service.complete_sale([
            {'product_id': product.id, 'quantity': 2, 'unit_price': '50'},
            {'product_id': product.id, 'quantity': 1, 'unit_price': '50'},
        ], 'cash')
    assert container.inventory_service.get_product(product.id).stock_quantity == 2


def test_sold_product_cannot_be_sold_again(container, make_product):
    product = make_product()
    container.inventory_service.mark_product_sold(product.id)
    with pytest.raises(InsufficientStockError):
        container.sales_service.complete_sale(
            [{'product_id': product.id, 'quantity': 1, 'unit_price': '1'}], 'cash'
        )


def test_empty_cart_rejected(container):
    with pytest.raises(ValidationError):
        container.sales_service.complete_sale([], 'cash')


def test_checkout_validates_payment_before_writing(container, make_product):
    product = make_product(price='115.00')
    with pytest.raises(InsufficientPaymentError):
        container.sales_service.checkout(
            [{'product_id': product.id, 'quantity': 1, 'unit_price': '115.00'}], 'cash', '100'
        )
    assert container.inventory_service.get_product(product.id).stock_quantity == 1


# ═══════════════════════════════════════════════════════════════════════════
# CART AND CHECKOUT OVER HTTP
# ═══════════════════════════════════════════════════════════════════════════

def test_cart_and_checkout_flow(auth_client, container, make_product):
    shirt = make_product(name='Shirt', cost='20', price='40.00', stock_quantity=3)
    skirt = make_product(name='Skirt', cost='10', price='35.00', stock_quantity=1)

    r = auth_client.post('/api/cart/add', json={'product_id': shirt.id, 'quantity': 2})
    assert r.status_code == 200
    r = auth_client.post('/api/cart/add', json={'barcode': skirt.barcode})
    assert r.get_json()['added']['id'] == skirt.id

    cart = auth_client.get('/api/cart').get_json()['cart']
    assert cart['subtotal'] == 115.0
    assert cart['item_count'] == 3

    r = auth_client.post('/api/checkout', json={'payment_method': 'cash', 'amount_paid': '100'})
    assert r.status_code == 400
    assert r.get_json()['shortfall'] == 15.0
    # Cart survives a failed checkout
    assert auth_client.get('/api/cart').get_json()['cart']['item_count'] == 3

    r = auth_client.post('/api/checkout', json={'payment_method': 'cash', 'amount_paid': '120'})
    assert r.status_code == 200
    body = r.get_json()
    assert body['payment']['change'] == 5.0
    assert body['sale']['total_amount'] == 115.0
    assert auth_client.get('/api/cart').get_json()['cart']['items'] == []

    assert container.inventory_service.get_product(shirt.id).stock_quantity == 1


def test_cart_rejects_more_than_stock(auth_client, make_product):
    product = make_product(stock_quantity=1)
    auth_client.post('/api/cart/add', json={'product_id': product.id})
    r = auth_client.post('/api/cart/add', json={'product_id': product.id})
    assert r.status_code == 409
    assert 'Not enough stock' in r.get_json()['error']


def test_cart_quantity_zero_removes_line(auth_client, make_product):
    product = make_product(stock_quantity=5)
    auth_client.post('/api/cart/add', json={'product_id': product.id, 'quantity': 2})
    r = auth_client.post('/api/cart/update', json={'product_id': product.id, 'quantity': 4})
    assert r.get_json()['cart']['item_count'] == 4
    r = auth_client.post('/api/cart/update', json={'product_id': product.id, 'quantity': 0})
    assert r.get_json()['cart']['items'] == []


def test_cart_remove_and_clear(auth_client, make_product):
    a = make_product(name='A')
    b = make_product(name='B')
    auth_client.post('/api/cart/add', json={'product_id': a.id})
    auth_client.post('/api/cart/add', json={'product_id': b.id})
    r = auth_client.post('/api/cart/remove', json={'product_id': a.id})
    assert [line['product_id'] for line in r.get_json()['cart']['items']] == [b.id]
    r = auth_client.post('/api/cart/clear')
    assert r.get_json()['cart']['lines_count'] == 0


def test_checkout_page_flow(auth_client, make_product):
    product = make_product(name='Scarf', price='50.00')
    r = auth_client.post('/checkout/scan', data={'query': product.barcode})
    assert r.status_code == 302
    r = auth_client.post('/checkout/complete', data={'payment_method': 'promptpay'},
                         follow_redirects=True)
    html = r.get_data(as_text=True)
    assert 'Sale completed' in html
    assert 'The cart is empty.' in html
