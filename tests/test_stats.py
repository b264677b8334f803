from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from thrift_pos.models import PaymentMethod, Sale, SaleItem
from thrift_pos.services.stats_service import percent_change

NOW = datetime(2024, 6, 30, 12, 0, 0)


@pytest.fixture
def record_sale(container):
    """Stores a sale at a given time without touching stock."""
    def _record(product, quantity, unit_price, when, method=PaymentMethod.CASH):
        unit_price = Decimal(unit_price)
        with container.db.transaction() as session:
            sale = Sale(total_amount=unit_price * quantity, payment_method=method, created_at=when)
            sale.items.append(SaleItem(product_id=product.id, quantity=quantity, unit_price=unit_price))
            session.add(sale)
        return sale
    return _record


def test_percent_change_rules():
    assert percent_change(150, 100) == 50.0
    assert percent_change(50, 100) == -50.0
    assert percent_change(10, 0) == 100.0
    assert percent_change(0, 0) == 0.0


def test_dashboard_windows(container, make_product, record_sale):
    product = make_product(cost='30.00', price='50.00', stock_quantity=10)
    make_product(name='Unsold', cost='1', price='2')

    # Current window
    record_sale(product, 2, '50.00', NOW - timedelta(days=1))
    record_sale(product, 1, '40.00', NOW - timedelta(days=29))
    # Previous window
    record_sale(product, 1, '70.00', NOW - timedelta(days=45))
    # Outside both
    record_sale(product, 1, '500.00', NOW - timedelta(days=61))

    stats = container.stats_service.get_dashboard_stats(now=NOW)

    assert stats['total_revenue'] == 140.0
    assert stats['total_sales'] == 2
    assert stats['total_profit'] == 50.0  # (50-30)*2 + (40-30)
    assert stats['total_products'] == 2
    assert stats['revenue_change'] == 100.0  # 140 vs 70
    assert stats['sales_change'] == 100.0    # 2 vs 1
    assert stats['profit_change'] == 25.0    # 50 vs 40
    assert stats['products_change'] == 0.0


def test_dashboard_empty(container):
    stats = container.stats_service.get_dashboard_stats(now=NOW)
    assert stats['total_revenue'] == 0.0
    assert stats['total_sales'] == 0
    assert stats['revenue_change'] == 0.0
    assert stats['profit_change'] == 0.0


def test_sales_over_time_groups_by_date(container, make_product, record_sale):
    product = make_product(stock_quantity=10)
    record_sale(product, 1, '10.00', datetime(2024, 6, 28, 9, 0))
    record_sale(product, 2, '10.00', datetime(2024, 6, 28, 18, 30))
    record_sale(product, 1, '15.00', datetime(2024, 6, 29, 10, 0))
    record_sale(product, 1, '99.00', datetime(2024, 5, 1, 10, 0))

    assert container.stats_service.get_sales_over_time(now=NOW) == [
        {'date': '2024-06-28', 'revenue': 30.0, 'sales': 2},
        {'date': '2024-06-29', 'revenue': 15.0, 'sales': 1},
    ]


def test_recent_sales(container, make_product, record_sale):
    product = make_product(stock_quantity=50)
    for day in range(12):
        record_sale(product, day + 1, '1.00', NOW - timedelta(days=day),
                    method=PaymentMethod.PROMPTPAY)

    recent = container.stats_service.get_recent_sales()
    assert len(recent) == 10
    assert recent[0]['item_count'] == 1
    assert recent[-1]['item_count'] == 10
    assert recent[0]['payment_method'] == 'promptpay'
    assert recent[0]['payment_method_label'] == 'PromptPay'


def test_dashboard_page_and_api(auth_client):
    r = auth_client.get('/dashboard')
    assert r.status_code == 200
    assert 'Revenue' in r.get_data(as_text=True)

    body = auth_client.get('/api/dashboard').get_json()
    assert body['ok'] is True
    assert set(body['stats']) >= {'total_revenue', 'revenue_change', 'products_change'}
