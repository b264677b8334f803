def test_inventory_tabs_render(auth_client, lot, make_product):
    make_product(name='Corduroy pants', lot_id=lot.id, cost=None)
    for tab in ('lots', 'products', 'settings'):
        r = auth_client.get(f'/inventory?tab={tab}')
        assert r.status_code == 200
    html = auth_client.get('/inventory?tab=products').get_data(as_text=True)
    assert 'Corduroy pants' in html


def test_lot_detail_page(auth_client, lot, make_product):
    make_product(name='Wool coat', lot_id=lot.id, cost=None)
    r = auth_client.get(f'/inventory/lots/{lot.id}')
    html = r.get_data(as_text=True)
    assert r.status_code == 200
    assert lot.lot_number in html
    assert 'Wool coat' in html
    assert '1 / 30' in html


def test_missing_lot_flashes_and_redirects(auth_client):
    r = auth_client.get('/inventory/lots/missing', follow_redirects=True)
    assert 'Lot not found.' in r.get_data(as_text=True)


def test_create_lot_and_product_by_form(auth_client, container, supplier):
    r = auth_client.post('/inventory/lots', data={
        'supplier_id': supplier.id, 'purchase_cost': '100', 'washing_cost': '20', 'total_items': '30',
    })
    assert r.status_code == 302
    lot = container.lot_service.list_lots()[0]
    assert r.headers['Location'].endswith(f'/inventory/lots/{lot.id}')

    r = auth_client.post('/inventory/products', data={
        'name': 'Parka', 'selling_price': '250', 'lot_id': lot.id,
    }, follow_redirects=True)
    assert 'added with barcode' in r.get_data(as_text=True)
    product = container.inventory_service.list_products()[0]
    assert str(product.cost_price) == '4.00'


def test_form_error_is_flashed(auth_client):
    r = auth_client.post('/inventory/categories', data={'name': ''}, follow_redirects=True)
    assert 'Category name is required.' in r.get_data(as_text=True)


def test_add_stock_page_scan(auth_client, container, make_product):
    product = make_product(name='Beanie', stock_quantity=1)
    r = auth_client.post('/inventory/add-stock', data={'query': product.barcode, 'quantity': '2'},
                         follow_redirects=True)
    assert 'now has 3 in stock' in r.get_data(as_text=True)

    r = auth_client.post('/inventory/add-stock', data={'query': 'bean', 'quantity': '1'})
    assert r.status_code == 200
    assert 'Matches for' in r.get_data(as_text=True)


def test_catalog_api(auth_client):
    r = auth_client.post('/api/suppliers', json={'name': 'Rong Kluea Market', 'phone': '02-000'})
    assert r.status_code == 201
    supplier_id = r.get_json()['supplier']['id']

    r = auth_client.post('/api/categories', json={'name': 'Hats'})
    category_id = r.get_json()['category']['id']
    r = auth_client.post('/api/categories', json={'name': 'hats'})
    assert r.status_code == 409

    r = auth_client.post('/api/lots', json={
        'supplier_id': supplier_id, 'purchase_cost': 100, 'washing_cost': 20, 'total_items': 30,
    })
    assert r.get_json()['lot']['cost_per_item'] == 4.0
    lot_id = r.get_json()['lot']['id']

    r = auth_client.post('/api/products', json={
        'name': 'Bucket hat', 'selling_price': 60, 'category_id': category_id, 'lot_id': lot_id,
    })
    assert r.status_code == 201
    product = r.get_json()['product']
    assert len(product['barcode']) == 12
    assert product['category'] == 'Hats'

    lot = auth_client.get(f'/api/lots/{lot_id}').get_json()
    assert lot['summary']['cataloged'] == 1
    assert lot['lot']['products'][0]['id'] == product['id']

    r = auth_client.post(f'/api/categories/{category_id}/delete')
    assert r.status_code == 409
    r = auth_client.post(f'/api/suppliers/{supplier_id}/delete')
    assert r.status_code == 409

    r = auth_client.post(f'/api/products/{product["id"]}/price', json={'selling_price': '75'})
    assert r.get_json()['product']['selling_price'] == 75.0
    r = auth_client.post(f'/api/products/{product["id"]}/sold')
    assert r.get_json()['product']['is_sold'] is True
    r = auth_client.post(f'/api/products/{product["id"]}/delete')
    assert r.get_json() == {'ok': True}


def test_duplicate_barcode_api(auth_client):
    body = {'name': 'Tee', 'cost_price': 10, 'selling_price': 30, 'barcode': 'TEE001'}
    assert auth_client.post('/api/products', json=body).status_code == 201
    r = auth_client.post('/api/products', json=body)
    assert r.status_code == 409
    assert 'already used' in r.get_json()['error']
