import pytest

from thrift_pos.errors import BarcodeNotFoundError, NoSearchResultsError, ValidationError


@pytest.fixture
def jacket(container, category, make_product):
    return make_product(name='Denim Jacket', category_id=category.id)


def test_exact_barcode_match(container, jacket):
    result = container.inventory_service.scan(jacket.barcode)
    assert result.exact
    assert result.product.id == jacket.id


def test_manual_barcode_match(container, make_product):
    product = make_product(barcode='TAG42')
    assert container.inventory_service.scan('TAG42').product.id == product.id


def test_unknown_twelve_digits_is_barcode_not_found(container, jacket):
    with pytest.raises(BarcodeNotFoundError) as exc:
        container.inventory_service.scan('999999999999')
    assert exc.value.to_dict()['kind'] == 'barcode'


def test_free_text_search_by_name_and_category(container, jacket, make_product):
    make_product(name='Linen shirt')
    by_name = container.inventory_service.scan('denim')
    assert not by_name.exact
    assert [p.id for p in by_name.matches] == [jacket.id]

    by_category = container.inventory_service.scan('JACKETS')
    assert [p.id for p in by_category.matches] == [jacket.id]


def test_partial_barcode_search(container, jacket):
    result = container.inventory_service.scan(jacket.barcode[-5:])
    assert jacket.id in [p.id for p in result.matches]


def test_no_results(container, jacket):
    with pytest.raises(NoSearchResultsError) as exc:
        container.inventory_service.scan('velvet')
    assert exc.value.to_dict()['kind'] == 'search'


def test_empty_query(container):
    with pytest.raises(ValidationError):
        container.inventory_service.scan('   ')


def test_scan_api(auth_client, jacket):
    r = auth_client.get(f'/api/scan?q={jacket.barcode}')
    assert r.status_code == 200
    assert r.get_json()['product']['id'] == jacket.id

    r = auth_client.get('/api/scan?q=999999999999')
    assert r.status_code == 404
    assert r.get_json()['kind'] == 'barcode'

    r = auth_client.get('/api/scan?q=velvet')
    assert r.status_code == 404
    assert r.get_json()['kind'] == 'search'
