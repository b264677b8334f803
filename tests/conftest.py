import re

import pytest

from thrift_pos.main import EXTENSION_KEY, create_app

ADMIN_USER = 'admin'
ADMIN_PASSWORD = 'admin-pass-1234'

CSRF_RE = re.compile(r'name="csrf[-_]token" (?:value|content)="([0-9a-f]+)"')


@pytest.fixture(scope='session')
def log_dir(tmp_path_factory):
    return str(tmp_path_factory.mktemp('logs'))


@pytest.fixture
def app(log_dir):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'DATABASE_URL': 'sqlite://',
        'LOG_DIR': log_dir,
        'LOG_LEVEL': 'DEBUG',
        'ENABLE_PROFILING': False,
        'ADMIN_USER': ADMIN_USER,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
    })
    yield app
    app.extensions[EXTENSION_KEY].db.dispose()


@pytest.fixture
def container(app):
    # Requests made while this context is pushed reuse it and leave it in place
    with app.app_context():
        yield app.extensions[EXTENSION_KEY]


@pytest.fixture
def client(app):
    # Not used as a context manager: each request pops its own contexts, so
    # the order in which fixtures are torn down does not matter
    return app.test_client()


def get_csrf_token(client, path='/login'):
    """Reads the CSRF token from a rendered page."""
    r = client.get(path)
    m = CSRF_RE.search(r.get_data(as_text=True))
    assert m, f'no csrf token in {path}'
    return m.group(1)


def login(client, username=ADMIN_USER, password=ADMIN_PASSWORD, callback=None):
    token = get_csrf_token(client)
    data = {'username': username, 'password': password, 'csrf_token': token}
    if callback:
        data['callbackUrl'] = callback
    return client.post('/login', data=data)


@pytest.fixture
def auth_client(client):
    r = login(client)
    assert r.status_code == 302
    # Login clears the session; pin a known token for later POSTs
    with client.session_transaction() as sess:
        sess['csrf_token'] = 'test-csrf-token'
    client.environ_base['HTTP_X_CSRF_TOKEN'] = 'test-csrf-token'
    return client


# ═══════════════════════════════════════════════════════════════════════════
# DATA HELPERS
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def supplier(container):
    return container.catalog_service.create_supplier('Bangkok Bales', '081-000-0000')


@pytest.fixture
def category(container):
    return container.catalog_service.create_category('Jackets')


@pytest.fixture
def lot(container, supplier):
    return container.lot_service.create_lot(
        supplier_id=supplier.id,
        purchase_cost='100.00',
        washing_cost='20.00',
        total_items=30,
    )


@pytest.fixture
def make_product(container):
    def _make(name='Denim jacket', cost='40.00', price='115.00', **kwargs):
        return container.inventory_service.create_product(
            name=name, cost_price=cost, selling_price=price, **kwargs
        )
    return _make
