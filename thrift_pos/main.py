# ==============================================================================
# THRIFT POS - Flask application
# ==============================================================================
# Pages (Jinja) and a JSON API over the same services.
#
#   create_app()            → app for wsgi.py and `flask --app thrift_pos.main`
#   create_app({...})       → app with overrides (tests)
#
# AUTH GATE: every route needs a logged-in operator except the public paths
# below. Pages redirect to /login?callbackUrl=<path>; /api/ returns 401 JSON.
# ==============================================================================

import io
import logging
import uuid
from functools import wraps
from typing import Optional

import click
from flask import (
    Blueprint,
    Flask,
    current_app,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    session,
    url_for,
)

from thrift_pos.app_container import AppContainer
from thrift_pos.config import Config, is_default_secret
from thrift_pos.errors import PosError
from thrift_pos.models import PAYMENT_METHOD_LABELS
from thrift_pos.performance_logger import configure_logging, init_profiling
from thrift_pos.repositories import Database
from thrift_pos.services import OperatorSession, summarize_lot
from thrift_pos.services.label_service import LABELS_PER_PAGE
from thrift_pos.utils import format_money

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'thrift_pos'

PUBLIC_PATHS = frozenset(['/', '/login', '/logout'])
PUBLIC_PREFIXES = ('/api/auth/', '/static/')

bp = Blueprint('pos', __name__)


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def get_container() -> AppContainer:
    return current_app.extensions[EXTENSION_KEY]


def is_public_path(path):
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def is_api_request():
    return request.path.startswith('/api/')


def safe_callback(url):
    """Returns url when it is a local path, else None."""
    if not url or not url.startswith('/') or url.startswith('//') or '\\' in url:
        return None
    return url


def current_operator() -> Optional[OperatorSession]:
    """Operator for this request, resolved once and cached on g."""
    if 'operator' not in g:
        operator = None
        operator_id = session.get('operator_id')
        if operator_id:
            record = get_container().user_service.get_operator(operator_id)
            if record is not None:
                operator = OperatorSession(operator_id=record.id, username=record.username)
        g.operator = operator
    return g.operator


def payload():
    """JSON body for API calls, form data otherwise."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


def _back_url(default_endpoint='pos.dashboard'):
    referrer = request.referrer or ''
    if referrer.startswith(request.host_url):
        return referrer
    return url_for(default_endpoint)


def login_required(f):
    """Passes the logged-in OperatorSession as the first argument."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        operator = current_operator()
        if operator is None:
            if is_api_request():
                return {"ok": False, "error": "Authentication required."}, 401
            flash("Please log in.", "warning")
            return redirect(url_for('pos.login', callbackUrl=request.path))
        return f(operator, *args, **kwargs)
    return wrapper


# ═══════════════════════════════════════════════════════════════════════════════
# CSRF
# ═══════════════════════════════════════════════════════════════════════════════

def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method == 'POST' and current_app.config.get('CSRF_ENABLED', True):
            token = session.get('csrf_token')
            form_token = (
                request.form.get('csrf_token') or
                request.headers.get('X-CSRF-Token') or
                request.headers.get('X-CSRFToken')
            )
            if not form_token and request.is_json:
                json_data = request.get_json(silent=True) or {}
                form_token = json_data.get('csrf_token')

            if not token or not form_token or token != form_token:
                if is_api_request():
                    return {"ok": False, "error": "Invalid CSRF token."}, 403
                flash('Session expired. Please try again.', 'warning')
                if 'operator_id' not in session:
                    return redirect(url_for('pos.login'))
                return redirect(url_for('pos.dashboard'))
        return f(*args, **kwargs)
    return wrapper


# ═══════════════════════════════════════════════════════════════════════════════
# AUTH
# ═══════════════════════════════════════════════════════════════════════════════

def _start_session(operator: OperatorSession):
    session.clear()
    session.permanent = True
    session['operator_id'] = operator.operator_id
    session['username'] = operator.username
    g.operator = operator


@bp.route('/')
def index():
    if current_operator() is not None:
        return redirect(url_for('pos.dashboard'))
    return redirect(url_for('pos.login'))


@bp.route('/login', methods=['GET', 'POST'])
@verify_csrf
def login():
    callback = safe_callback(request.values.get('callbackUrl'))
    if current_operator() is not None and request.method == 'GET':
        return redirect(callback or url_for('pos.dashboard'))

    if request.method == 'POST':
        username = (request.form.get('username') or '').strip()
        password = request.form.get('password') or ''
        if not username or not password:
            flash("Username and password are required.", "warning")
            return redirect(url_for('pos.login', callbackUrl=callback))

        operator = get_container().user_service.authenticate(username, password)
        if operator is None:
            flash("Invalid username or password.", "danger")
            return redirect(url_for('pos.login', callbackUrl=callback))

        _start_session(operator)
        flash(f"Welcome, {operator.username}.", "success")
        return redirect(callback or url_for('pos.dashboard'))

    return render_template('login.html', callback_url=callback)


@bp.route('/logout')
def logout():
    username = session.get('username')
    session.clear()
    g.operator = None
    if username:
        logger.info("Operator %s logged out", username)
    flash("You have been logged out.", "info")
    return redirect(url_for('pos.login'))


@bp.route('/api/auth/login', methods=['POST'])
@verify_csrf
def api_login():
    data = payload()
    operator = get_container().user_service.authenticate(
        data.get('username'), data.get('password')
    )
    if operator is None:
        return {"ok": False, "error": "Invalid username or password."}, 401
    _start_session(operator)
    return {"ok": True, "username": operator.username}


@bp.route('/api/auth/session')
def api_session():
    operator = current_operator()
    return {
        "ok": True,
        "authenticated": operator is not None,
        "username": operator.username if operator else None,
    }


# ═══════════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route('/dashboard')
@login_required
def dashboard(operator):
    stats = get_container().stats_service
    return render_template(
        'dashboard.html',
        operator=operator,
        stats=stats.get_dashboard_stats(),
        sales_over_time=stats.get_sales_over_time(),
        recent_sales=stats.get_recent_sales(),
    )


@bp.route('/api/dashboard')
@login_required
def api_dashboard(operator):
    stats = get_container().stats_service
    return {
        "ok": True,
        "stats": stats.get_dashboard_stats(),
        "sales_over_time": stats.get_sales_over_time(),
        "recent_sales": stats.get_recent_sales(),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# INVENTORY PAGES
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route('/inventory')
@login_required
def inventory(operator):
    container = get_container()
    lots = container.lot_service.list_lots()
    products = container.inventory_service.list_products()
    return render_template(
        'inventory.html',
        operator=operator,
        tab=request.args.get('tab', 'lots'),
        lots=lots,
        lot_summaries={lot.id: summarize_lot(lot) for lot in lots},
        overview=container.lot_service.overview(lots),
        products=products,
        summary=container.inventory_service.inventory_summary(products),
        categories=container.catalog_service.list_categories(),
        suppliers=container.catalog_service.list_suppliers(),
    )


@bp.route('/inventory/lots/<lot_id>')
@login_required
def lot_detail(operator, lot_id):
    container = get_container()
    lot = container.lot_service.get_lot(lot_id)
    return render_template(
        'lot_detail.html',
        operator=operator,
        lot=lot,
        summary=summarize_lot(lot),
        categories=container.catalog_service.list_categories(),
    )


def _pdf_response(data, filename):
    return send_file(io.BytesIO(data), mimetype='application/pdf',
                     as_attachment=True, download_name=filename)


@bp.route('/inventory/lots/<lot_id>/labels.pdf')
@login_required
def lot_labels(operator, lot_id):
    container = get_container()
    data = container.label_service.lot_labels(lot_id)
    lot = container.lot_service.get_lot(lot_id)
    return _pdf_response(data, f'labels-{lot.lot_number}.pdf')


@bp.route('/inventory/products/<product_id>/labels.pdf')
@login_required
def product_labels(operator, product_id):
    container = get_container()
    data = container.label_service.product_labels(
        product_id, request.args.get('copies', LABELS_PER_PAGE)
    )
    product = container.inventory_service.get_product(product_id)
    return _pdf_response(data, f'barcode-{product.barcode}.pdf')


@bp.route('/inventory/categories', methods=['POST'])
@login_required
@verify_csrf
def create_category(operator):
    category = get_container().catalog_service.create_category(request.form.get('name'))
    flash(f'Category "{category.name}" added.', 'success')
    return redirect(url_for('pos.inventory', tab='settings'))


@bp.route('/inventory/categories/<category_id>/delete', methods=['POST'])
@login_required
@verify_csrf
def delete_category(operator, category_id):
    get_container().catalog_service.delete_category(category_id)
    flash('Category deleted.', 'success')
    return redirect(url_for('pos.inventory', tab='settings'))


@bp.route('/inventory/suppliers', methods=['POST'])
@login_required
@verify_csrf
def create_supplier(operator):
    supplier = get_container().catalog_service.create_supplier(
        request.form.get('name'), request.form.get('phone'), request.form.get('notes')
    )
    flash(f'Supplier "{supplier.name}" added.', 'success')
    return redirect(url_for('pos.inventory', tab='settings'))


@bp.route('/inventory/suppliers/<supplier_id>/delete', methods=['POST'])
@login_required
@verify_csrf
def delete_supplier(operator, supplier_id):
    get_container().catalog_service.delete_supplier(supplier_id)
    flash('Supplier deleted.', 'success')
    return redirect(url_for('pos.inventory', tab='settings'))


@bp.route('/inventory/lots', methods=['POST'])
@login_required
@verify_csrf
def create_lot(operator):
    form = request.form
    lot = get_container().lot_service.create_lot(
        supplier_id=form.get('supplier_id'),
        purchase_cost=form.get('purchase_cost'),
        washing_cost=form.get('washing_cost'),
        total_items=form.get('total_items'),
        notes=form.get('notes'),
        purchase_date=form.get('purchase_date'),
    )
    flash(f'Lot {lot.lot_number} recorded.', 'success')
    return redirect(url_for('pos.lot_detail', lot_id=lot.id))


@bp.route('/inventory/products', methods=['POST'])
@login_required
@verify_csrf
def create_product(operator):
    form = request.form
    product = get_container().inventory_service.create_product(
        name=form.get('name'),
        cost_price=form.get('cost_price'),
        selling_price=form.get('selling_price'),
        barcode=form.get('barcode'),
        category_id=form.get('category_id'),
        lot_id=form.get('lot_id'),
        stock_quantity=form.get('stock_quantity'),
    )
    flash(f'"{product.name}" added with barcode {product.barcode}.', 'success')
    if product.lot_id:
        return redirect(url_for('pos.lot_detail', lot_id=product.lot_id))
    return redirect(url_for('pos.inventory', tab='products'))


@bp.route('/inventory/products/<product_id>/price', methods=['POST'])
@login_required
@verify_csrf
def update_price(operator, product_id):
    get_container().inventory_service.update_product_price(
        product_id, request.form.get('selling_price')
    )
    flash('Price updated.', 'success')
    return redirect(_back_url('pos.inventory'))


@bp.route('/inventory/products/<product_id>/sold', methods=['POST'])
@login_required
@verify_csrf
def mark_sold(operator, product_id):
    product = get_container().inventory_service.mark_product_sold(product_id)
    flash(f'"{product.name}" marked as sold.', 'success')
    return redirect(_back_url('pos.inventory'))


@bp.route('/inventory/products/<product_id>/delete', methods=['POST'])
@login_required
@verify_csrf
def delete_product(operator, product_id):
    get_container().inventory_service.delete_product(product_id)
    flash('Product deleted.', 'success')
    return redirect(_back_url('pos.inventory'))


@bp.route('/inventory/add-stock', methods=['GET', 'POST'])
@login_required
@verify_csrf
def add_stock(operator):
    matches = []
    query = ''
    if request.method == 'POST':
        inventory_service = get_container().inventory_service
        product_id = request.form.get('product_id')
        if product_id:
            product = inventory_service.add_stock(product_id, request.form.get('quantity', 1))
            flash(f'"{product.name}" now has {product.stock_quantity} in stock.', 'success')
            return redirect(url_for('pos.add_stock'))

        query = (request.form.get('query') or '').strip()
        result = inventory_service.scan(query)
        if result.exact:
            product = inventory_service.add_stock(result.product.id, request.form.get('quantity', 1))
            flash(f'"{product.name}" now has {product.stock_quantity} in stock.', 'success')
            return redirect(url_for('pos.add_stock'))
        matches = result.matches
    return render_template('add_stock.html', operator=operator, query=query, matches=matches)


# ═══════════════════════════════════════════════════════════════════════════════
# CHECKOUT PAGE
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route('/checkout')
@login_required
def checkout(operator):
    return render_template(
        'checkout.html',
        operator=operator,
        cart=get_container().cart_service.get_cart(),
        matches=[],
        payment_methods=PAYMENT_METHOD_LABELS,
    )


@bp.route('/checkout/scan', methods=['POST'])
@login_required
@verify_csrf
def checkout_scan(operator):
    cart_service = get_container().cart_service
    product_id = request.form.get('product_id')
    if product_id:
        cart_service.add_product(product_id, request.form.get('quantity', 1))
        return redirect(url_for('pos.checkout'))

    result = cart_service.add_scanned(request.form.get('query'))
    if result['added']:
        return redirect(url_for('pos.checkout'))
    return render_template(
        'checkout.html',
        operator=operator,
        cart=result['cart'],
        matches=result['matches'],
        payment_methods=PAYMENT_METHOD_LABELS,
    )


@bp.route('/checkout/cart/<product_id>', methods=['POST'])
@login_required
@verify_csrf
def checkout_update(operator, product_id):
    get_container().cart_service.update_quantity(product_id, request.form.get('quantity'))
    return redirect(url_for('pos.checkout'))


@bp.route('/checkout/cart/<product_id>/remove', methods=['POST'])
@login_required
@verify_csrf
def checkout_remove(operator, product_id):
    get_container().cart_service.remove_item(product_id)
    return redirect(url_for('pos.checkout'))


@bp.route('/checkout/clear', methods=['POST'])
@login_required
@verify_csrf
def checkout_clear(operator):
    get_container().cart_service.clear_cart()
    return redirect(url_for('pos.checkout'))


def _complete_checkout(data):
    container = get_container()
    result = container.sales_service.checkout(
        container.cart_service.lines(),
        data.get('payment_method'),
        data.get('amount_paid'),
    )
    container.cart_service.clear_cart()
    return result


@bp.route('/checkout/complete', methods=['POST'])
@login_required
@verify_csrf
def checkout_complete(operator):
    result = _complete_checkout(request.form)
    payment = result['payment']
    symbol = current_app.config['CURRENCY_SYMBOL']
    flash(
        f"Sale completed: {format_money(payment.subtotal, symbol)} by {payment.method.label}. "
        f"Change: {format_money(payment.change, symbol)}.",
        'success',
    )
    return redirect(url_for('pos.checkout'))


# ═══════════════════════════════════════════════════════════════════════════════
# JSON API - CATALOG AND LOTS
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route('/api/categories', methods=['GET', 'POST'])
@login_required
@verify_csrf
def api_categories(operator):
    catalog = get_container().catalog_service
    if request.method == 'POST':
        category = catalog.create_category(payload().get('name'))
        return {"ok": True, "category": category.to_dict()}, 201
    return {"ok": True, "categories": [c.to_dict() for c in catalog.list_categories()]}


@bp.route('/api/categories/<category_id>/delete', methods=['POST'])
@login_required
@verify_csrf
def api_delete_category(operator, category_id):
    get_container().catalog_service.delete_category(category_id)
    return {"ok": True}


@bp.route('/api/suppliers', methods=['GET', 'POST'])
@login_required
@verify_csrf
def api_suppliers(operator):
    catalog = get_container().catalog_service
    if request.method == 'POST':
        data = payload()
        supplier = catalog.create_supplier(data.get('name'), data.get('phone'), data.get('notes'))
        return {"ok": True, "supplier": supplier.to_dict()}, 201
    return {"ok": True, "suppliers": [s.to_dict() for s in catalog.list_suppliers()]}


@bp.route('/api/suppliers/<supplier_id>/delete', methods=['POST'])
@login_required
@verify_csrf
def api_delete_supplier(operator, supplier_id):
    get_container().catalog_service.delete_supplier(supplier_id)
    return {"ok": True}


@bp.route('/api/lots', methods=['GET', 'POST'])
@login_required
@verify_csrf
def api_lots(operator):
    lot_service = get_container().lot_service
    if request.method == 'POST':
        data = payload()
        lot = lot_service.create_lot(
            supplier_id=data.get('supplier_id'),
            purchase_cost=data.get('purchase_cost'),
            washing_cost=data.get('washing_cost'),
            total_items=data.get('total_items'),
            notes=data.get('notes'),
            purchase_date=data.get('purchase_date'),
        )
        return {"ok": True, "lot": lot.to_dict()}, 201
    lots = lot_service.list_lots()
    return {
        "ok": True,
        "lots": [dict(lot.to_dict(), summary=summarize_lot(lot).to_dict()) for lot in lots],
    }


@bp.route('/api/lots/<lot_id>')
@login_required
def api_lot(operator, lot_id):
    lot = get_container().lot_service.get_lot(lot_id)
    return {
        "ok": True,
        "lot": lot.to_dict(with_products=True),
        "summary": summarize_lot(lot).to_dict(),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# JSON API - PRODUCTS AND STOCK
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route('/api/products', methods=['GET', 'POST'])
@login_required
@verify_csrf
def api_products(operator):
    inventory_service = get_container().inventory_service
    if request.method == 'POST':
        data = payload()
        product = inventory_service.create_product(
            name=data.get('name'),
            cost_price=data.get('cost_price'),
            selling_price=data.get('selling_price'),
            barcode=data.get('barcode'),
            category_id=data.get('category_id'),
            lot_id=data.get('lot_id'),
            stock_quantity=data.get('stock_quantity'),
        )
        return {"ok": True, "product": product.to_dict()}, 201
    if request.args.get('available'):
        products = inventory_service.list_available()
    else:
        products = inventory_service.list_products()
    return {"ok": True, "products": [p.to_dict() for p in products]}


@bp.route('/api/products/<product_id>/price', methods=['POST'])
@login_required
@verify_csrf
def api_update_price(operator, product_id):
    product = get_container().inventory_service.update_product_price(
        product_id, payload().get('selling_price')
    )
    return {"ok": True, "product": product.to_dict()}


@bp.route('/api/products/<product_id>/sold', methods=['POST'])
@login_required
@verify_csrf
def api_mark_sold(operator, product_id):
    product = get_container().inventory_service.mark_product_sold(product_id)
    return {"ok": True, "product": product.to_dict()}


@bp.route('/api/products/<product_id>/delete', methods=['POST'])
@login_required
@verify_csrf
def api_delete_product(operator, product_id):
    get_container().inventory_service.delete_product(product_id)
    return {"ok": True}


@bp.route('/api/stock/add', methods=['POST'])
@login_required
@verify_csrf
def api_add_stock(operator):
    data = payload()
    product = get_container().inventory_service.add_stock(
        data.get('product_id'), data.get('quantity')
    )
    return {"ok": True, "product": product.to_dict()}


@bp.route('/api/stock/bulk', methods=['POST'])
@login_required
@verify_csrf
def api_add_stock_bulk(operator):
    items = (request.get_json(silent=True) or {}).get('items')
    result = get_container().inventory_service.add_stock_bulk(items)
    return result.to_dict()


@bp.route('/api/scan')
@login_required
def api_scan(operator):
    result = get_container().inventory_service.scan(request.args.get('q'))
    return result.to_dict()


# ═══════════════════════════════════════════════════════════════════════════════
# JSON API - CART AND CHECKOUT
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route('/api/cart')
@login_required
def api_cart(operator):
    return {"ok": True, "cart": get_container().cart_service.get_cart()}


@bp.route('/api/cart/add', methods=['POST'])
@login_required
@verify_csrf
def api_cart_add(operator):
    data = payload()
    cart_service = get_container().cart_service
    if data.get('barcode'):
        result = cart_service.add_scanned(data.get('barcode'))
        return dict(result, ok=True)
    cart = cart_service.add_product(data.get('product_id'), data.get('quantity', 1))
    return {"ok": True, "cart": cart}


@bp.route('/api/cart/update', methods=['POST'])
@login_required
@verify_csrf
def api_cart_update(operator):
    data = payload()
    cart = get_container().cart_service.update_quantity(data.get('product_id'), data.get('quantity'))
    return {"ok": True, "cart": cart}


@bp.route('/api/cart/remove', methods=['POST'])
@login_required
@verify_csrf
def api_cart_remove(operator):
    cart = get_container().cart_service.remove_item(payload().get('product_id'))
    return {"ok": True, "cart": cart}


@bp.route('/api/cart/clear', methods=['POST'])
@login_required
@verify_csrf
def api_cart_clear(operator):
    return {"ok": True, "cart": get_container().cart_service.clear_cart()}


@bp.route('/api/checkout', methods=['POST'])
@login_required
@verify_csrf
def api_checkout(operator):
    result = _complete_checkout(payload())
    return {
        "ok": True,
        "sale": result['sale'].to_dict(),
        "payment": result['payment'].to_dict(),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# APP FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

def _register_hooks(app):

    @app.before_request
    def _auth_gate():
        g.pop('operator', None)
        if is_public_path(request.path):
            return None
        if current_operator() is not None:
            return None
        if is_api_request():
            return jsonify({"ok": False, "error": "Authentication required."}), 401
        return redirect(url_for('pos.login', callbackUrl=request.path))

    @app.context_processor
    def _inject_globals():
        return {
            'csrf_token': generate_csrf_token(),
            'current_username': session.get('username'),
            'currency_symbol': app.config['CURRENCY_SYMBOL'],
        }

    @app.template_filter('money')
    def _money_filter(amount):
        return format_money(amount, app.config['CURRENCY_SYMBOL'])

    @app.errorhandler(PosError)
    def _handle_pos_error(error):
        if is_api_request():
            return jsonify(error.to_dict()), error.status_code
        flash(error.message, 'danger')
        return redirect(_back_url())

    @app.errorhandler(404)
    def _not_found(error):
        if is_api_request():
            return jsonify({"ok": False, "error": "Not found."}), 404
        return error

    @app.after_request
    def _set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    @app.teardown_appcontext
    def _remove_session(exc):
        container = app.extensions.get(EXTENSION_KEY)
        if container is not None:
            container.db.remove()


def _register_cli(app):

    @app.cli.command('create-operator')
    @click.argument('username')
    @click.password_option()
    def create_operator_command(username, password):
        """Create an operator who can log in."""
        try:
            operator = get_container().user_service.create_operator(username, password)
        except PosError as exc:
            raise click.ClickException(exc.message)
        click.echo(f"Operator {operator.username} created.")


def create_app(config_overrides=None):
    """
    Builds the Flask app.

    Args:
        config_overrides: Optional dict applied on top of Config

    Returns:
        Configured Flask app with its database created
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app.config['LOG_DIR'], app.config['LOG_LEVEL'])
    if app.config['PRODUCTION_MODE'] and is_default_secret(app.config['SECRET_KEY']):
        logger.warning("Production mode without THRIFT_POS_SECRET_KEY; using the development secret")

    db = Database(app.config['DATABASE_URL'], echo=app.config.get('DATABASE_ECHO', False))
    db.create_all()
    container = AppContainer(db, label_currency=app.config['LABEL_CURRENCY'])
    app.extensions[EXTENSION_KEY] = container

    app.register_blueprint(bp)
    _register_hooks(app)
    _register_cli(app)
    init_profiling(app)

    with app.app_context():
        admin = container.user_service.ensure_admin(
            app.config.get('ADMIN_USER'), app.config.get('ADMIN_PASSWORD')
        )
        if admin is not None:
            logger.info("Seeded operator %s", admin.username)

    return app
