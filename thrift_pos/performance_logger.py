# ==============================================================================
# LOGGING AND INTERNAL PROFILING
# ==============================================================================
# configure_logging() sets up the application log (thrift_pos.log).
# init_profiling() times every request: all of them go to performance.log,
# slow ones (>= 300 ms warning, >= 700 ms critical) also to slow_routes.log.
# @profile_function keeps call statistics for key service functions.
#
# ON/OFF: app.config['ENABLE_PROFILING']
# ==============================================================================

import logging
import os
import threading
import time
from dataclasses import dataclass
from functools import wraps

# Thresholds in milliseconds
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

performance_log = logging.getLogger("thrift_pos.performance")
slow_routes_log = logging.getLogger("thrift_pos.performance.slow_routes")
slow_functions_log = logging.getLogger("thrift_pos.performance.slow_functions")

# Readable names for the routes (used in the performance log)
ROUTE_NAMES = {
    'POST /login': 'Log in',
    'GET /logout': 'Log out',
    'GET /dashboard': 'View dashboard',
    'GET /inventory': 'View inventory',
    'GET /inventory/lots/<lot_id>': 'View lot',
    'GET /inventory/lots/<lot_id>/labels.pdf': 'Print lot labels',
    'GET /inventory/products/<product_id>/labels.pdf': 'Print product labels',
    'POST /api/lots': 'Create lot',
    'POST /api/products': 'Create product',
    'POST /api/stock/add': 'Add stock',
    'GET /api/scan': 'Scan barcode',
    'POST /api/cart/add': 'Add to cart',
    'POST /api/checkout': 'Complete sale',
}

# {function name: FunctionStats}
_function_stats = {}
_stats_lock = threading.Lock()

_configured_dirs = set()


# ═══════════════════════════════════════════════════════════════════════════
# SETUP
# ═══════════════════════════════════════════════════════════════════════════

def _file_handler(path, level=logging.DEBUG):
    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(log_dir, level="INFO"):
    """
    Sends the package logs to the console and to files under log_dir.
    Safe to call more than once for the same directory.
    """
    package_log = logging.getLogger("thrift_pos")
    package_log.setLevel(level)

    if log_dir in _configured_dirs:
        return
    os.makedirs(log_dir, exist_ok=True)
    _configured_dirs.add(log_dir)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in package_log.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        package_log.addHandler(console)

    package_log.addHandler(_file_handler(os.path.join(log_dir, 'thrift_pos.log')))

    # Timing records only go to their own files
    performance_log.propagate = False
    performance_log.setLevel(logging.INFO)
    performance_log.addHandler(_file_handler(os.path.join(log_dir, 'performance.log')))
    slow_routes_log.addHandler(_file_handler(os.path.join(log_dir, 'slow_routes.log')))
    slow_functions_log.propagate = False
    slow_functions_log.addHandler(_file_handler(os.path.join(log_dir, 'slow_functions.log')))


def _get_route_name(method, path, rule=None):
    """Readable name for a route, falling back to 'METHOD /path'."""
    for candidate in (path, rule):
        if candidate and f"{method} {candidate}" in ROUTE_NAMES:
            return ROUTE_NAMES[f"{method} {candidate}"]
    return f"{method} {path}"


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST PROFILING (Flask hooks)
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    performance_log.info(
        "%s | user=%s | %s %s | %.0f ms",
        _get_route_name(method, path, rule), user or 'anonymous', method, path, time_ms,
    )


def log_slow_route(method, path, rule, time_ms, user=None):
    critical = time_ms >= THRESHOLD_CRITICAL
    slow_routes_log.log(
        logging.CRITICAL if critical else logging.WARNING,
        "%s route: %s | user=%s | %s %s | %.0f ms (threshold %d ms)",
        'Very slow' if critical else 'Slow',
        _get_route_name(method, path, rule), user or 'anonymous', method, path,
        time_ms, THRESHOLD_CRITICAL if critical else THRESHOLD_WARNING,
    )


def init_profiling(app):
    """
    Registers before/after request hooks that time each request.

    Usage:
        init_profiling(app)
    """
    if not app.config.get('ENABLE_PROFILING', True):
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response
        if request.path.startswith('/static'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        rule = str(request.url_rule) if request.url_rule else request.path
        user = session.get('username')

        log_route_performance(request.method, request.path, rule, elapsed, user)
        if elapsed >= THRESHOLD_WARNING:
            log_slow_route(request.method, request.path, rule, elapsed, user)
        return response


# ═══════════════════════════════════════════════════════════════════════════
# FUNCTION PROFILING
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class FunctionStats:
    calls: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def record(self, elapsed_ms):
        self.calls += 1
        self.total_ms += elapsed_ms
        self.max_ms = max(self.max_ms, elapsed_ms)

    def to_dict(self):
        return {
            'calls': self.calls,
            'avg_time': round(self.total_ms / self.calls, 2) if self.calls else 0,
            'max_time': round(self.max_ms, 2),
        }


def _record_call(func_name, elapsed_ms):
    with _stats_lock:
        _function_stats.setdefault(func_name, FunctionStats()).record(elapsed_ms)

    if elapsed_ms >= THRESHOLD_WARNING:
        slow_functions_log.warning(
            "%s function: %s | %.0f ms",
            'Critical' if elapsed_ms >= THRESHOLD_CRITICAL else 'Slow',
            func_name, elapsed_ms,
        )


def profile_function(func=None, name=None):
    """
    Decorator that records calls, average and maximum time of a function.

    Usage:
        @profile_function
        def add_stock(...): ...

        @profile_function(name="Complete sale")
        def complete_sale(...): ...
    """
    def decorate(fn):
        label = name or fn.__qualname__

        @wraps(fn)
        def timed(*args, **kwargs):
            began = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                _record_call(label, (time.perf_counter() - began) * 1000)

        return timed

    # Bare @profile_function
    return decorate(func) if func is not None else decorate


def get_function_stats():
    """
    Returns:
        dict: {name: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        return {label: stats.to_dict() for label, stats in _function_stats.items()}


def reset_stats():
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'configure_logging',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
