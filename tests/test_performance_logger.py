import os

from thrift_pos.main import create_app
from thrift_pos.performance_logger import get_function_stats, profile_function, reset_stats


def test_profile_function_records_calls():
    reset_stats()

    @profile_function(name='Sample')
    def sample(x):
        return x * 2

    assert sample(2) == 4
    assert sample(3) == 6
    stats = get_function_stats()['Sample']
    assert stats['calls'] == 2
    assert stats['max_time'] >= 0


def test_bare_decorator_uses_qualname():
    reset_stats()

    @profile_function
    def bare():
        return 'ok'

    bare()
    assert any(name.endswith('bare') for name in get_function_stats())


def test_requests_are_logged(tmp_path):
    log_dir = str(tmp_path / 'logs')
    app = create_app({
        'TESTING': True,
        'DATABASE_URL': 'sqlite://',
        'LOG_DIR': log_dir,
        'ENABLE_PROFILING': True,
        'ADMIN_PASSWORD': None,
    })
    app.test_client().get('/login')

    with open(os.path.join(log_dir, 'performance.log'), encoding='utf-8') as f:
        assert 'GET /login' in f.read()
