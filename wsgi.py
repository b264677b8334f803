# ==============================================================================
# WSGI entry point
# ==============================================================================
# Production:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# Local development:
#   python wsgi.py
#
# Configuration comes from THRIFT_POS_* environment variables
# (see thrift_pos/config.py).
# ==============================================================================

from thrift_pos.main import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
