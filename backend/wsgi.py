# backend/wsgi.py
# Entry point for `flask --app wsgi` and WSGI servers.
import atexit

from stockroom import create_app
from stockroom.extensions import gateway

app = create_app()


def _shutdown():
    with app.app_context():
        gateway.close()


atexit.register(_shutdown)
