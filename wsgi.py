"""
WSGI / Flask-Migrate entry point.

Usage:
    FLASK_APP=wsgi.py flask db migrate -m "description"
    FLASK_APP=wsgi.py flask db upgrade
    FLASK_APP=wsgi.py flask seed-demo
    gunicorn wsgi:app
"""

from welfare import create_app

app = create_app()
