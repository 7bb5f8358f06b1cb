"""
gunicorn entry point: gunicorn wsgi:app

Set FLASK_ENV=production; create_app refuses to start there without a
real SECRET_KEY.
"""
from app import create_app

app = create_app()
