# backend/wsgi.py
from kmdash import create_app

app = create_app()
