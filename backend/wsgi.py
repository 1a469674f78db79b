# backend/wsgi.py
from rentpos import create_app

app = create_app()
