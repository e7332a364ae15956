"""
Gunicorn config: bind to 0.0.0.0 and PORT for Railway/Render.
Run: gunicorn -c gunicorn_config.py passenger_wsgi:application
"""
import os

bind = "0.0.0.0:{}".format(os.environ.get("PORT", "3001"))
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))
threads = 4
# Covers the SMTP send and the breach/CAPTCHA HTTP calls within one request
timeout = 60
accesslog = "-"
