import os

# App
wsgi_app = "surveyadmin:create_app()"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = 1
timeout = 120  # large CSV uploads register row by row
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr; the app itself emits JSON lines
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

forwarded_allow_ips = "*"
proxy_protocol = False
