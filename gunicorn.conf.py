# gunicorn.conf.py
import os

# Network
bind = os.environ.get("TROC_BIND", "0.0.0.0:8000")   # nginx will reverse-proxy to this
forwarded_allow_ips = "*"

# Workers
# rule of thumb: workers = 2 * CPU cores
workers = int(os.environ.get("TROC_WORKERS", "3"))
threads = 2
worker_class = "gthread"
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = "-"          # stdout (docker-friendly)
errorlog  = "-"          # stderr
loglevel  = os.environ.get("TROC_LOG_LEVEL", "info").lower()

# App
wsgi_app = "troc_project.wsgi:application"
