"""
Gunicorn configuration for production deployment.

Gunicorn manages the process, Uvicorn workers run the ASGI app.

Decision: a single worker by default. The send quota and the used access
codes live in process memory, so N workers would mean N independent quotas.
Raise GUNICORN_WORKERS only if that is acceptable for the deployment.
"""

import os

# Server socket
bind = f"0.0.0.0:{os.getenv('API_PORT', '8000')}"
backlog = 2048

# Worker processes
workers = int(os.getenv("GUNICORN_WORKERS", "1"))
worker_class = "uvicorn.workers.UvicornWorker"  # ASGI-compatible async workers
worker_connections = 1000
# No max_requests: recycling a worker would reset the quota

# Timeouts
# Must exceed the provider timeout plus rendering time
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
keepalive = 5
graceful_timeout = 30  # Time to finish in-flight submissions during graceful reload

# Logging
accesslog = "-"  # Log to stdout (Docker-friendly)
errorlog = "-"  # Log to stderr (Docker-friendly)
loglevel = os.getenv("LOG_LEVEL", "info").lower()
# No query string (%(q)s) in the access log
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(m)s %(U)s" %(s)s %(b)s "%(a)s" %(D)s'

# Process naming
proc_name = "postcard-mailer"

# Server mechanics
daemon = False  # Run in foreground (required for Docker)
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

# SSL (disabled, handled by reverse proxy)
keyfile = None
certfile = None
