"""
Gunicorn configuration for the Weekly Tally API.

Tuned for small single-instance containers.
Env vars that override defaults:
  PORT     - TCP port to bind
  WORKERS  - number of worker processes (default: 2)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '4000')}"

# Each request is a short unit of work; 2 workers fit a 512 MB container.
workers = int(os.environ.get("WORKERS", "2"))

worker_class = "uvicorn.workers.UvicornWorker"

# Clients poll for new activity, so keep idle connections around briefly.
keepalive = 5

# Longer than IMAGE_TIMEOUT_SECONDS so a slow image call never kills a worker.
timeout = 60

loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
