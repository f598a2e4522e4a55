"""Gunicorn configuration for the password gateway.

Usage:
    gunicorn password_gateway.main:app -c gunicorn_conf.py
"""

import os

bind = f"0.0.0.0:{os.getenv('SERVICE_PORT', '3001')}"
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"
worker_tmp_dir = "/dev/shm"

# ── Timeouts ──────────────────────────────────
# The start-up readiness gate may poll for up to STARTUP_MAX_ATTEMPTS *
# STARTUP_INTERVAL_SECONDS before a worker accepts traffic.
timeout = int(os.getenv("GUNICORN_TIMEOUT", "330"))
graceful_timeout = 30
keepalive = 5

# ── TLS ───────────────────────────────────────
certfile = os.getenv("SSL_CERT") or None
keyfile = os.getenv("SSL_KEY") or None

# ── Logging ───────────────────────────────────
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

proc_name = os.getenv("SERVICE_NAME", "change-password-ui")
max_requests = 1000
max_requests_jitter = 50
