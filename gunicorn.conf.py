"""
Production Server Configuration

Run FastAPI with Uvicorn workers under Gunicorn. Each worker holds its own
connection pool, so total connections are workers * (pool_size + max_overflow).
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
max_requests = 10000
max_requests_jitter = 1000
# Above the default 30s statement timeout so slow reports can still fall back
timeout = 60
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "dashboard-analytics-api"

# Server mechanics
daemon = False
pidfile = "/tmp/gunicorn.pid"

# Logging; application logs are structlog JSON on stdout
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None
