import os

wsgi_app = "storefront.wsgi:application"
bind = f"0.0.0.0:{os.getenv('PORT', '3001')}"

# One process by default: the catalog store lock only spans a single process
workers = int(os.getenv("WEB_CONCURRENCY", "1"))

# Threads per worker (blocking SMTP and file IO)
worker_class = "gthread"
threads = int(os.getenv("GTHREADS", "4"))

# Timeouts
timeout = int(os.getenv("GUNI_TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GUNI_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNI_KEEPALIVE", "5"))

# Robustness
preload_app = True
max_requests = int(os.getenv("GUNI_MAX_REQUESTS", "2000"))
max_requests_jitter = int(os.getenv("GUNI_MAX_REQUESTS_JITTER", "200"))

# Access/error logs to stdout; application logs are JSON (see settings.LOGGING)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNI_LOGLEVEL", "info")
