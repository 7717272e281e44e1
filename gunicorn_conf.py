import os

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "3000")
bind = f"{host}:{port}"

# One worker: the nightly backfill scheduler and the JSON record store
# must not run in more than one process
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
keepalive = 120
timeout = int(os.getenv("TIMEOUT", "120"))
preload_app = True

# Logging
loglevel = os.getenv("LOG_LEVEL", "info")
errorlog = "-"  # stderr
accesslog = "-"  # stdout
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'
