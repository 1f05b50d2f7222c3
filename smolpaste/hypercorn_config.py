import os

bind = [os.getenv("SMOLPASTE_ADDR", "127.0.0.1:3001")]
worker_class = "asyncio"

loglevel = os.getenv("SMOLPASTE_LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
# Path without query string: tokens travel in the query.
access_log_format = '%(h)s %(l)s %(t)s "%(m)s %(U)s %(H)s" %(s)s %(b)s "%(f)s" "%(a)s"'

graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", 30))
keep_alive_timeout = int(os.getenv("KEEP_ALIVE_TIMEOUT", 5))
