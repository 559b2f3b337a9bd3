# Gunicorn configuration file
# Usage: gunicorn -c gunicorn.conf.py wsgi:app

# Server socket
bind = "0.0.0.0:8065"
backlog = 2048

# Worker processes; each worker holds its own content cache and tag index
workers = 2
worker_class = "gthread"
threads = 8
timeout = 30
keepalive = 2

# Build the tag index once, before forking
preload_app = True

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'


# Custom access log filter to suppress health check logs
class HealthCheckFilter:
    def filter(self, record):
        # Suppress logs for successful health checks to reduce noise
        if hasattr(record, 'getMessage'):
            message = record.getMessage()
            return not ('/health' in message and ' 200 ' in message)
        return True


def when_ready(server):
    import logging
    access_logger = logging.getLogger("gunicorn.access")
    access_logger.addFilter(HealthCheckFilter())


# Process naming
proc_name = "blog"

# Server mechanics
daemon = False
pidfile = "/tmp/gunicorn-blog.pid"
tmp_upload_dir = None

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190
