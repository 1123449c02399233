"""
Gunicorn configuration para el API de evaluaciones.
El API no guarda estado entre requests, así que escala por workers sin coordinación.
"""
import multiprocessing
import os

# Por defecto la mitad de los cores, mínimo 1
workers = int(os.getenv("GUNICORN_WORKERS", str(max(1, multiprocessing.cpu_count() // 2))))

# Worker class: UvicornWorker para ASGI
worker_class = "uvicorn.workers.UvicornWorker"

port = os.getenv("PORT", "8000")
bind = f"0.0.0.0:{port}"

# Los payloads traen la planilla completa; el cálculo es en memoria
timeout = 60
keepalive = 5
graceful_timeout = 30

# Reiniciar workers después de N requests
max_requests = 1000
max_requests_jitter = 50

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

preload_app = True


def on_starting(server):
    import logging
    logger = logging.getLogger("gunicorn.error")
    logger.info(f"[GUNICORN] Iniciando API de evaluaciones con {workers} workers")
