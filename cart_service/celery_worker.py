# cart_service/celery_worker.py
from celery import Celery

from cart_service.utils.settings import (
    CELERY_BROKER_URL,
    BROKER_CONNECT_TIMEOUT,
    CELERY_RESULT_BACKEND,
    EXPIRE_SWEEP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "cart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAZNE: explicite importuj taski, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "cart_service.tasks.expire",
)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "expire-carts-every-minute": {
        "task": "cart_service.tasks.expire.expire_carts_task",
        "schedule": EXPIRE_SWEEP_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"

# publikacja eventow nie moze wisiec na niedostepnym brokerze
celery_app.conf.broker_connection_timeout = BROKER_CONNECT_TIMEOUT
celery_app.conf.broker_transport_options = {"max_retries": 1, "interval_start": 0, "interval_step": 0.2}
