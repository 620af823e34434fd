# cart_service/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cart_service.api.errors import register_error_handlers
from cart_service.api.routers import carts, customers, health, orders
from cart_service.celery_worker import celery_app
from cart_service.data.database import create_tables, engine
from cart_service.services.cache_service import CacheService
from cart_service.services.event_publisher import CeleryEventPublisher
from cart_service.services.lock_service import LockService
from cart_service.services.product_client import ProductClient
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()

    lock_service = LockService()
    cache = CacheService()
    await lock_service.connect()
    await cache.connect()

    app.state.lock_service = lock_service
    app.state.cache = cache
    events = CeleryEventPublisher(celery_app)
    await events.connect()
    app.state.events = events
    app.state.product_client = ProductClient()

    if lock_service.fallback_mode:
        logger.warning("Locki koszyka tylko w pamieci procesu - uruchamiac jedna instancje serwisu")

    yield

    await lock_service.close()
    await cache.close()
    await engine.dispose()


def create_app(lifespan=lifespan) -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(customers.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app
