"""Process-wide service wiring for the HTTP layer.

Each provider is cached so every request shares one set of repositories.
Tests swap them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from backend.app.bookings.lifecycle import BookingLifecycle
from backend.app.config import get_settings
from backend.app.db.inmemory import (
    InMemoryBookingRepository,
    InMemoryCatalog,
    InMemoryIdempotencyStore,
)
from backend.app.db.seed_dev import seed_catalog
from backend.app.middleware.idempotency import IdempotencyMiddleware
from backend.app.utils.logging import StructuredBookingLogger
from backend.app.utils.metrics import PrometheusBookingMetrics


@lru_cache
def get_booking_repository() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@lru_cache
def get_catalog() -> InMemoryCatalog:
    catalog = InMemoryCatalog()
    if get_settings().seed_demo_catalog:
        seed_catalog(catalog)
    return catalog


@lru_cache
def get_lifecycle() -> BookingLifecycle:
    return BookingLifecycle(
        get_booking_repository(),
        get_catalog(),
        settings=get_settings(),
        metrics=PrometheusBookingMetrics(),
        event_logger=StructuredBookingLogger(),
    )


@lru_cache
def get_idempotency() -> IdempotencyMiddleware:
    return IdempotencyMiddleware(
        InMemoryIdempotencyStore(), ttl_seconds=get_settings().idempotency_ttl_seconds
    )
