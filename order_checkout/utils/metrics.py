"""Prometheus collectors for checkout operations."""
import os

from prometheus_client import CollectorRegistry, Counter, REGISTRY
from prometheus_client import multiprocess

# Check if running in multi-process mode (Gunicorn)
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

_collector_registry = registry if not MULTIPROCESS_MODE else None

price_calculations_total = Counter(
    'checkout_price_calculations_total',
    'Price calculations run by the calculator chain',
    ['outcome'],
    registry=_collector_registry
)

coupon_operations_total = Counter(
    'checkout_coupon_operations_total',
    'Coupon provider chain operations',
    ['operation', 'provider', 'result'],
    registry=_collector_registry
)

orders_processed_total = Counter(
    'checkout_orders_processed_total',
    'Checkout process attempts',
    ['outcome'],
    registry=_collector_registry
)
