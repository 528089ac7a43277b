"""Checkout services."""
from order_checkout.services.price_calculation_service import PriceCalculationService
from order_checkout.services.sku_loader import DatabaseSkuLoader
from order_checkout.services.stock_service import DatabaseStockService
from order_checkout.services.stock_validator import BasicStockValidator
from order_checkout.services.checkout_service import (
    CheckoutService, build_checkout_service, init_checkout, get_checkout_service, generate_order_sn
)

__all__ = [
    'PriceCalculationService', 'DatabaseSkuLoader', 'DatabaseStockService', 'BasicStockValidator',
    'CheckoutService', 'build_checkout_service', 'init_checkout', 'get_checkout_service', 'generate_order_sn',
]
