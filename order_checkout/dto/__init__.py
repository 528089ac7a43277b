"""DTO package - exports checkout value objects."""
from order_checkout.dto.checkout_item import CheckoutItem
from order_checkout.dto.calculation_context import CalculationContext, CheckoutUser
from order_checkout.dto.price_result import PriceResult, PromotionResult
from order_checkout.dto.stock_validation_result import StockValidationResult
from order_checkout.dto.shipping import ShippingContext, ShippingResult, build_shipping_context
from order_checkout.dto.coupon import CouponVO, DISCOUNT_FIXED, DISCOUNT_PERCENT
from order_checkout.dto.checkout_result import CheckoutResult

__all__ = [
    'CheckoutItem', 'CalculationContext', 'CheckoutUser',
    'PriceResult', 'PromotionResult', 'StockValidationResult',
    'ShippingContext', 'ShippingResult', 'build_shipping_context',
    'CouponVO', 'DISCOUNT_FIXED', 'DISCOUNT_PERCENT',
    'CheckoutResult',
]
