"""Price and shipping calculators."""
from order_checkout.calculators.base_price import BasePriceCalculator
from order_checkout.calculators.promotion import PromotionCalculator
from order_checkout.calculators.coupon import CouponCalculator
from order_checkout.calculators.shipping import BasicShippingCalculator

__all__ = ['BasePriceCalculator', 'PromotionCalculator', 'CouponCalculator', 'BasicShippingCalculator']
