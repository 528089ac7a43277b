"""Models package - exports all SQLAlchemy models."""
from order_checkout.models.sku import Sku
from order_checkout.models.sku_stock import SkuStock
from order_checkout.models.coupon_code import CouponCode
from order_checkout.models.checkout_order import CheckoutOrder, CheckoutOrderLine, OrderState

__all__ = [
    'Sku', 'SkuStock',
    'CouponCode',
    'CheckoutOrder', 'CheckoutOrderLine', 'OrderState',
]
