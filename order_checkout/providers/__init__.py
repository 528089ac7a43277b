"""Coupon providers and the chain that routes codes to them."""
from order_checkout.providers.chain import CouponProviderChain, ExternalResolver
from order_checkout.providers.local import LocalCouponProvider

__all__ = ['CouponProviderChain', 'ExternalResolver', 'LocalCouponProvider']
