"""Promotion matchers."""
from order_checkout.promotion.full_reduction import FullReductionMatcher

__all__ = ['FullReductionMatcher']
