"""Checkout result."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from order_checkout.dto.checkout_item import CheckoutItem
from order_checkout.dto.price_result import PriceResult
from order_checkout.dto.shipping import ShippingResult
from order_checkout.dto.stock_validation_result import StockValidationResult
from order_checkout.utils import money


@dataclass(frozen=True)
class CheckoutResult:
    items: Tuple[CheckoutItem, ...] = ()
    price_result: Optional[PriceResult] = None
    shipping_result: Optional[ShippingResult] = None
    stock_validation: Optional[StockValidationResult] = None
    applied_coupons: Tuple[str, ...] = ()
    order_id: Optional[int] = None
    order_sn: Optional[str] = None
    order_state: Optional[str] = None
    messages: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> 'CheckoutResult':
        return cls()

    @property
    def shipping_fee(self) -> Decimal:
        return self.shipping_result.shipping_fee if self.shipping_result else money.ZERO

    @property
    def original_total(self) -> Decimal:
        return self.price_result.original_price if self.price_result else money.ZERO

    @property
    def total_discount(self) -> Decimal:
        return self.price_result.discount if self.price_result else money.ZERO

    @property
    def final_total(self) -> Decimal:
        """Items total plus shipping fee."""
        items_total = self.price_result.final_price if self.price_result else money.ZERO
        return money.add(items_total, self.shipping_fee)

    def has_stock_issues(self) -> bool:
        return self.stock_validation is not None and not self.stock_validation.valid

    def can_checkout(self) -> bool:
        return len(self.items) > 0 and not self.has_stock_issues()

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'items': [item.to_dict() for item in self.items],
            'summary': {
                'original_total': str(self.original_total),
                'final_total': str(self.final_total),
                'total_discount': str(self.total_discount),
                'shipping_fee': str(self.shipping_fee),
                'free_shipping': self.shipping_result.free_shipping if self.shipping_result else False,
            },
            'price_details': self.price_result.to_dict() if self.price_result else {},
            'shipping_details': self.shipping_result.to_dict() if self.shipping_result else {},
            'stock_validation': self.stock_validation.to_dict() if self.stock_validation else {'valid': True},
            'applied_coupons': list(self.applied_coupons),
            'can_checkout': self.can_checkout(),
        }
        if self.messages:
            result['messages'] = list(self.messages)
        if self.order_id is not None:
            result['order'] = {
                'id': self.order_id,
                'sn': self.order_sn,
                'state': self.order_state,
            }
        return result
