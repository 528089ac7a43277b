"""Shipping context and result."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Sequence, Tuple

from order_checkout.dto.calculation_context import CheckoutUser
from order_checkout.dto.checkout_item import CheckoutItem
from order_checkout.utils import money


@dataclass(frozen=True)
class ShippingContext:
    user: CheckoutUser
    items: Tuple[CheckoutItem, ...]
    region: str = 'default'
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))

    @property
    def total_value(self) -> Decimal:
        """Value of the selected items at catalog price."""
        total = money.ZERO
        for item in self.items:
            if not item.selected:
                continue
            total = money.add(total, money.multiply(money.resolve_unit_price(item.sku), item.quantity))
        return total

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items if item.selected)


@dataclass(frozen=True)
class ShippingResult:
    shipping_fee: Decimal
    free_shipping: bool
    shipping_method: str = 'standard'
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'shipping_fee', money.quantize(self.shipping_fee))

    @classmethod
    def free(cls, reason: str = 'Free shipping', details=None) -> 'ShippingResult':
        payload = dict(details or {})
        payload['reason'] = reason
        return cls(money.ZERO, True, 'free', payload)

    @classmethod
    def paid(cls, fee, method: str = 'standard', details=None) -> 'ShippingResult':
        return cls(money.quantize(fee), False, method, dict(details or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'shipping_fee': str(self.shipping_fee),
            'free_shipping': self.free_shipping,
            'shipping_method': self.shipping_method,
            'details': self.details,
        }


def build_shipping_context(user: CheckoutUser, items: Sequence[CheckoutItem], region=None) -> ShippingContext:
    return ShippingContext(user=user, items=tuple(items), region=region or 'default')
