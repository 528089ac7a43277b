"""Coupon value object shared by every provider."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from order_checkout.utils import money

DISCOUNT_FIXED = 'fixed'
DISCOUNT_PERCENT = 'percent'


@dataclass(frozen=True)
class CouponVO:
    """Read-only view of a coupon, whatever system it came from."""

    code: str
    provider: str
    discount_type: str = DISCOUNT_FIXED
    discount_value: Decimal = money.ZERO
    min_amount: Decimal = money.ZERO
    name: Optional[str] = None
    owner_id: Optional[str] = None
    valid: bool = True
    locked: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'discount_value', money.to_decimal(self.discount_value))
        object.__setattr__(self, 'min_amount', money.quantize(self.min_amount))

    def evaluate(self, payable) -> Decimal:
        """Discount this coupon grants against ``payable`` (never above it)."""
        payable = money.quantize(payable)
        if payable <= money.ZERO or money.less_than(payable, self.min_amount):
            return money.ZERO
        if self.discount_type == DISCOUNT_PERCENT:
            discount = money.percentage(payable, self.discount_value)
        else:
            discount = money.quantize(self.discount_value)
        return min(discount, payable)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'provider': self.provider,
            'name': self.name,
            'discount_type': self.discount_type,
            'discount_value': str(self.discount_value),
            'min_amount': str(self.min_amount),
            'valid': self.valid,
            'locked': self.locked,
        }
