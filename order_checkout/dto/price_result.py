"""Price calculation results."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from order_checkout.utils import money


@dataclass(frozen=True)
class PriceResult:
    """
    Totals produced by a calculator, or by the whole chain once merged.

    A calculator returns a delta: the base calculator contributes the
    subtotal to both ``original_price`` and ``final_price``; discount
    calculators contribute zero original, a negative final and a positive
    ``discount``.
    """

    original_price: Decimal
    final_price: Decimal
    discount: Decimal = money.ZERO
    details: Dict[str, Any] = field(default_factory=dict)
    products: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        object.__setattr__(self, 'original_price', money.quantize(self.original_price))
        object.__setattr__(self, 'final_price', money.quantize(self.final_price))
        object.__setattr__(self, 'discount', money.quantize(self.discount))

    @classmethod
    def empty(cls) -> 'PriceResult':
        return cls(money.ZERO, money.ZERO, money.ZERO)

    def detail(self, key: str, default: Any = None) -> Any:
        return self.details.get(key, default)

    def merge(self, other: 'PriceResult') -> 'PriceResult':
        details = dict(self.details)
        details.update(other.details)
        return PriceResult(
            original_price=money.add(self.original_price, other.original_price),
            final_price=money.add(self.final_price, other.final_price),
            discount=money.add(self.discount, other.discount),
            details=details,
            products=list(self.products) + list(other.products)
        )

    def with_floor(self) -> 'PriceResult':
        """Clamp the final price at zero."""
        if self.final_price >= money.ZERO:
            return self
        return PriceResult(
            original_price=self.original_price,
            final_price=money.ZERO,
            discount=self.discount,
            details=self.details,
            products=self.products
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_price': str(self.original_price),
            'final_price': str(self.final_price),
            'discount': str(self.discount),
            'details': self.details,
            'products': self.products,
        }


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of one or more promotion matchers; empty means no match."""

    promotions: Dict[str, Any] = field(default_factory=dict)
    discount: Decimal = money.ZERO
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'discount', money.quantize(self.discount))

    @classmethod
    def empty(cls) -> 'PromotionResult':
        return cls()

    def has_promotions(self) -> bool:
        return bool(self.promotions)

    def merge(self, other: 'PromotionResult') -> 'PromotionResult':
        promotions = dict(self.promotions)
        promotions.update(other.promotions)
        details = dict(self.details)
        details.update(other.details)
        return PromotionResult(
            promotions=promotions,
            discount=money.add(self.discount, other.discount),
            details=details
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'promotions': self.promotions,
            'discount': str(self.discount),
            'details': self.details,
        }
