"""Price calculation context."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from order_checkout.dto.checkout_item import CheckoutItem
from order_checkout.utils import money


@dataclass(frozen=True)
class CheckoutUser:
    """Identity reference for the caller; only the id is used here."""

    id: Union[int, str]

    @property
    def identifier(self) -> str:
        return str(self.id)


@dataclass
class CalculationContext:
    """
    Everything the calculator chain prices.

    The context instance travels through every calculator of one request.
    ``items`` is frozen into a tuple (order preserved); ``applied_promotions``
    is the only state calculators add to while the chain runs.
    """

    user: CheckoutUser
    items: Tuple[CheckoutItem, ...]
    applied_coupons: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)
    applied_promotions: Dict[str, Any] = field(default_factory=dict)
    # Final price accumulated so far by the calculator chain
    running_price: Decimal = money.ZERO

    def __post_init__(self):
        self.items = tuple(self.items)
        self.applied_coupons = tuple(self.applied_coupons)
        self.metadata = dict(self.metadata)

    def metadata_value(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    @property
    def region(self) -> Optional[str]:
        region = self.metadata.get('region')
        return region if isinstance(region, str) else None

    @property
    def calculate_time(self) -> datetime:
        value = self.metadata.get('calculate_time')
        return value if isinstance(value, datetime) else datetime.now()

    def selected_items(self) -> Tuple[CheckoutItem, ...]:
        return tuple(item for item in self.items if item.selected)

    def record_promotion(self, promotion_id: str, effect: Any) -> None:
        self.applied_promotions[promotion_id] = effect

    def advance_running_price(self, final_price) -> None:
        self.running_price = money.quantize(final_price)

    def with_metadata(self, new_metadata: Dict[str, Any]) -> 'CalculationContext':
        merged = dict(self.metadata)
        merged.update(new_metadata)
        return CalculationContext(
            user=self.user,
            items=self.items,
            applied_coupons=self.applied_coupons,
            metadata=merged
        )

    def with_coupons(self, coupons: Sequence[str]) -> 'CalculationContext':
        codes = list(self.applied_coupons)
        for code in coupons:
            if code not in codes:
                codes.append(code)
        return CalculationContext(
            user=self.user,
            items=self.items,
            applied_coupons=tuple(codes),
            metadata=self.metadata
        )

    def with_items(self, items: Sequence[CheckoutItem]) -> 'CalculationContext':
        return CalculationContext(
            user=self.user,
            items=tuple(items),
            applied_coupons=self.applied_coupons,
            metadata=self.metadata
        )
