"""Extension points of the checkout pipeline.

Every implementation declares an explicit ``type`` (or ``identifier``) and
``priority``; services pick implementations through ``supports()`` and never
through isinstance checks.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from order_checkout.dto import (
    CalculationContext, CheckoutItem, CheckoutUser, CouponVO, PriceResult,
    PromotionResult, ShippingContext, ShippingResult, StockValidationResult,
)


class PriceCalculator(ABC):
    """Computes one part of the final price."""

    @property
    @abstractmethod
    def type(self) -> str: ...

    @property
    @abstractmethod
    def priority(self) -> int:
        """Higher runs first."""

    @abstractmethod
    def supports(self, context: CalculationContext) -> bool: ...

    @abstractmethod
    def calculate(self, context: CalculationContext) -> PriceResult: ...


class PromotionMatcher(ABC):
    """Computes a promotional discount from a context."""

    @property
    @abstractmethod
    def type(self) -> str: ...

    @property
    @abstractmethod
    def priority(self) -> int: ...

    @abstractmethod
    def supports(self, context: CalculationContext) -> bool: ...

    @abstractmethod
    def match(self, context: CalculationContext) -> PromotionResult: ...


class CouponProvider(ABC):
    """Source of coupons owning their lock/unlock/redeem lifecycle."""

    @property
    @abstractmethod
    def identifier(self) -> str: ...

    @abstractmethod
    def supports(self, code: str) -> bool: ...

    @abstractmethod
    def find_by_code(self, code: str, user: CheckoutUser) -> Optional[CouponVO]: ...

    @abstractmethod
    def lock(self, code: str, user: CheckoutUser) -> bool: ...

    @abstractmethod
    def unlock(self, code: str, user: CheckoutUser) -> bool: ...

    @abstractmethod
    def redeem(self, code: str, user: CheckoutUser, metadata: Optional[Dict[str, Any]] = None) -> bool: ...


class ShippingCalculator(ABC):

    @property
    @abstractmethod
    def type(self) -> str: ...

    @property
    @abstractmethod
    def priority(self) -> int: ...

    @abstractmethod
    def supports(self, items: Iterable[CheckoutItem], region: str) -> bool: ...

    @abstractmethod
    def calculate(self, context: ShippingContext) -> ShippingResult: ...


class SkuLoader(ABC):
    """Catalog lookup; returns None for unknown identifiers."""

    @abstractmethod
    def load_sku(self, sku_id) -> Optional[Any]: ...


class StockService(ABC):
    """Stock source consumed by checkout validation."""

    @abstractmethod
    def get_available_stock(self, sku) -> int: ...

    @abstractmethod
    def check_stock_availability(self, sku, quantity: int) -> bool: ...


class StockValidator(ABC):

    @abstractmethod
    def validate(self, items: Iterable[CheckoutItem]) -> StockValidationResult: ...

    @abstractmethod
    def get_available_quantity(self, sku) -> int: ...

    @abstractmethod
    def get_available_quantities(self, skus: Iterable[Any]) -> Dict[str, int]: ...


def sort_by_priority(handlers: Iterable) -> List:
    """Highest priority first; equal priorities keep registration order."""
    return sorted(handlers, key=lambda handler: -handler.priority)
