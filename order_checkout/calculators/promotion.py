"""Promotion calculator - composes promotion matchers into one discount."""
import logging
from typing import List

from order_checkout.contracts import PriceCalculator, PromotionMatcher, sort_by_priority
from order_checkout.dto import CalculationContext, PriceResult, PromotionResult
from order_checkout.utils import money

logger = logging.getLogger(__name__)


class PromotionCalculator(PriceCalculator):
    """Runs every supporting matcher (priority desc, then registration order)."""

    def __init__(self, matchers=()):
        self._matchers: List[PromotionMatcher] = []
        for matcher in matchers:
            self.add_matcher(matcher)

    @property
    def type(self) -> str:
        return 'promotion'

    @property
    def priority(self) -> int:
        return 800

    @property
    def matchers(self) -> List[PromotionMatcher]:
        return sort_by_priority(self._matchers)

    def add_matcher(self, matcher: PromotionMatcher) -> None:
        self._matchers.append(matcher)

    def supports(self, context: CalculationContext) -> bool:
        return len(self._matchers) > 0 and len(context.items) > 0

    def calculate(self, context: CalculationContext) -> PriceResult:
        promotion_result = PromotionResult.empty()

        for matcher in self.matchers:
            if not matcher.supports(context):
                continue

            result = matcher.match(context)
            if not result.has_promotions():
                continue

            promotion_result = promotion_result.merge(result)
            for key, effect in result.promotions.items():
                context.record_promotion(key, effect)
            logger.debug(f"[PRICING] promotion {matcher.type} matched, discount={result.discount}")

        discount = promotion_result.discount
        return PriceResult(
            original_price=money.ZERO,
            final_price=money.subtract(money.ZERO, discount),
            discount=discount,
            details={
                'promotions': promotion_result.promotions,
                'promotion_details': promotion_result.details,
            }
        )
