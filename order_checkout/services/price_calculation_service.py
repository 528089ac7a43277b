"""
Price calculation service.

Runs the registered price calculators in priority order (highest first,
registration order on ties) and folds their results into one PriceResult.
"""
import logging
from typing import List, Optional

from order_checkout.contracts import PriceCalculator, sort_by_priority
from order_checkout.dto import CalculationContext, PriceResult
from order_checkout.exceptions import CheckoutError, PriceCalculationFailureError
from order_checkout.utils.metrics import price_calculations_total

logger = logging.getLogger(__name__)


class PriceCalculationService:

    def __init__(self, calculators=()):
        self._calculators: List[PriceCalculator] = []
        for calculator in calculators:
            self.add_calculator(calculator)

    def add_calculator(self, calculator: PriceCalculator) -> None:
        self._calculators.append(calculator)

    @property
    def calculators(self) -> List[PriceCalculator]:
        """Registered calculators in execution order."""
        return sort_by_priority(self._calculators)

    def get_calculator_by_type(self, calculator_type: str) -> Optional[PriceCalculator]:
        for calculator in self._calculators:
            if calculator.type == calculator_type:
                return calculator
        return None

    def calculate(self, context: CalculationContext) -> PriceResult:
        """
        Price the context.

        Each calculator sees the running final price on the context before it
        runs. The returned final price is clamped at zero.

        Raises:
            CheckoutError: a calculator rejected its input (invalid item, unknown SKU)
            PriceCalculationFailureError: a calculator failed unexpectedly
        """
        if not context.items and not context.applied_coupons:
            price_calculations_total.labels(outcome='empty').inc()
            return PriceResult.empty()

        result = PriceResult.empty()
        context.advance_running_price(result.final_price)

        for calculator in self.calculators:
            if not calculator.supports(context):
                continue

            try:
                partial = calculator.calculate(context)
            except CheckoutError:
                price_calculations_total.labels(outcome='rejected').inc()
                raise
            except Exception as e:
                logger.exception(f"[PRICING] calculator {calculator.type} failed")
                price_calculations_total.labels(outcome='error').inc()
                raise PriceCalculationFailureError(f'Calculator {calculator.type} failed: {e}') from e

            result = result.merge(partial)
            context.advance_running_price(result.final_price)
            logger.debug(f"[PRICING] {calculator.type}: final={result.final_price} discount={result.discount}")

        price_calculations_total.labels(outcome='ok').inc()
        return result.with_floor()
