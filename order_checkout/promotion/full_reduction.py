"""Full reduction promotion: spend at least ``threshold``, get ``reduction`` off."""
from order_checkout.contracts import PromotionMatcher
from order_checkout.dto import CalculationContext, PromotionResult
from order_checkout.utils import money


class FullReductionMatcher(PromotionMatcher):

    def __init__(self, threshold='100.00', reduction='10.00', description='Spend 100, get 10 off', priority=100):
        self.threshold = money.quantize(threshold)
        self.reduction = money.quantize(reduction)
        self.description = description
        self._priority = priority

    @property
    def type(self) -> str:
        return 'full_reduction'

    @property
    def priority(self) -> int:
        return self._priority

    def supports(self, context: CalculationContext) -> bool:
        return len(context.items) > 0

    def match(self, context: CalculationContext) -> PromotionResult:
        total_amount = money.ZERO
        for item in context.items:
            if not item.selected or item.sku is None:
                continue
            item_total = money.multiply(money.resolve_unit_price(item.sku), item.quantity)
            total_amount = money.add(total_amount, item_total)

        # Inclusive: a total exactly at the threshold qualifies
        if money.less_than(total_amount, self.threshold):
            return PromotionResult.empty()

        return PromotionResult(
            promotions={
                self.type: {
                    'type': self.type,
                    'description': self.description,
                    'threshold': self.threshold,
                    'reduction': self.reduction,
                    'applied_amount': total_amount,
                },
            },
            discount=self.reduction,
            details={
                self.type: {
                    'total_amount': total_amount,
                    'threshold': self.threshold,
                    'reduction': self.reduction,
                    'saved': self.reduction,
                },
            }
        )
