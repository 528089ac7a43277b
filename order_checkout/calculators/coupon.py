"""Coupon calculator - applies the context's coupon codes through the provider chain."""
import logging
from typing import List

from order_checkout.contracts import PriceCalculator
from order_checkout.dto import CalculationContext, PriceResult
from order_checkout.utils import money

logger = logging.getLogger(__name__)


class CouponCalculator(PriceCalculator):
    """
    Resolves each applied code and discounts it against what is still payable.

    Unknown or unusable coupons are not errors: they are reported in the
    ``coupon_messages`` detail and contribute nothing.
    """

    def __init__(self, provider_chain):
        self.provider_chain = provider_chain

    @property
    def type(self) -> str:
        return 'coupon'

    @property
    def priority(self) -> int:
        return 600

    def supports(self, context: CalculationContext) -> bool:
        return len(context.applied_coupons) > 0

    def calculate(self, context: CalculationContext) -> PriceResult:
        payable = money.clamp_non_negative(context.running_price)
        total_discount = money.ZERO
        applied: List[dict] = []
        messages: List[str] = []

        for code in context.applied_coupons:
            coupon = self.provider_chain.find_by_code(code, context.user)
            if coupon is None:
                messages.append(f"Coupon {code} does not exist or does not belong to the current user")
                logger.warning(f"[COUPON] code={code} not found for user={context.user.identifier}")
                continue

            discount = coupon.evaluate(payable)
            if discount <= money.ZERO:
                messages.append(f"Coupon {code} is not applicable to this order")
                continue

            payable = money.subtract(payable, discount)
            total_discount = money.add(total_discount, discount)
            applied.append({
                'code': code,
                'provider': coupon.provider,
                'discount_type': coupon.discount_type,
                'discount': discount,
            })

        if not applied:
            return PriceResult(money.ZERO, money.ZERO, money.ZERO, details={'coupon_messages': messages})

        return PriceResult(
            original_price=money.ZERO,
            final_price=money.subtract(money.ZERO, total_discount),
            discount=total_discount,
            details={
                'coupons': applied,
                'coupon_discount': total_discount,
                'coupon_messages': messages,
            }
        )
