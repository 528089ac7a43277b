"""Basic shipping calculator: free above a threshold, otherwise a per-region fee."""
from decimal import Decimal

from order_checkout.contracts import ShippingCalculator
from order_checkout.dto import ShippingContext, ShippingResult
from order_checkout.utils import money

REGION_SHIPPING_FEES = {
    # Free delivery regions
    'shanghai': Decimal('0.00'),
    'jiangsu': Decimal('0.00'),
    'zhejiang': Decimal('0.00'),
    # Tier-1 cities
    'beijing': Decimal('8.00'),
    'guangzhou': Decimal('8.00'),
    'shenzhen': Decimal('8.00'),
    # Remote regions
    'xinjiang': Decimal('25.00'),
    'xizang': Decimal('25.00'),
    'qinghai': Decimal('20.00'),
    'gansu': Decimal('15.00'),
}


class BasicShippingCalculator(ShippingCalculator):

    def __init__(self, free_threshold='99.00', default_fee='12.00', region_fees=None):
        self.free_threshold = money.quantize(free_threshold)
        self.default_fee = money.quantize(default_fee)
        self.region_fees = dict(REGION_SHIPPING_FEES if region_fees is None else region_fees)

    @property
    def type(self) -> str:
        return 'basic_shipping'

    @property
    def priority(self) -> int:
        return 100

    def supports(self, items, region: str) -> bool:
        return len(list(items)) > 0

    def calculate(self, context: ShippingContext) -> ShippingResult:
        total_value = context.total_value
        region = context.region

        if not money.less_than(total_value, self.free_threshold):
            return ShippingResult.free(
                f"Free shipping on orders over {money.format_money(self.free_threshold)}",
                {
                    'order_value': total_value,
                    'threshold': self.free_threshold,
                    'region': region,
                }
            )

        fee = self.region_fee(region)
        return ShippingResult.paid(
            fee,
            'standard',
            {
                'order_value': total_value,
                'region': region,
                'base_fee': fee,
                'free_threshold': self.free_threshold,
                'needed_for_free': money.subtract(self.free_threshold, total_value),
            }
        )

    def region_fee(self, region: str) -> Decimal:
        return self.region_fees.get((region or '').lower(), self.default_fee)
