"""Base price calculator - subtotal of the selected items at catalog price."""
import logging
from typing import Any, Dict, List, Optional

from order_checkout.contracts import PriceCalculator, SkuLoader
from order_checkout.dto import CalculationContext, CheckoutItem, PriceResult
from order_checkout.exceptions import InvalidSkuTypeError, SkuNotFoundError, UnsupportedItemTypeError
from order_checkout.utils import money

logger = logging.getLogger(__name__)


class BasePriceCalculator(PriceCalculator):
    """
    Establishes the subtotal: ``unit_price x quantity`` for every selected item.

    Unselected items are skipped. An item without a catalog reference is
    loaded through the SKU loader when one is configured (an unknown SKU is
    a configuration error); otherwise, or when the reference carries no
    price, the item prices at zero.
    """

    def __init__(self, sku_loader: Optional[SkuLoader] = None):
        self.sku_loader = sku_loader

    @property
    def type(self) -> str:
        return 'base_price'

    @property
    def priority(self) -> int:
        return 1000

    def supports(self, context: CalculationContext) -> bool:
        return len(context.items) > 0

    def calculate(self, context: CalculationContext) -> PriceResult:
        logger.debug(f"[PRICING] base price: {len(context.items)} items for user={context.user.identifier}")

        total = money.ZERO
        details: List[Dict[str, Any]] = []
        products: List[Dict[str, Any]] = []

        for index, item in enumerate(context.items):
            if not isinstance(item, CheckoutItem):
                raise UnsupportedItemTypeError(type(item).__name__)

            if not item.selected:
                logger.debug(f"[PRICING] item #{index} sku={item.sku_id} not selected, skipped")
                continue

            sku = self._ensure_sku(item)
            unit_price = money.resolve_unit_price(sku)
            item_total = money.multiply(unit_price, item.quantity)
            total = money.add(total, item_total)

            details.append({
                'type': self.type,
                'sku_id': item.sku_id,
                'sku_code': self._sku_code(sku, item),
                'unit_price': unit_price,
                'quantity': item.quantity,
                'total_price': item_total,
            })

            if sku is None:
                logger.warning(f"[PRICING] item #{index} sku={item.sku_id} has no catalog data, priced at zero")
                continue

            products.append({
                'skuId': item.sku_id,
                'productName': getattr(sku, 'name', None),
                'quantity': item.quantity,
                'unitPrice': unit_price,
                'payablePrice': item_total,
            })

        logger.debug(f"[PRICING] base total={total} ({len(details)} priced lines)")

        return PriceResult(
            original_price=total,
            final_price=total,
            discount=money.ZERO,
            details={
                'base_price': details,
                'base_total': total,
            },
            products=products
        )

    def _ensure_sku(self, item: CheckoutItem):
        if item.sku is not None or self.sku_loader is None:
            return item.sku

        sku = self.sku_loader.load_sku(item.sku_id)
        if sku is None:
            logger.error(f"[PRICING] SKU {item.sku_id} not found")
            raise SkuNotFoundError(item.sku_id)
        if not hasattr(sku, 'id'):
            logger.error(f"[PRICING] loader returned {type(sku).__name__} for SKU {item.sku_id}")
            raise InvalidSkuTypeError(type(sku).__name__)
        return sku

    @staticmethod
    def _sku_code(sku, item: CheckoutItem) -> str:
        if sku is None:
            return ''
        return getattr(sku, 'gtin', None) or str(item.sku_id)
