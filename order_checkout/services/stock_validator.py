"""Stock validation for checkout items."""
import logging
from typing import Any, Dict, Iterable

from order_checkout.contracts import StockService, StockValidator
from order_checkout.dto import CheckoutItem, StockValidationResult
from order_checkout.exceptions import BusinessLogicError

logger = logging.getLogger(__name__)


class BasicStockValidator(StockValidator):
    """
    Checks requested quantities against available stock.

    Unselected items and items without catalog data are skipped. A SKU that
    is no longer valid aborts the validation with BusinessLogicError.
    """

    def __init__(self, stock_service: StockService, low_stock_threshold: int = 10):
        self.stock_service = stock_service
        self.low_stock_threshold = low_stock_threshold

    def validate(self, items: Iterable[CheckoutItem]) -> StockValidationResult:
        errors: Dict[str, str] = {}
        warnings: Dict[str, str] = {}
        details: Dict[str, Dict[str, Any]] = {}

        for item in items:
            logger.debug(f"[STOCK] checking sku={item.sku_id} qty={item.quantity} selected={item.selected}")
            if not item.selected:
                continue

            sku = item.sku
            if sku is None:
                continue

            sku_name = getattr(sku, 'name', None) or str(item.sku_id)
            if not getattr(sku, 'valid', True):
                raise BusinessLogicError(f'Product "{sku_name}" is no longer available')

            sku_id = str(getattr(sku, 'id', item.sku_id))
            requested = item.quantity
            available = self.get_available_quantity(sku)

            details[sku_id] = {
                'sku_code': getattr(sku, 'gtin', None) or sku_id,
                'sku_name': sku_name,
                'requested_quantity': requested,
                'available_quantity': available,
            }

            if available <= 0 or requested > available:
                errors[sku_id] = f'Insufficient stock for "{sku_name}"'
            elif available < self.low_stock_threshold:
                warnings[sku_id] = f'Low stock for "{sku_name}"'

        if errors:
            logger.info(f"[STOCK] validation failed for {len(errors)} SKUs")
            return StockValidationResult.failure(errors, warnings, details)
        return StockValidationResult.success(details, warnings)

    def get_available_quantity(self, sku) -> int:
        return self.stock_service.get_available_stock(sku)

    def get_available_quantities(self, skus) -> Dict[str, int]:
        return {str(sku.id): self.get_available_quantity(sku) for sku in skus}
