"""Loads catalog SKUs for checkout items."""
import logging
from typing import Optional

from order_checkout.contracts import SkuLoader
from order_checkout.models import Sku

logger = logging.getLogger(__name__)


class DatabaseSkuLoader(SkuLoader):

    def __init__(self, session):
        self.session = session

    def load_sku(self, sku_id) -> Optional[Sku]:
        try:
            sku_pk = int(sku_id)
        except (TypeError, ValueError):
            logger.warning(f"[PRICING] invalid SKU id {sku_id!r}")
            return None
        return self.session.get(Sku, sku_pk)
