"""Stock lookups over the sku_stock table."""
from order_checkout.contracts import StockService
from order_checkout.models import SkuStock


class DatabaseStockService(StockService):

    def __init__(self, session):
        self.session = session

    def get_available_stock(self, sku) -> int:
        """On-hand quantity for the SKU, 0 when no stock row exists."""
        stock = self.session.get(SkuStock, sku.id)
        if stock is None:
            return 0
        return max(int(stock.on_hand_qty or 0), 0)

    def check_stock_availability(self, sku, quantity: int) -> bool:
        return self.get_available_stock(sku) >= quantity
