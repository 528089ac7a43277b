"""Checkout item value object."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union

from order_checkout.exceptions import InvalidCartItemError, MissingRequiredFieldError

Identifier = Union[int, str]


@dataclass(frozen=True)
class CheckoutItem:
    """A single priced line: SKU, quantity and selection flag.

    ``sku`` is an optional catalog reference; when absent the item prices at
    zero unless a SKU loader fills it in.
    """

    sku_id: Identifier
    quantity: int
    selected: bool = True
    sku: Optional[Any] = None
    id: Optional[Identifier] = None

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidCartItemError(f"Quantity must be an integer, got {self.quantity!r}")
        if self.quantity <= 0:
            raise InvalidCartItemError(f"Quantity must be positive, got {self.quantity}")
        if not isinstance(self.selected, bool):
            raise InvalidCartItemError(f"selected must be a boolean, got {self.selected!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CheckoutItem':
        """Build an item from request data (``skuId``/``sku_id`` required)."""
        if not isinstance(data, dict):
            raise InvalidCartItemError(f"Cart item must be an object, got {type(data).__name__}")

        sku_id = data.get('skuId', data.get('sku_id'))
        if sku_id is None or sku_id == '':
            raise MissingRequiredFieldError('skuId')

        return cls(
            sku_id=sku_id,
            quantity=data.get('quantity', 1),
            selected=data.get('selected', True),
            id=data.get('id')
        )

    @classmethod
    def from_cart_item(cls, cart_item: Any) -> 'CheckoutItem':
        """Build an item from a cart row exposing ``sku`` and ``quantity``."""
        if not hasattr(cart_item, 'sku') or not hasattr(cart_item, 'quantity'):
            raise InvalidCartItemError()

        sku = cart_item.sku
        sku_id = getattr(sku, 'id', None) if sku is not None else None
        if not isinstance(sku_id, (int, str)):
            sku_id = '0'

        item_id = getattr(cart_item, 'id', None)
        if not isinstance(item_id, (int, str)):
            item_id = None

        return cls(
            sku_id=sku_id,
            quantity=cart_item.quantity,
            selected=getattr(cart_item, 'selected', True),
            sku=sku,
            id=item_id
        )

    def with_sku(self, sku: Any) -> 'CheckoutItem':
        return replace(self, sku=sku)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'skuId': self.sku_id,
            'quantity': self.quantity,
            'selected': self.selected,
        }
