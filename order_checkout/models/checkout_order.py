"""Checkout order and order line models."""
import enum
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_checkout.database import Base, BigIntegerPK


class OrderState(str, enum.Enum):
    """Order lifecycle states."""
    INIT = 'INIT'
    PAID = 'PAID'
    CANCELED = 'CANCELED'


class CheckoutOrder(Base):
    """Order created by a successful checkout."""

    __tablename__ = 'checkout_order'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    sn = Column(String(32), nullable=False, unique=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    state = Column(String(16), nullable=False, default=OrderState.INIT.value)
    order_type = Column(String(32), nullable=False, default='normal')
    original_amount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_fee = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(8), nullable=False, default='CNY')
    coupon_codes = Column(JSON().with_variant(JSONB, 'postgresql'), nullable=True)
    redeemed_coupons = Column(JSON().with_variant(JSONB, 'postgresql'), nullable=True)
    remark = Column(Text, nullable=True)
    auto_cancel_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    lines = relationship('CheckoutOrderLine', back_populates='order', cascade="all, delete-orphan")

    def __repr__(self):
        return f"<CheckoutOrder(id={self.id}, sn='{self.sn}', state='{self.state}', total={self.total_amount})>"


class CheckoutOrderLine(Base):
    """One purchased SKU within an order."""

    __tablename__ = 'checkout_order_line'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    order_id = Column(BigIntegerPK, ForeignKey('checkout_order.id'), nullable=False)
    sku_id = Column(BigIntegerPK, ForeignKey('sku.id'), nullable=False)
    sku_name = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    order = relationship('CheckoutOrder', back_populates='lines')
    sku = relationship('Sku')

    def __repr__(self):
        return f"<CheckoutOrderLine(order_id={self.order_id}, sku_id={self.sku_id}, qty={self.quantity})>"
