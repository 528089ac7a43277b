"""SKU stock model."""
from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_checkout.database import Base, BigIntegerPK


class SkuStock(Base):
    """SKU stock - 1:1 with Sku."""

    __tablename__ = 'sku_stock'

    sku_id = Column(BigIntegerPK, ForeignKey('sku.id'), primary_key=True)
    on_hand_qty = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    sku = relationship('Sku', back_populates='stock')

    def __repr__(self):
        return f"<SkuStock(sku_id={self.sku_id}, on_hand_qty={self.on_hand_qty})>"
