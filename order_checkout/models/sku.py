"""SKU model."""
from sqlalchemy import Column, String, Boolean, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_checkout.database import Base, BigIntegerPK


class Sku(Base):
    """Sellable stock keeping unit."""

    __tablename__ = 'sku'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    gtin = Column(String(64), nullable=True, unique=True)
    market_price = Column(Numeric(10, 2), nullable=False, default=0)
    valid = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Cascade delete-orphan: removing the SKU removes its stock row
    stock = relationship('SkuStock', uselist=False, back_populates='sku', cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Sku(id={self.id}, name='{self.name}', gtin='{self.gtin}')>"

    @property
    def on_hand_qty(self):
        """Get on hand quantity from stock."""
        if self.stock:
            return self.stock.on_hand_qty
        return 0
