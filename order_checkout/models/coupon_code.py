"""Locally issued coupon code model."""
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from order_checkout.database import Base, BigIntegerPK
from order_checkout.dto import CouponVO, DISCOUNT_FIXED


class CouponCode(Base):
    """
    A coupon code issued to one owner.

    ``locked`` is set while an order that uses the code is being placed;
    ``use_time`` is set once the code is redeemed.
    """

    __tablename__ = 'coupon_code'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    discount_type = Column(String(16), nullable=False, default=DISCOUNT_FIXED)
    discount_value = Column(Numeric(10, 2), nullable=False, default=0)
    min_amount = Column(Numeric(10, 2), nullable=False, default=0)
    valid = Column(Boolean, nullable=False, default=True)
    locked = Column(Boolean, nullable=False, default=False)
    lock_time = Column(DateTime(timezone=True), nullable=True)
    use_time = Column(DateTime(timezone=True), nullable=True)
    extra = Column(JSON().with_variant(JSONB, 'postgresql'), nullable=True)
    remark = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<CouponCode(id={self.id}, code='{self.code}', owner_id='{self.owner_id}', locked={self.locked})>"

    @property
    def is_used(self):
        return self.use_time is not None

    def to_vo(self, provider='local'):
        return CouponVO(
            code=self.code,
            provider=provider,
            discount_type=self.discount_type or DISCOUNT_FIXED,
            discount_value=self.discount_value,
            min_amount=self.min_amount or 0,
            name=self.name,
            owner_id=self.owner_id,
            valid=bool(self.valid),
            locked=bool(self.locked),
            metadata=dict(self.extra or {}),
        )
