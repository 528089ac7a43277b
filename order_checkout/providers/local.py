"""Coupon provider backed by the local coupon_code table."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from order_checkout.contracts import CouponProvider
from order_checkout.dto import CheckoutUser, CouponVO
from order_checkout.models import CouponCode

logger = logging.getLogger(__name__)


class LocalCouponProvider(CouponProvider):
    """
    Coupons persisted in the local database.

    A coupon is visible to its owner only while ``valid`` is true. Lock and
    redeem are conditional UPDATEs on the ``locked`` flag, so two concurrent
    checkouts cannot both hold the same code. The in-memory map of locked
    codes is only a shortcut to the row id; on a miss the row is looked up
    again. An entry left behind by a failed release is dropped the next time
    the row is found valid but not locked, or no longer valid.
    """

    def __init__(self, session, code_prefix: str = ''):
        self.session = session
        self.code_prefix = code_prefix or ''
        self._locked_codes: Dict[Tuple[str, str], int] = {}

    @property
    def identifier(self) -> str:
        return 'local'

    def supports(self, code: str) -> bool:
        if not code:
            return False
        return code.startswith(self.code_prefix)

    def find_by_code(self, code: str, user: CheckoutUser) -> Optional[CouponVO]:
        entity = self._find_code_entity(code, user)
        if entity is None:
            return None
        return entity.to_vo(self.identifier)

    def lock(self, code: str, user: CheckoutUser) -> bool:
        entity = self._find_code_entity(code, user)
        if entity is None:
            logger.debug(f"[COUPON] lock rejected, code={code} not found for user={user.identifier}")
            return False

        if entity.locked:
            logger.warning(f"[COUPON] code={code} id={entity.id} is already locked")
            return False

        try:
            updated = self.session.query(CouponCode).filter(
                CouponCode.id == entity.id,
                CouponCode.locked.is_(False),
                CouponCode.valid.is_(True)
            ).update(
                {CouponCode.locked: True, CouponCode.lock_time: datetime.now(timezone.utc)},
                synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[COUPON] lock failed for code={code} id={entity.id}: {e}")
            return False

        if updated != 1:
            # Another checkout won the race between the read and the update
            logger.warning(f"[COUPON] code={code} id={entity.id} was locked concurrently")
            return False

        self._locked_codes[self._cache_key(code, user)] = entity.id
        logger.debug(f"[COUPON] code={code} id={entity.id} locked for user={user.identifier}")
        return True

    def unlock(self, code: str, user: CheckoutUser) -> bool:
        coupon_id = self._cached_id(code, user)
        if coupon_id is None:
            entity = self._find_code_entity(code, user)
            if entity is None:
                # Nothing to release
                return True
            coupon_id = entity.id

        try:
            self.session.query(CouponCode).filter(
                CouponCode.id == coupon_id,
                CouponCode.valid.is_(True)
            ).update(
                {CouponCode.locked: False, CouponCode.lock_time: None},
                synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[COUPON] unlock failed for code={code} id={coupon_id}: {e}")
            return False

        self._locked_codes.pop(self._cache_key(code, user), None)
        logger.debug(f"[COUPON] code={code} id={coupon_id} unlocked")
        return True

    def redeem(self, code: str, user: CheckoutUser, metadata: Optional[Dict[str, Any]] = None) -> bool:
        entity = self._find_cached_entity(code, user) or self._find_code_entity(code, user)
        if entity is None:
            logger.error(f"[COUPON] redeem failed, code={code} not found for user={user.identifier}")
            return False

        if not entity.locked:
            self._locked_codes.pop(self._cache_key(code, user), None)
            logger.error(f"[COUPON] redeem failed, code={code} id={entity.id} is not locked")
            return False

        extra = dict(entity.extra or {})
        extra.update(metadata or {})

        try:
            updated = self.session.query(CouponCode).filter(
                CouponCode.id == entity.id,
                CouponCode.locked.is_(True),
                CouponCode.valid.is_(True)
            ).update(
                {
                    CouponCode.valid: False,
                    CouponCode.locked: False,
                    CouponCode.use_time: datetime.now(timezone.utc),
                    CouponCode.extra: extra,
                },
                synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[COUPON] redeem failed for code={code} id={entity.id}: {e}")
            return False

        if updated != 1:
            self._locked_codes.pop(self._cache_key(code, user), None)
            logger.error(f"[COUPON] redeem failed, code={code} id={entity.id} changed state concurrently")
            return False

        self._locked_codes.pop(self._cache_key(code, user), None)
        logger.info(f"[COUPON] code={code} id={entity.id} redeemed by user={user.identifier}")
        return True

    def _find_code_entity(self, code: str, user: CheckoutUser) -> Optional[CouponCode]:
        return self.session.query(CouponCode).filter(
            CouponCode.owner_id == user.identifier,
            CouponCode.code == code,
            CouponCode.valid.is_(True)
        ).first()

    def _find_cached_entity(self, code: str, user: CheckoutUser) -> Optional[CouponCode]:
        coupon_id = self._cached_id(code, user)
        if coupon_id is None:
            return None
        entity = self.session.get(CouponCode, coupon_id)
        if entity is None or not entity.valid or entity.owner_id != user.identifier:
            self._locked_codes.pop(self._cache_key(code, user), None)
            return None
        return entity

    def _cached_id(self, code: str, user: CheckoutUser) -> Optional[int]:
        return self._locked_codes.get(self._cache_key(code, user))

    @staticmethod
    def _cache_key(code: str, user: CheckoutUser) -> Tuple[str, str]:
        return user.identifier, code
