"""Coupon provider chain.

Routes a coupon code to the provider that supports it. Lookups try every
supporting provider in registration order and then the external resolver;
lock/unlock/redeem go to the first supporting provider only. Nothing here
raises: provider faults are logged and reported as "not found" or False.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from order_checkout.contracts import CouponProvider
from order_checkout.dto import CheckoutUser, CouponVO
from order_checkout.utils.metrics import coupon_operations_total

logger = logging.getLogger(__name__)

# resolver(code, user) -> CouponVO or None
ExternalResolver = Callable[[str, CheckoutUser], Optional[CouponVO]]


class CouponProviderChain:

    def __init__(self, providers=(), external_resolver: Optional[ExternalResolver] = None):
        self._providers: List[CouponProvider] = []
        self.external_resolver = external_resolver
        for provider in providers:
            self.add_provider(provider)

    @property
    def providers(self) -> List[CouponProvider]:
        return list(self._providers)

    def add_provider(self, provider: CouponProvider) -> None:
        self._providers.append(provider)
        logger.debug(f"[COUPON] provider registered: {provider.identifier} (total={len(self._providers)})")

    def find_by_code(self, code: str, user: CheckoutUser,
                     resolver: Optional[ExternalResolver] = None) -> Optional[CouponVO]:
        """
        Resolve a code to a coupon, or None.

        ``resolver`` overrides the chain's external resolver for this call;
        it is consulted only when no provider found the code.
        """
        for provider in self._providers:
            if not provider.supports(code):
                continue

            try:
                coupon = provider.find_by_code(code, user)
            except Exception as e:
                logger.warning(f"[COUPON] provider {provider.identifier} failed to find code={code}: {e}")
                coupon_operations_total.labels(operation='find', provider=provider.identifier, result='error').inc()
                continue

            if coupon is not None:
                logger.debug(f"[COUPON] code={code} resolved by provider {provider.identifier} user={user.identifier}")
                coupon_operations_total.labels(operation='find', provider=provider.identifier, result='found').inc()
                return coupon

        coupon = self._resolve_externally(code, user, resolver or self.external_resolver)
        if coupon is not None:
            logger.debug(f"[COUPON] code={code} resolved externally user={user.identifier}")
            coupon_operations_total.labels(operation='find', provider='external', result='found').inc()
            return coupon

        logger.debug(f"[COUPON] code={code} not found user={user.identifier}")
        coupon_operations_total.labels(operation='find', provider='none', result='not_found').inc()
        return None

    def lock(self, code: str, user: CheckoutUser) -> bool:
        return self._delegate('lock', code, user)

    def unlock(self, code: str, user: CheckoutUser) -> bool:
        return self._delegate('unlock', code, user)

    def redeem(self, code: str, user: CheckoutUser, metadata: Optional[Dict[str, Any]] = None) -> bool:
        return self._delegate('redeem', code, user, dict(metadata or {}))

    def find_supporting_provider(self, code: str) -> Optional[CouponProvider]:
        for provider in self._providers:
            if provider.supports(code):
                return provider
        return None

    def _delegate(self, operation: str, code: str, user: CheckoutUser, *args) -> bool:
        provider = self.find_supporting_provider(code)
        if provider is None:
            logger.warning(f"[COUPON] no provider supports code={code} for {operation}")
            coupon_operations_total.labels(operation=operation, provider='none', result='unsupported').inc()
            return False

        try:
            result = bool(getattr(provider, operation)(code, user, *args))
        except Exception as e:
            logger.error(f"[COUPON] {operation} failed for code={code} provider={provider.identifier}: {e}")
            coupon_operations_total.labels(operation=operation, provider=provider.identifier, result='error').inc()
            return False

        logger.debug(f"[COUPON] {operation} code={code} provider={provider.identifier} result={result}")
        coupon_operations_total.labels(
            operation=operation,
            provider=provider.identifier,
            result='ok' if result else 'rejected'
        ).inc()
        return result

    @staticmethod
    def _resolve_externally(code: str, user: CheckoutUser, resolver: Optional[ExternalResolver]) -> Optional[CouponVO]:
        if resolver is None:
            return None
        try:
            return resolver(code, user)
        except Exception as e:
            logger.warning(f"[COUPON] external resolver failed for code={code}: {e}")
            return None
