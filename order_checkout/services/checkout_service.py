"""
Checkout service.

Builds calculation contexts from cart input, prices them, validates stock,
computes shipping, and turns a priced context into a persisted order with
its coupons locked and redeemed.
"""
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from flask import Flask

from order_checkout.calculators import (
    BasePriceCalculator, BasicShippingCalculator, CouponCalculator, PromotionCalculator
)
from order_checkout.contracts import ShippingCalculator, SkuLoader, StockValidator, sort_by_priority
from order_checkout.database import db_session
from order_checkout.dto import (
    CalculationContext, CheckoutItem, CheckoutResult, CheckoutUser,
    ShippingResult, StockValidationResult, build_shipping_context
)
from order_checkout.exceptions import BusinessLogicError, InsufficientStockError, SkuNotFoundError
from order_checkout.models import CheckoutOrder, CheckoutOrderLine, OrderState
from order_checkout.promotion import FullReductionMatcher
from order_checkout.providers import CouponProviderChain, LocalCouponProvider
from order_checkout.services.price_calculation_service import PriceCalculationService
from order_checkout.services.sku_loader import DatabaseSkuLoader
from order_checkout.services.stock_service import DatabaseStockService
from order_checkout.services.stock_validator import BasicStockValidator
from order_checkout.utils import money
from order_checkout.utils.metrics import orders_processed_total

logger = logging.getLogger(__name__)


def generate_order_sn(now: Optional[datetime] = None) -> str:
    """Order number: ORD + timestamp to the second + 4 random digits."""
    now = now or datetime.now()
    return f"ORD{now.strftime('%Y%m%d%H%M%S')}{random.randint(1000, 9999)}"


class CheckoutService:

    def __init__(
        self,
        session,
        price_service: PriceCalculationService,
        coupon_chain: CouponProviderChain,
        stock_validator: StockValidator,
        shipping_calculators: Iterable[ShippingCalculator] = (),
        sku_loader: Optional[SkuLoader] = None,
        auto_cancel_minutes: int = 30,
        currency: str = 'CNY'
    ):
        self.session = session
        self.price_service = price_service
        self.coupon_chain = coupon_chain
        self.stock_validator = stock_validator
        self.shipping_calculators = list(shipping_calculators)
        self.sku_loader = sku_loader
        self.auto_cancel_minutes = auto_cancel_minutes
        self.currency = currency

    def build_context(
        self,
        user: CheckoutUser,
        items: Sequence[CheckoutItem],
        coupons: Sequence[str] = (),
        region: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> CalculationContext:
        """Create a context whose items carry their catalog SKU."""
        context_metadata = dict(metadata or {})
        if region:
            context_metadata['region'] = region
        context_metadata.setdefault('calculate_time', datetime.now())

        context = CalculationContext(
            user=user,
            items=self.load_skus(items),
            metadata=context_metadata
        )
        return context.with_coupons([code for code in coupons if code])

    def load_skus(self, items: Sequence[CheckoutItem]) -> List[CheckoutItem]:
        """
        Attach catalog data to items that have none.

        Raises:
            SkuNotFoundError: the loader does not know an item's SKU
        """
        if self.sku_loader is None:
            return list(items)

        loaded = []
        for item in items:
            if item.sku is None:
                sku = self.sku_loader.load_sku(item.sku_id)
                if sku is None:
                    raise SkuNotFoundError(item.sku_id)
                item = item.with_sku(sku)
            loaded.append(item)
        return loaded

    def validate_stock(self, items: Sequence[CheckoutItem]) -> StockValidationResult:
        return self.stock_validator.validate(items)

    def calculate_shipping(self, user: CheckoutUser, items: Sequence[CheckoutItem],
                           region: Optional[str] = None) -> ShippingResult:
        shipping_context = build_shipping_context(user, items, region)
        for calculator in sort_by_priority(self.shipping_calculators):
            if calculator.supports(shipping_context.items, shipping_context.region):
                return calculator.calculate(shipping_context)
        return ShippingResult.free('No shipping required')

    def calculate_checkout(self, context: CalculationContext, validate_stock: bool = True) -> CheckoutResult:
        """
        Price a context for display.

        Raises:
            BusinessLogicError: the cart is empty or a SKU is off the shelf
        """
        if not context.items:
            raise BusinessLogicError('Cart is empty')

        stock_validation = self.validate_stock(context.items) if validate_stock else None
        return self._price(context, stock_validation)

    def quick_calculate(self, context: CalculationContext) -> CheckoutResult:
        """Price without stock validation; an empty cart gives an empty result."""
        if not context.items:
            return CheckoutResult.empty()
        return self._price(context, None)

    def process(self, context: CalculationContext, remark: Optional[str] = None) -> CheckoutResult:
        """
        Place an order for the context.

        Coupons used by the price are locked before the order is written and
        redeemed after it is committed. On failure the order is rolled back
        (or canceled, once committed) and every coupon still locked is
        released.

        Raises:
            InsufficientStockError: stock validation failed
            BusinessLogicError: empty cart, or a coupon could not be locked/redeemed
        """
        logger.info(f"[CHECKOUT] processing checkout for user={context.user.identifier}")
        result = self.calculate_checkout(context)

        if result.has_stock_issues():
            orders_processed_total.labels(outcome='insufficient_stock').inc()
            raise InsufficientStockError(result.stock_validation.errors)

        user = context.user
        locked: List[str] = []
        try:
            for code in result.applied_coupons:
                if not self.coupon_chain.lock(code, user):
                    raise BusinessLogicError(f'Coupon {code} is not available')
                locked.append(code)

            order = self._create_order(context, result, remark)
            self.session.commit()
        except Exception:
            self.session.rollback()
            self._release_coupons(locked, user)
            orders_processed_total.labels(outcome='failed').inc()
            raise

        redeemed: List[str] = []
        for code in list(locked):
            if not self.coupon_chain.redeem(code, user, {
                'order_id': order.id,
                'order_sn': order.sn,
                'redeemed_at': datetime.now(timezone.utc).isoformat(),
            }):
                logger.error(f"[CHECKOUT] redeem failed for code={code}, canceling order {order.sn}")
                self._cancel_order(order, redeemed)
                self._release_coupons(locked, user)
                orders_processed_total.labels(outcome='failed').inc()
                raise BusinessLogicError(f'Coupon {code} could not be redeemed')
            locked.remove(code)
            redeemed.append(code)
        order.redeemed_coupons = redeemed
        self.session.commit()

        orders_processed_total.labels(outcome='created').inc()
        logger.info(f"[CHECKOUT] order {order.sn} created for user={user.identifier} total={order.total_amount}")

        return CheckoutResult(
            items=result.items,
            price_result=result.price_result,
            shipping_result=result.shipping_result,
            stock_validation=result.stock_validation,
            applied_coupons=result.applied_coupons,
            order_id=order.id,
            order_sn=order.sn,
            order_state=order.state,
            messages=result.messages
        )

    def _price(self, context: CalculationContext, stock_validation: Optional[StockValidationResult]) -> CheckoutResult:
        price_result = self.price_service.calculate(context)
        shipping_result = self.calculate_shipping(context.user, context.items, context.region)

        applied_coupons = tuple(entry['code'] for entry in price_result.detail('coupons', []))
        messages = list(price_result.detail('coupon_messages', []))
        if stock_validation is not None:
            messages.extend(stock_validation.warnings.values())

        return CheckoutResult(
            items=context.items,
            price_result=price_result,
            shipping_result=shipping_result,
            stock_validation=stock_validation,
            applied_coupons=applied_coupons,
            messages=tuple(messages)
        )

    def _create_order(self, context: CalculationContext, result: CheckoutResult, remark: Optional[str]) -> CheckoutOrder:
        order = CheckoutOrder(
            sn=generate_order_sn(),
            user_id=context.user.identifier,
            state=OrderState.INIT.value,
            original_amount=result.original_total,
            discount_amount=result.total_discount,
            shipping_fee=result.shipping_fee,
            total_amount=result.final_total,
            currency=self.currency,
            coupon_codes=list(result.applied_coupons),
            remark=remark,
            auto_cancel_time=datetime.now(timezone.utc) + timedelta(minutes=self.auto_cancel_minutes)
        )
        self.session.add(order)
        self.session.flush()

        for item in context.selected_items():
            if item.sku is None:
                continue
            unit_price = money.resolve_unit_price(item.sku)
            self.session.add(CheckoutOrderLine(
                order_id=order.id,
                sku_id=item.sku.id,
                sku_name=getattr(item.sku, 'name', None),
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=money.multiply(unit_price, item.quantity)
            ))
        return order

    def _cancel_order(self, order: CheckoutOrder, redeemed: Sequence[str]) -> None:
        """Cancel an order, keeping the codes already consumed by it."""
        order.state = OrderState.CANCELED.value
        order.redeemed_coupons = list(redeemed)
        self.session.commit()
        if redeemed:
            logger.warning(f"[CHECKOUT] order {order.sn} canceled after redeeming {', '.join(redeemed)}")

    def _release_coupons(self, codes: Iterable[str], user: CheckoutUser) -> None:
        for code in codes:
            if not self.coupon_chain.unlock(code, user):
                logger.error(f"[CHECKOUT] failed to release coupon {code} for user={user.identifier}")


def build_checkout_service(app: Flask, session=None, external_resolver=None) -> CheckoutService:
    """Wire the checkout components from the app config."""
    session = session or db_session
    config = app.config

    sku_loader = DatabaseSkuLoader(session)
    coupon_chain = CouponProviderChain(
        [LocalCouponProvider(session, config.get('LOCAL_COUPON_PREFIX', ''))],
        external_resolver=external_resolver
    )

    promotion_calculator = PromotionCalculator()
    if config.get('FULL_REDUCTION_ENABLED', True):
        promotion_calculator.add_matcher(FullReductionMatcher(
            threshold=config.get('FULL_REDUCTION_THRESHOLD', '100.00'),
            reduction=config.get('FULL_REDUCTION_AMOUNT', '10.00'),
            description=config.get('FULL_REDUCTION_DESCRIPTION', 'Spend 100, get 10 off')
        ))

    price_service = PriceCalculationService([
        BasePriceCalculator(sku_loader),
        promotion_calculator,
        CouponCalculator(coupon_chain),
    ])

    return CheckoutService(
        session=session,
        price_service=price_service,
        coupon_chain=coupon_chain,
        stock_validator=BasicStockValidator(
            DatabaseStockService(session),
            low_stock_threshold=int(config.get('LOW_STOCK_THRESHOLD', 10))
        ),
        shipping_calculators=[BasicShippingCalculator(
            free_threshold=config.get('FREE_SHIPPING_THRESHOLD', '99.00'),
            default_fee=config.get('DEFAULT_SHIPPING_FEE', '12.00')
        )],
        sku_loader=sku_loader,
        auto_cancel_minutes=int(config.get('ORDER_AUTO_CANCEL_MINUTES', 30)),
        currency=config.get('CURRENCY', 'CNY')
    )


_checkout_service: Optional[CheckoutService] = None


def init_checkout(app: Flask, external_resolver=None) -> None:
    """Initialize checkout service singleton."""
    global _checkout_service
    _checkout_service = build_checkout_service(app, external_resolver=external_resolver)
    app.extensions['checkout'] = _checkout_service
    logger.info("[CHECKOUT] checkout service initialized")


def get_checkout_service() -> CheckoutService:
    """Get checkout service instance."""
    if _checkout_service is None:
        raise RuntimeError("Checkout service not initialized.")
    return _checkout_service
