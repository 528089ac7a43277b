"""
Integration tests for checkout orchestration against the database.
"""

import pytest
from decimal import Decimal

from order_checkout.dto import CheckoutItem
from order_checkout.exceptions import BusinessLogicError, InsufficientStockError, SkuNotFoundError
from order_checkout.models import CheckoutOrder, CheckoutOrderLine, CouponCode, OrderState
from order_checkout.services import DatabaseStockService, generate_order_sn, get_checkout_service


@pytest.fixture
def service(app):
    return get_checkout_service()


def coupon_state(session, code):
    session.expire_all()
    return session.query(CouponCode).filter_by(code=code).one()


class TestCalculateCheckout:

    def test_promotion_and_free_shipping(self, service, user, sku_mug):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_mug.id, quantity=2)])

        result = service.calculate_checkout(context)

        assert result.original_total == Decimal('120.00')
        assert result.total_discount == Decimal('10.00')
        assert result.shipping_fee == Decimal('0.00')
        assert result.final_total == Decimal('110.00')
        assert result.can_checkout() is True
        assert context.applied_promotions['full_reduction']['applied_amount'] == Decimal('120.00')

    def test_coupon_applies_after_promotion(self, service, user, sku_mug, coupon_fixed):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_mug.id, quantity=2)], coupons=['SAVE20'])

        result = service.calculate_checkout(context)

        assert result.final_total == Decimal('90.00')
        assert result.applied_coupons == ('SAVE20',)

    def test_paid_shipping_by_region(self, service, user, sku_pen):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_pen.id, quantity=1)], region='beijing')

        result = service.calculate_checkout(context)

        assert result.shipping_fee == Decimal('8.00')
        assert result.final_total == Decimal('38.00')

    def test_low_stock_is_a_message(self, service, user, sku_pen):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_pen.id, quantity=1)])

        result = service.calculate_checkout(context)

        assert result.stock_validation.has_warnings()
        assert any('Fountain Pen' in message for message in result.messages)

    def test_insufficient_stock_blocks_checkout(self, service, user, sku_pen):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_pen.id, quantity=6)])

        result = service.calculate_checkout(context)

        assert result.has_stock_issues()
        assert result.can_checkout() is False

    def test_retired_sku_is_rejected(self, service, user, sku_retired):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_retired.id, quantity=1)])

        with pytest.raises(BusinessLogicError):
            service.calculate_checkout(context)

    def test_empty_cart(self, service, user):
        context = service.build_context(user, [])

        with pytest.raises(BusinessLogicError):
            service.calculate_checkout(context)
        assert service.quick_calculate(context).final_total == Decimal('0.00')

    def test_unknown_sku(self, service, user):
        with pytest.raises(SkuNotFoundError):
            service.build_context(user, [CheckoutItem(sku_id=9999, quantity=1)])

    def test_quick_calculate_skips_stock(self, service, user, sku_pen):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_pen.id, quantity=50)])

        result = service.quick_calculate(context)

        assert result.stock_validation is None
        assert result.original_total == Decimal('1500.00')


class TestProcess:

    def test_places_order_and_redeems_coupon(self, session, service, user, sku_mug, coupon_fixed):
        sku_id = sku_mug.id
        context = service.build_context(user, [CheckoutItem(sku_id=sku_id, quantity=2)], coupons=['SAVE20'])

        result = service.process(context, remark='leave at the door')

        order = session.query(CheckoutOrder).filter_by(id=result.order_id).one()
        assert order.sn == result.order_sn
        assert order.state == OrderState.INIT.value
        assert order.user_id == '1'
        assert order.total_amount == Decimal('90.00')
        assert order.discount_amount == Decimal('30.00')
        assert order.coupon_codes == ['SAVE20']
        assert order.redeemed_coupons == ['SAVE20']
        assert order.remark == 'leave at the door'
        assert order.auto_cancel_time is not None

        lines = session.query(CheckoutOrderLine).filter_by(order_id=order.id).all()
        assert [(line.sku_id, line.quantity, line.line_total) for line in lines] == [(sku_id, 2, Decimal('120.00'))]

        coupon = coupon_state(session, 'SAVE20')
        assert coupon.valid is False
        assert coupon.locked is False
        assert coupon.extra['order_sn'] == result.order_sn
        assert coupon.extra['campaign'] == 'autumn'

    def test_insufficient_stock_creates_nothing(self, session, service, user, sku_pen, coupon_fixed):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_pen.id, quantity=6)], coupons=['SAVE20'])

        with pytest.raises(InsufficientStockError) as exc:
            service.process(context)

        assert exc.value.status_code == 409
        assert session.query(CheckoutOrder).count() == 0
        assert coupon_state(session, 'SAVE20').locked is False

    def test_coupon_locked_elsewhere(self, session, service, user, sku_mug, coupon_fixed):
        coupon_fixed.locked = True
        session.commit()
        context = service.build_context(user, [CheckoutItem(sku_id=sku_mug.id, quantity=1)], coupons=['SAVE20'])

        with pytest.raises(BusinessLogicError):
            service.process(context)

        assert session.query(CheckoutOrder).count() == 0
        assert coupon_state(session, 'SAVE20').valid is True

    def test_failed_lock_releases_earlier_coupons(self, session, service, user, sku_mug, coupon_fixed, coupon_percent):
        coupon_percent.locked = True
        session.commit()
        context = service.build_context(
            user, [CheckoutItem(sku_id=sku_mug.id, quantity=2)], coupons=['SAVE20', 'PCT10']
        )

        with pytest.raises(BusinessLogicError):
            service.process(context)

        assert coupon_state(session, 'SAVE20').locked is False

    def test_failed_redeem_cancels_order(self, session, service, user, sku_mug, coupon_fixed, monkeypatch):
        monkeypatch.setattr(service.coupon_chain, 'redeem', lambda code, user, metadata=None: False)
        context = service.build_context(user, [CheckoutItem(sku_id=sku_mug.id, quantity=1)], coupons=['SAVE20'])

        with pytest.raises(BusinessLogicError):
            service.process(context)

        order = session.query(CheckoutOrder).one()
        assert order.state == OrderState.CANCELED.value
        coupon = coupon_state(session, 'SAVE20')
        assert coupon.locked is False
        assert coupon.valid is True

    def test_partial_redeem_is_recorded_on_canceled_order(
        self, session, service, user, sku_mug, coupon_fixed, coupon_percent, monkeypatch
    ):
        redeem = service.coupon_chain.redeem

        def redeem_all_but_percent(code, user, metadata=None):
            if code == 'PCT10':
                return False
            return redeem(code, user, metadata)

        monkeypatch.setattr(service.coupon_chain, 'redeem', redeem_all_but_percent)
        context = service.build_context(
            user, [CheckoutItem(sku_id=sku_mug.id, quantity=2)], coupons=['SAVE20', 'PCT10']
        )

        with pytest.raises(BusinessLogicError):
            service.process(context)

        session.expire_all()
        order = session.query(CheckoutOrder).one()
        assert order.state == OrderState.CANCELED.value
        assert order.coupon_codes == ['SAVE20', 'PCT10']
        assert order.redeemed_coupons == ['SAVE20']
        assert coupon_state(session, 'SAVE20').valid is False
        percent = coupon_state(session, 'PCT10')
        assert percent.valid is True
        assert percent.locked is False

    def test_order_without_coupons(self, session, service, user, sku_pen):
        context = service.build_context(user, [CheckoutItem(sku_id=sku_pen.id, quantity=2)], region='xinjiang')

        result = service.process(context)

        assert result.order_state == 'INIT'
        assert result.final_total == Decimal('85.00')


class TestOrderNumber:

    def test_format(self):
        sn = generate_order_sn()

        assert sn.startswith('ORD')
        assert len(sn) == 3 + 14 + 4
        assert sn[3:].isdigit()


class TestDatabaseStockService:

    def test_available_stock(self, session, sku_pen):
        stock_service = DatabaseStockService(session)

        assert stock_service.get_available_stock(sku_pen) == 5
        assert stock_service.check_stock_availability(sku_pen, 5) is True
        assert stock_service.check_stock_availability(sku_pen, 6) is False
