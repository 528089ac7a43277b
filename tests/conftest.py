import pytest
from decimal import Decimal
from types import SimpleNamespace

from order_checkout import create_app
from order_checkout.database import create_all, drop_all, db_session, get_session
from order_checkout.dto import CalculationContext, CheckoutItem, CheckoutUser, DISCOUNT_PERCENT
from order_checkout.models import Sku, SkuStock, CouponCode


@pytest.fixture(scope='function')
def app():
    """Create application instance with a fresh in-memory database."""
    app = create_app('config.TestingConfig')
    with app.app_context():
        create_all()
        yield app
        db_session.remove()
        drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def auth_client(client):
    """Test client whose session belongs to user 1."""
    with client.session_transaction() as sess:
        sess['user_id'] = 1
    return client


@pytest.fixture(scope='function')
def session(app):
    """Database session for testing."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture
def user():
    return CheckoutUser(1)


@pytest.fixture
def other_user():
    return CheckoutUser(2)


def _sku(sku_id, price, name=None, valid=True, gtin=None):
    return SimpleNamespace(
        id=sku_id,
        name=name or f'SKU {sku_id}',
        market_price=Decimal(price) if price is not None else None,
        valid=valid,
        gtin=gtin,
    )


def _item(sku_id, price, quantity=1, selected=True):
    return CheckoutItem(sku_id=sku_id, quantity=quantity, selected=selected, sku=_sku(sku_id, price))


def _context(items, coupons=(), user_id=1, metadata=None):
    return CalculationContext(
        user=CheckoutUser(user_id),
        items=items,
        applied_coupons=tuple(coupons),
        metadata=metadata or {}
    )


@pytest.fixture
def make_sku():
    """Factory for in-memory stand-ins of catalog SKUs."""
    return _sku


@pytest.fixture
def make_item():
    """Factory for selected checkout items carrying a priced SKU."""
    return _item


@pytest.fixture
def make_context():
    return _context


@pytest.fixture
def sku_mug(session):
    """SKU priced 60.00 with plenty of stock."""
    sku = Sku(name='Ceramic Mug', gtin='6901234567890', market_price=Decimal('60.00'), valid=True)
    sku.stock = SkuStock(on_hand_qty=100)
    session.add(sku)
    session.commit()
    return sku


@pytest.fixture
def sku_pen(session):
    """SKU priced 30.00 with low stock."""
    sku = Sku(name='Fountain Pen', market_price=Decimal('30.00'), valid=True)
    sku.stock = SkuStock(on_hand_qty=5)
    session.add(sku)
    session.commit()
    return sku


@pytest.fixture
def sku_retired(session):
    """SKU taken off the shelf."""
    sku = Sku(name='Retired Lamp', market_price=Decimal('20.00'), valid=False)
    sku.stock = SkuStock(on_hand_qty=50)
    session.add(sku)
    session.commit()
    return sku


@pytest.fixture
def coupon_fixed(session):
    """20.00 off, owned by user 1."""
    coupon = CouponCode(
        code='SAVE20',
        owner_id='1',
        name='Save 20',
        discount_value=Decimal('20.00'),
        min_amount=Decimal('0.00'),
        valid=True,
        locked=False,
        extra={'campaign': 'autumn'}
    )
    session.add(coupon)
    session.commit()
    return coupon


@pytest.fixture
def coupon_percent(session):
    """10 percent off with a 50.00 minimum, owned by user 1."""
    coupon = CouponCode(
        code='PCT10',
        owner_id='1',
        discount_type=DISCOUNT_PERCENT,
        discount_value=Decimal('10'),
        min_amount=Decimal('50.00'),
        valid=True,
        locked=False
    )
    session.add(coupon)
    session.commit()
    return coupon


@pytest.fixture
def coupon_other_user(session):
    """Coupon owned by user 2."""
    coupon = CouponCode(
        code='OTHER5',
        owner_id='2',
        discount_value=Decimal('5.00'),
        valid=True,
        locked=False
    )
    session.add(coupon)
    session.commit()
    return coupon
