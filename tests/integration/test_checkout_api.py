"""
Integration tests for the checkout HTTP endpoints.
"""

from order_checkout.models import CheckoutOrder, CouponCode


class TestAuthentication:

    def test_requires_session_user(self, client):
        response = client.post('/checkout/calculate-price', json={'items': []})

        assert response.status_code == 401
        assert response.get_json()['status'] == 'error'


class TestCalculatePrice:

    def test_price_breakdown(self, auth_client, sku_mug, coupon_fixed):
        response = auth_client.post('/checkout/calculate-price', json={
            'items': [{'skuId': sku_mug.id, 'quantity': 2}],
            'coupons': ['SAVE20'],
        })

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['summary']['original_total'] == '120.00'
        assert data['summary']['total_discount'] == '30.00'
        assert data['summary']['final_total'] == '90.00'
        assert data['summary']['free_shipping'] is True
        assert data['applied_coupons'] == ['SAVE20']
        assert data['can_checkout'] is True

    def test_missing_sku_id(self, auth_client):
        response = auth_client.post('/checkout/calculate-price', json={'items': [{'quantity': 1}]})

        assert response.status_code == 422
        assert response.get_json()['field'] == 'skuId'

    def test_invalid_quantity(self, auth_client, sku_mug):
        response = auth_client.post('/checkout/calculate-price', json={
            'items': [{'skuId': sku_mug.id, 'quantity': 0}],
        })

        assert response.status_code == 422

    def test_non_boolean_selected(self, auth_client, sku_mug):
        response = auth_client.post('/checkout/calculate-price', json={
            'items': [{'skuId': sku_mug.id, 'quantity': 1, 'selected': 'false'}],
        })

        assert response.status_code == 422
        assert 'selected must be a boolean' in response.get_json()['message']

    def test_unknown_sku(self, auth_client):
        response = auth_client.post('/checkout/calculate-price', json={'items': [{'skuId': 12345, 'quantity': 1}]})

        assert response.status_code == 422
        assert response.get_json()['sku_id'] == '12345'

    def test_items_must_be_a_list(self, auth_client):
        response = auth_client.post('/checkout/calculate-price', json={'items': 'abc'})

        assert response.status_code == 400

    def test_empty_cart_without_stock_validation(self, auth_client):
        response = auth_client.post('/checkout/calculate-price', json={'items': [], 'validateStock': False})

        assert response.status_code == 200
        assert response.get_json()['data']['summary']['final_total'] == '0.00'


class TestStockAndShipping:

    def test_validate_stock(self, auth_client, sku_pen):
        response = auth_client.post('/checkout/validate-stock', json={
            'items': [{'skuId': sku_pen.id, 'quantity': 10}],
        })

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['valid'] is False
        assert str(sku_pen.id) in data['errors']

    def test_shipping_fee(self, auth_client, sku_pen):
        response = auth_client.post('/checkout/shipping-fee', json={
            'items': [{'skuId': sku_pen.id, 'quantity': 1}],
            'region': 'gansu',
        })

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['shipping_fee'] == '15.00'
        assert data['free_shipping'] is False


class TestProcess:

    def test_process_creates_order(self, auth_client, session, sku_mug, coupon_fixed):
        response = auth_client.post('/checkout/process', json={
            'items': [{'skuId': sku_mug.id, 'quantity': 2}],
            'coupons': ['SAVE20'],
            'remark': 'gift wrap',
        })

        assert response.status_code == 201
        order_data = response.get_json()['data']['order']
        assert order_data['sn'].startswith('ORD')
        assert order_data['state'] == 'INIT'

        session.expire_all()
        assert session.query(CheckoutOrder).filter_by(sn=order_data['sn']).count() == 1
        assert session.query(CouponCode).filter_by(code='SAVE20').one().valid is False

    def test_process_insufficient_stock(self, auth_client, sku_pen):
        response = auth_client.post('/checkout/process', json={
            'items': [{'skuId': sku_pen.id, 'quantity': 99}],
        })

        assert response.status_code == 409
        assert str(sku_pen.id) in response.get_json()['errors']


class TestCouponLookup:

    def test_own_coupon(self, auth_client, coupon_fixed):
        response = auth_client.get('/checkout/coupons/SAVE20')

        assert response.status_code == 200
        assert response.get_json()['data']['discount_value'] == '20.00'

    def test_other_users_coupon(self, auth_client, coupon_other_user):
        response = auth_client.get('/checkout/coupons/OTHER5')

        assert response.status_code == 404


class TestMetrics:

    def test_metrics_endpoint(self, auth_client, sku_mug):
        auth_client.post('/checkout/calculate-price', json={'items': [{'skuId': sku_mug.id, 'quantity': 1}]})

        response = auth_client.get('/metrics')

        assert response.status_code == 200
        assert b'checkout_price_calculations_total' in response.data
