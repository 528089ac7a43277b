"""Checkout blueprint - JSON procedures for pricing, stock, shipping and order placement."""
from flask import Blueprint, request, jsonify, g

from order_checkout.dto import CheckoutItem
from order_checkout.exceptions import BusinessLogicError, NotFoundError
from order_checkout.middleware import require_login
from order_checkout.services.checkout_service import get_checkout_service

checkout_bp = Blueprint('checkout', __name__, url_prefix='/checkout')


def _request_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BusinessLogicError('Request body must be a JSON object')
    return payload


def _parse_items(payload: dict):
    raw_items = payload.get('items')
    if not isinstance(raw_items, list):
        raise BusinessLogicError('items must be a list')
    return [CheckoutItem.from_dict(raw) for raw in raw_items]


def _parse_coupons(payload: dict):
    codes = payload.get('coupons') or []
    if isinstance(codes, str):
        codes = [codes]
    if not isinstance(codes, list):
        raise BusinessLogicError('coupons must be a list of codes')
    return [str(code).strip() for code in codes if str(code).strip()]


def _build_context(payload: dict):
    service = get_checkout_service()
    return service.build_context(
        g.user,
        _parse_items(payload),
        coupons=_parse_coupons(payload),
        region=payload.get('region')
    )


@checkout_bp.route('/calculate-price', methods=['POST'])
@require_login
def calculate_price():
    """Price the cart without placing an order."""
    payload = _request_payload()
    context = _build_context(payload)
    service = get_checkout_service()

    if payload.get('validateStock', True):
        result = service.calculate_checkout(context)
    else:
        result = service.quick_calculate(context)

    return jsonify({'status': 'success', 'data': result.to_dict()})


@checkout_bp.route('/validate-stock', methods=['POST'])
@require_login
def validate_stock():
    service = get_checkout_service()
    items = service.load_skus(_parse_items(_request_payload()))
    result = service.validate_stock(items)
    return jsonify({'status': 'success', 'data': result.to_dict()})


@checkout_bp.route('/shipping-fee', methods=['POST'])
@require_login
def shipping_fee():
    payload = _request_payload()
    service = get_checkout_service()
    items = service.load_skus(_parse_items(payload))
    result = service.calculate_shipping(g.user, items, payload.get('region'))
    return jsonify({'status': 'success', 'data': result.to_dict()})


@checkout_bp.route('/process', methods=['POST'])
@require_login
def process():
    """Place the order: validates stock, locks and redeems coupons."""
    payload = _request_payload()
    context = _build_context(payload)
    result = get_checkout_service().process(context, remark=payload.get('remark'))
    return jsonify({'status': 'success', 'data': result.to_dict()}), 201


@checkout_bp.route('/coupons/<code>', methods=['GET'])
@require_login
def coupon_detail(code):
    coupon = get_checkout_service().coupon_chain.find_by_code(code, g.user)
    if coupon is None:
        raise NotFoundError(f'Coupon {code} not found')
    return jsonify({'status': 'success', 'data': coupon.to_dict()})
