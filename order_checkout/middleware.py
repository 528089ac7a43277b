"""Middleware for the caller identity."""
from functools import wraps

from flask import session, g

from order_checkout.dto import CheckoutUser
from order_checkout.exceptions import UnauthorizedError


def load_user():
    """
    Load the caller into g.

    Sets g.user to a CheckoutUser when the session carries a user_id,
    otherwise to None.
    """
    user_id = session.get('user_id')
    g.user = CheckoutUser(user_id) if user_id not in (None, '') else None


def require_login(f):
    """Decorator: reject the request with 401 unless a user is loaded."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise UnauthorizedError()
        return f(*args, **kwargs)
    return decorated_function
