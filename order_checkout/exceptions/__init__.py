"""Custom exceptions for the checkout module."""


class CheckoutError(Exception):
    """Base exception for all checkout errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class BusinessLogicError(CheckoutError):
    """Exception raised for business rule violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(CheckoutError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class UnauthorizedError(CheckoutError):
    """Raised when the request carries no caller identity."""
    def __init__(self, message="Authentication required"):
        super().__init__(message, 401)


class InsufficientStockError(BusinessLogicError):
    """Raised when stock validation rejects a checkout."""
    def __init__(self, errors):
        self.errors = dict(errors)
        message = 'Stock validation failed: ' + ', '.join(str(e) for e in self.errors.values())
        super().__init__(message, status_code=409, payload={'errors': self.errors})


class PriceCalculationError(CheckoutError):
    """Configuration or programming error raised while pricing a cart."""
    def __init__(self, message="Price calculation failed", status_code=422, payload=None):
        super().__init__(message, status_code, payload)


class MissingRequiredFieldError(PriceCalculationError):
    def __init__(self, field_name):
        self.field_name = field_name
        super().__init__(f"Missing required field: {field_name}", payload={'field': field_name})


class InvalidCartItemError(PriceCalculationError):
    def __init__(self, reason="Cart item must expose sku and quantity"):
        super().__init__(reason)


class UnsupportedItemTypeError(PriceCalculationError):
    def __init__(self, item_type):
        self.item_type = item_type
        super().__init__(f"Unsupported item type: {item_type}")


class SkuNotFoundError(PriceCalculationError):
    def __init__(self, sku_id):
        self.sku_id = sku_id
        super().__init__(f"SKU not found: {sku_id}", payload={'sku_id': str(sku_id)})


class InvalidSkuTypeError(PriceCalculationError):
    def __init__(self, actual_type):
        super().__init__(f"Invalid SKU type: {actual_type}")


class PriceCalculationFailureError(PriceCalculationError):
    """A calculator raised; wraps the original exception."""
    def __init__(self, message="Price calculation failed"):
        super().__init__(message, status_code=500)
