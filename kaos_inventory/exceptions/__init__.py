"""Custom exceptions for the Kaos Inventory application."""

class KaosError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="Terjadi kesalahan server", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(KaosError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class ValidationError(BusinessLogicError):
    """Malformed or semantically invalid input (non-positive amount, empty list, ...)."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)

class ConflictError(BusinessLogicError):
    """Structural constraint violation (duplicate code, product still referenced)."""
    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload)

class NotFoundError(KaosError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Data tidak ditemukan", payload=None):
        super().__init__(message, 404, payload)

class InsufficientStockError(BusinessLogicError):
    """Raised when an operation would drive a product's stock negative."""
    def __init__(self, product, requested, available):
        self.product_id = product.id
        self.requested = requested
        self.available = available
        message = f"Stok tidak cukup untuk {product.label} (tersedia: {available})"
        super().__init__(message, status_code=400, payload={
            'productId': product.id,
            'requested': requested,
            'available': available,
        })
