"""
Custom Application Exceptions
"""


class InventoryException(Exception):
    """Base exception for MedStock application"""
    status_code = 500

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(InventoryException):
    """Raised when a referenced record does not exist"""
    status_code = 404


class ValidationError(InventoryException):
    """Raised when data validation fails"""
    status_code = 400


class BusinessLogicError(InventoryException):
    """Raised when business rules are violated"""
    status_code = 400


class InsufficientQuantityError(BusinessLogicError):
    """Raised when a movement exceeds the available quantity"""

    def __init__(self, requested: int, available: int, name: str = ""):
        super().__init__(
            f"Insufficient quantity: requested {requested}, available {available}",
            requested=requested,
            available=available,
            name=name,
        )
        self.requested = requested
        self.available = available


class DuplicateLotError(BusinessLogicError):
    """Raised when a medication lot already exists"""

    def __init__(self, lot: str):
        super().__init__(f"Lot {lot} already exists", lot=lot)
        self.lot = lot


class DuplicateNameError(BusinessLogicError):
    """Raised when a stock record name already exists in a location"""

    def __init__(self, name: str, location: str = ""):
        super().__init__(f"Product {name} already exists", name=name, location=location)
        self.name = name


class RequestKeyConflictError(BusinessLogicError):
    """Raised when a request_key is reused for a different movement"""

    def __init__(self, request_key: str, operation: str):
        super().__init__(
            f"request_key {request_key} already used for a different {operation}",
            request_key=request_key,
        )
        self.request_key = request_key


class StorageFailureError(InventoryException):
    """Raised when the database is unreachable or a transaction aborts"""
    status_code = 500
