"""
Custom application exceptions
"""

from typing import Optional, Dict, Any


class EventHubException(Exception):
    """Base exception for EventHub application"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(EventHubException):
    """Authentication related errors"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_ERROR",
            status_code=401,
            details=details
        )


class AuthorizationError(EventHubException):
    """Authorization related errors"""

    def __init__(self, message: str = "Not authorized", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_FORBIDDEN",
            status_code=403,
            details=details
        )


class NotFoundError(EventHubException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id {identifier} not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class ValidationError(EventHubException):
    """Validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class ConflictError(EventHubException):
    """Resource conflict errors"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details
        )


class InsufficientInventoryError(EventHubException):
    """Requested quantity exceeds the event's available tickets"""

    def __init__(self, event_id: Any, requested: int, available: Optional[int] = None):
        details = {"event_id": str(event_id), "requested": requested}
        if available is not None:
            details["available"] = available
        super().__init__(
            message="Insufficient tickets available",
            code="INSUFFICIENT_INVENTORY",
            status_code=409,
            details=details
        )


class BookingStateError(EventHubException):
    """Operation not allowed in the booking's current status"""

    def __init__(self, message: str, booking_id: Any = None, status: Optional[str] = None):
        details = {}
        if booking_id is not None:
            details["booking_id"] = str(booking_id)
        if status is not None:
            details["status"] = status
        super().__init__(
            message=message,
            code="INVALID_BOOKING_STATE",
            status_code=409,
            details=details
        )


class InvalidDiscountError(EventHubException):
    """Discount code unknown, inactive, expired or exhausted"""

    def __init__(self, code: str):
        super().__init__(
            message="Invalid or expired discount code",
            code="INVALID_DISCOUNT",
            status_code=400,
            details={"discount_code": code}
        )


class PaymentError(EventHubException):
    """Payment related errors"""

    def __init__(self, message: str = "Payment processing failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="PAYMENT_FAILED",
            status_code=402,
            details=details
        )


class InvalidQRCodeError(EventHubException):
    """QR payload could not be parsed or its signature does not match"""

    def __init__(self, reason: str):
        super().__init__(
            message="Invalid ticket QR code",
            code="INVALID_QR_CODE",
            status_code=400,
            details={"reason": reason}
        )
