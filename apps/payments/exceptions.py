"""
Custom exceptions for the payment gateway integration.
Raised in services.py; checkout errors are translated to HTTP in views.py,
callback and status-query errors are folded into GatewayResult codes.
"""


class PaymentError(Exception):
    """Base exception for all payment errors."""
    pass


class PaymentValidationError(PaymentError):
    """Raised when a checkout request cannot be accepted."""
    pass


class BillNotFoundError(PaymentValidationError):
    """Raised when the bill being paid does not exist."""
    pass


class InvalidAmountError(PaymentValidationError):
    """Raised when the amount is not a positive whole number of VND."""
    pass


class SignatureMismatchError(PaymentError):
    """Raised when a gateway-signed parameter set fails verification."""
    pass


class PaymentNotFoundError(PaymentError):
    """Raised when no Payment carries the given transaction code."""
    pass


class GatewayError(PaymentError):
    """Raised when the gateway cannot be reached or answers with garbage."""
    pass


class CheckoutError(PaymentError):
    """Raised when a valid checkout cannot be recorded or signed (misconfiguration, store failure)."""
    pass
