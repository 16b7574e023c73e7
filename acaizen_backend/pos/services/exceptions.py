# pos/services/exceptions.py

"""
POS SERVICE ERRORS

Centralized domain errors for cart and checkout services.

Every error carries a stable `code` that API views surface in the
error envelope: {"error": {"code": ..., "message": ...}}.
"""


class PosServiceError(Exception):
    """Base exception for all POS service failures."""

    code = "POS_ERROR"


class InvalidInputError(PosServiceError):
    """Raised on a non-positive quantity or a malformed line item."""

    code = "INVALID_INPUT"


class OutOfRangeError(PosServiceError):
    """Raised when an index-based cart operation targets a missing slot."""

    code = "OUT_OF_RANGE"


class EmptyCartError(PosServiceError):
    """Raised when checkout is attempted with no items."""

    code = "EMPTY_CART"


class InsufficientPaymentError(PosServiceError):
    """Raised when the tendered amount is below the sale total."""

    code = "INSUFFICIENT_PAYMENT"


class PersistenceError(PosServiceError):
    """Raised when the catalog/persistence backend fails to store or read a record."""

    code = "PERSISTENCE_ERROR"
