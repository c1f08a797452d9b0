"""Error taxonomy for the banking API.

Every error carries the HTTP status it maps to; the handlers in ``main``
turn them into the standard response envelope.
"""

from typing import List, Optional


class BankError(Exception):
    """Base exception for all banking-related errors."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class NotFoundError(BankError):
    """Raised when an entity cannot be found."""

    status_code = 404


class AccountNotFoundError(NotFoundError):
    pass


class TransactionNotFoundError(NotFoundError):
    pass


class ValidationError(BankError):
    """Raised when input has the wrong shape or range."""


class InvalidOperationError(BankError):
    """Raised when a business rule forbids the operation (wrong status, duplicate email...)."""


class SameAccountError(InvalidOperationError):
    """Raised when a transfer names the same account on both sides."""


class InsufficientFundsError(BankError):
    """Raised when an account balance cannot cover an amount plus its fee."""


class ConcurrencyConflictError(BankError):
    """Raised when an account row changed between read and write."""

    status_code = 409


class AuthenticationError(BankError):
    """Raised on bad credentials or an invalid token."""

    status_code = 401


class IdAllocationError(BankError):
    """Raised when no free identifier turns up within the allowed attempts."""

    status_code = 500
