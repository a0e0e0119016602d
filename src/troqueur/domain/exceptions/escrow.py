"""
Escrow instruction exceptions.

Every instruction failure maps to exactly one of these. The runtime
rolls back the whole instruction before the error reaches the caller.
"""

from troqueur.domain.exceptions.base import TroqueurException


class AuthorizationError(TroqueurException):
    """Raised when a required signer is absent or does not match its role."""

    def __init__(self, message: str, account: str | None = None):
        """
        Initialize authorization error.

        Args:
            message: Error description
            account: Address of the account whose authority was rejected
        """
        super().__init__(message, code="UNAUTHORIZED")
        self.account = account


class ConsistencyError(TroqueurException):
    """Raised when supplied accounts do not match the stored escrow record."""

    def __init__(self, field: str, expected: str, actual: str):
        """
        Initialize consistency error.

        Args:
            field: Name of the mismatching account or field
            expected: Value the program expected
            actual: Value the caller supplied
        """
        super().__init__(
            f"Account mismatch for {field}: expected {expected}, got {actual}",
            code="CONSTRAINT_VIOLATION",
        )
        self.field = field
        self.expected = expected
        self.actual = actual


class InsufficientFundsError(TroqueurException):
    """Raised when a source account cannot cover the required amount."""

    def __init__(self, account: str, required: int, available: int):
        """
        Initialize insufficient funds error.

        Args:
            account: Address of the underfunded account
            required: Amount needed
            available: Amount held
        """
        super().__init__(
            f"Insufficient funds in {account}: required {required}, "
            f"available {available}",
            code="INSUFFICIENT_FUNDS",
        )
        self.account = account
        self.required = required
        self.available = available


class DuplicateAllocationError(TroqueurException):
    """Raised when an account is allocated at an address already in use."""

    def __init__(self, address: str, reason: str = "already in use"):
        super().__init__(f"Account {address} {reason}", code="ACCOUNT_IN_USE")
        self.address = address


class NotFoundError(TroqueurException):
    """Raised when an instruction references an account that does not exist."""

    def __init__(self, entity_type: str, address: str):
        super().__init__(
            f"{entity_type} account {address} not found",
            code="ACCOUNT_NOT_FOUND",
        )
        self.entity_type = entity_type
        self.address = address
