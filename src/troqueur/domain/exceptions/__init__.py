"""
Domain exceptions package.
"""

# Base exceptions
from troqueur.domain.exceptions.base import TroqueurException

# Escrow exceptions
from troqueur.domain.exceptions.escrow import (
    AuthorizationError,
    ConsistencyError,
    DuplicateAllocationError,
    InsufficientFundsError,
    NotFoundError,
)

# Runtime exceptions
from troqueur.domain.exceptions.runtime import (
    AccountNotWritableError,
    AddressDerivationError,
    InvalidInstructionError,
)

__all__ = [
    # Base
    "TroqueurException",
    # Escrow
    "AuthorizationError",
    "ConsistencyError",
    "InsufficientFundsError",
    "DuplicateAllocationError",
    "NotFoundError",
    # Runtime
    "AddressDerivationError",
    "InvalidInstructionError",
    "AccountNotWritableError",
]
