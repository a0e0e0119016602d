"""
Runtime-level exceptions.

Raised by the ledger, address derivation and instruction decoding rather
than by the escrow rules themselves.
"""

from troqueur.domain.exceptions.base import TroqueurException


class AddressDerivationError(TroqueurException):
    """Raised when no bump yields a valid program address."""

    def __init__(self, seeds: list[bytes], program_id: str):
        super().__init__(
            f"Unable to derive program address for seeds {seeds!r} "
            f"under program {program_id}",
            code="ADDRESS_DERIVATION_FAILED",
        )
        self.seeds = seeds
        self.program_id = program_id


class InvalidInstructionError(TroqueurException):
    """Raised when instruction data or account metas cannot be decoded."""

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_INSTRUCTION")


class AccountNotWritableError(TroqueurException):
    """Raised when a transaction writes an account it did not lock."""

    def __init__(self, address: str):
        super().__init__(
            f"Account {address} was not declared writable in this transaction",
            code="ACCOUNT_NOT_WRITABLE",
        )
        self.address = address
