"""
Domain service interfaces.
"""

from troqueur.domain.services.i_ledger import (
    IAccountReader,
    ILedger,
    ILedgerTransaction,
)
from troqueur.domain.services.i_token_program import ITokenProgram

__all__ = [
    "IAccountReader",
    "ILedger",
    "ILedgerTransaction",
    "ITokenProgram",
]
