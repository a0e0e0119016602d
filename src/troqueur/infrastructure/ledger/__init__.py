"""
Ledger runtime infrastructure.
"""

from troqueur.infrastructure.ledger.in_memory_ledger import (
    SYSTEM_PROGRAM_ID,
    InMemoryLedger,
    InMemoryLedgerTransaction,
)
from troqueur.infrastructure.ledger.rent import Rent

__all__ = [
    "SYSTEM_PROGRAM_ID",
    "InMemoryLedger",
    "InMemoryLedgerTransaction",
    "Rent",
]
