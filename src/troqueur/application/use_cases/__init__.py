"""
Escrow instruction use cases.
"""

from troqueur.application.use_cases.cancel_escrow import CancelEscrow
from troqueur.application.use_cases.exchange_escrow import ExchangeEscrow
from troqueur.application.use_cases.initialize_escrow import InitializeEscrow

__all__ = [
    "InitializeEscrow",
    "ExchangeEscrow",
    "CancelEscrow",
]
