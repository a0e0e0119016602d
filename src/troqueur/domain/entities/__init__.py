"""
Domain entities package.
"""

from troqueur.domain.entities.account import Account
from troqueur.domain.entities.escrow_state import (
    ESCROW_STATE_DISCRIMINATOR,
    EscrowState,
)
from troqueur.domain.entities.token_account import Mint, TokenAccount

__all__ = [
    "Account",
    "EscrowState",
    "ESCROW_STATE_DISCRIMINATOR",
    "Mint",
    "TokenAccount",
]
