"""
Account entity - A single ledger account.
"""

from dataclasses import dataclass, replace

from solders.pubkey import Pubkey  # type: ignore


@dataclass
class Account:
    """
    Ledger account holding lamports and raw data.

    Business rules:
    - Owner is the program allowed to mutate the data
    - Lamports can never go negative
    - Data layout is defined by the owning program
    """

    address: Pubkey
    owner: Pubkey
    lamports: int = 0
    data: bytes = b""

    def __post_init__(self):
        """Validate account data after initialization."""
        if self.lamports < 0:
            raise ValueError(f"Lamports cannot be negative: {self.lamports}")

    def copy(self) -> "Account":
        """Detached copy used for snapshots."""
        return replace(self)

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "address": str(self.address),
            "owner": str(self.owner),
            "lamports": self.lamports,
            "data_len": len(self.data),
        }
