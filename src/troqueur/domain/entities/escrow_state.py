"""
EscrowState entity - Persistent terms of one open escrow.
"""

import hashlib
import struct
from dataclasses import dataclass
from typing import ClassVar, Optional

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.token_account import U64_MAX

ESCROW_STATE_DISCRIMINATOR = hashlib.sha256(b"account:EscrowState").digest()[:8]

# discriminator | random_seed | initializer | taker |
# deposit token account | receive token account | deposit mint | receive mint |
# vault | deposit_amount | receive_amount | vault_authority_bump | state_bump
ESCROW_STATE_LAYOUT = struct.Struct("<8sQ32s32s32s32s32s32s32sQQBB")

NO_TAKER = Pubkey.default()


@dataclass(frozen=True)
class EscrowState:
    """
    EscrowState entity holding the swap terms.

    Business rules:
    - Created once by Initialize, never mutated afterwards
    - Closed by exactly one of Exchange or Cancel
    - While it exists the vault holds exactly deposit_amount of deposit_mint
    - Both amounts are positive unsigned 64-bit values
    - taker is None for a public escrow, otherwise the only allowed taker
    """

    address: Pubkey
    random_seed: int
    initializer: Pubkey
    initializer_deposit_token_account: Pubkey
    initializer_receive_token_account: Pubkey
    deposit_mint: Pubkey
    receive_mint: Pubkey
    vault: Pubkey
    deposit_amount: int
    receive_amount: int
    vault_authority_bump: int
    state_bump: int
    taker: Optional[Pubkey] = None

    LEN: ClassVar[int] = ESCROW_STATE_LAYOUT.size

    def __post_init__(self):
        """Validate escrow terms after initialization."""
        if not 0 <= self.random_seed <= U64_MAX:
            raise ValueError(f"Random seed out of range: {self.random_seed}")

        for name in ("deposit_amount", "receive_amount"):
            value = getattr(self, name)
            if not 0 < value <= U64_MAX:
                raise ValueError(f"{name} must be a positive u64, got {value}")

        for name in ("vault_authority_bump", "state_bump"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Invalid {name}: {value}")

        if self.taker == NO_TAKER:
            raise ValueError("Use None for a public escrow taker")

    @property
    def is_directed(self) -> bool:
        """True if only one taker may complete the swap."""
        return self.taker is not None

    def pack(self) -> bytes:
        """Serialize to the fixed on-ledger layout."""
        return ESCROW_STATE_LAYOUT.pack(
            ESCROW_STATE_DISCRIMINATOR,
            self.random_seed,
            bytes(self.initializer),
            bytes(self.taker or NO_TAKER),
            bytes(self.initializer_deposit_token_account),
            bytes(self.initializer_receive_token_account),
            bytes(self.deposit_mint),
            bytes(self.receive_mint),
            bytes(self.vault),
            self.deposit_amount,
            self.receive_amount,
            self.vault_authority_bump,
            self.state_bump,
        )

    @classmethod
    def unpack(cls, address: Pubkey, data: bytes) -> "EscrowState":
        """
        Deserialize from the fixed on-ledger layout.

        Raises:
            ValueError: If length or discriminator does not match
        """
        if len(data) != cls.LEN:
            raise ValueError(f"Invalid escrow state data length: {len(data)}")

        (
            discriminator,
            random_seed,
            initializer,
            taker,
            deposit_token_account,
            receive_token_account,
            deposit_mint,
            receive_mint,
            vault,
            deposit_amount,
            receive_amount,
            vault_authority_bump,
            state_bump,
        ) = ESCROW_STATE_LAYOUT.unpack(data)

        if discriminator != ESCROW_STATE_DISCRIMINATOR:
            raise ValueError("Account discriminator mismatch")

        taker_key = Pubkey.from_bytes(taker)
        return cls(
            address=address,
            random_seed=random_seed,
            initializer=Pubkey.from_bytes(initializer),
            taker=None if taker_key == NO_TAKER else taker_key,
            initializer_deposit_token_account=Pubkey.from_bytes(deposit_token_account),
            initializer_receive_token_account=Pubkey.from_bytes(receive_token_account),
            deposit_mint=Pubkey.from_bytes(deposit_mint),
            receive_mint=Pubkey.from_bytes(receive_mint),
            vault=Pubkey.from_bytes(vault),
            deposit_amount=deposit_amount,
            receive_amount=receive_amount,
            vault_authority_bump=vault_authority_bump,
            state_bump=state_bump,
        )

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "address": str(self.address),
            "random_seed": self.random_seed,
            "initializer": str(self.initializer),
            "taker": str(self.taker) if self.taker else None,
            "initializer_deposit_token_account": str(
                self.initializer_deposit_token_account
            ),
            "initializer_receive_token_account": str(
                self.initializer_receive_token_account
            ),
            "deposit_mint": str(self.deposit_mint),
            "receive_mint": str(self.receive_mint),
            "vault": str(self.vault),
            "deposit_amount": self.deposit_amount,
            "receive_amount": self.receive_amount,
            "vault_authority_bump": self.vault_authority_bump,
            "state_bump": self.state_bump,
        }
