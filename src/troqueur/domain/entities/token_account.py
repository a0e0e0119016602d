"""
Token entities - Mint and TokenAccount records of the token subsystem.

Layouts are fixed-size little-endian records:
    Mint:         mint_authority(32) | supply(u64) | decimals(u8)
    TokenAccount: mint(32) | owner(32) | amount(u64)
"""

import struct
from dataclasses import dataclass
from typing import ClassVar

from solders.pubkey import Pubkey  # type: ignore

MINT_LAYOUT = struct.Struct("<32sQB")
TOKEN_ACCOUNT_LAYOUT = struct.Struct("<32s32sQ")

U64_MAX = 2**64 - 1


@dataclass
class Mint:
    """Token mint: identity, supply and precision of one asset."""

    address: Pubkey
    mint_authority: Pubkey
    decimals: int
    supply: int = 0

    LEN: ClassVar[int] = MINT_LAYOUT.size

    def __post_init__(self):
        if not 0 <= self.decimals <= 255:
            raise ValueError(f"Invalid decimals: {self.decimals}")
        if not 0 <= self.supply <= U64_MAX:
            raise ValueError(f"Supply out of range: {self.supply}")

    def pack(self) -> bytes:
        return MINT_LAYOUT.pack(bytes(self.mint_authority), self.supply, self.decimals)

    @classmethod
    def unpack(cls, address: Pubkey, data: bytes) -> "Mint":
        if len(data) != cls.LEN:
            raise ValueError(f"Invalid mint data length: {len(data)}")
        authority, supply, decimals = MINT_LAYOUT.unpack(data)
        return cls(
            address=address,
            mint_authority=Pubkey.from_bytes(authority),
            decimals=decimals,
            supply=supply,
        )


@dataclass
class TokenAccount:
    """
    Token account holding a balance of one mint.

    Business rules:
    - Holds exactly one mint for its whole life
    - Owner is the only authority that can move or close it
    - Balance is an unsigned 64-bit amount
    """

    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int = 0

    LEN: ClassVar[int] = TOKEN_ACCOUNT_LAYOUT.size

    def __post_init__(self):
        if not 0 <= self.amount <= U64_MAX:
            raise ValueError(f"Token amount out of range: {self.amount}")

    def pack(self) -> bytes:
        return TOKEN_ACCOUNT_LAYOUT.pack(
            bytes(self.mint), bytes(self.owner), self.amount
        )

    @classmethod
    def unpack(cls, address: Pubkey, data: bytes) -> "TokenAccount":
        if len(data) != cls.LEN:
            raise ValueError(f"Invalid token account data length: {len(data)}")
        mint, owner, amount = TOKEN_ACCOUNT_LAYOUT.unpack(data)
        return cls(
            address=address,
            mint=Pubkey.from_bytes(mint),
            owner=Pubkey.from_bytes(owner),
            amount=amount,
        )

    def to_dict(self) -> dict:
        return {
            "address": str(self.address),
            "mint": str(self.mint),
            "owner": str(self.owner),
            "amount": self.amount,
        }
