"""
Instruction argument schemas.

Validated before an Initialize instruction is encoded or executed.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.token_account import U64_MAX


class InitializeArgs(BaseModel):
    """Arguments of the Initialize instruction."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    random_seed: int = Field(
        ...,
        description="Client-chosen seed fixing the escrow address",
        ge=0,
        le=U64_MAX,
    )
    deposit_amount: int = Field(
        ...,
        description="Amount of the deposit mint moved into the vault",
        ge=1,
        le=U64_MAX,
    )
    receive_amount: int = Field(
        ...,
        description="Amount of the receive mint required from the taker",
        ge=1,
        le=U64_MAX,
    )
    taker: Optional[Pubkey] = Field(
        default=None,
        description="Only key allowed to exchange (None = anyone)",
    )

    @field_validator("taker")
    @classmethod
    def validate_taker(cls, v: Optional[Pubkey]) -> Optional[Pubkey]:
        """Reject the all-zero key, which encodes a public escrow."""
        if v is not None and v == Pubkey.default():
            raise ValueError("taker cannot be the default public key")
        return v
