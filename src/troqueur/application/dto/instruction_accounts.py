"""
Instruction account sets.

Each dataclass lists the accounts an instruction touches, in wire order.
Field metadata marks which accounts must sign and which are written.
"""

from dataclasses import dataclass, field, fields
from typing import Sequence, TypeVar

from solders.instruction import AccountMeta  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.exceptions import InvalidInstructionError

T = TypeVar("T", bound="InstructionAccounts")


def account(*, signer: bool = False, writable: bool = False):
    """Declare an instruction account with its access flags."""
    return field(metadata={"signer": signer, "writable": writable})


class InstructionAccounts:
    """Shared behaviour of instruction account sets."""

    def to_account_metas(self) -> list[AccountMeta]:
        """Account metas in wire order."""
        return [
            AccountMeta(
                pubkey=getattr(self, f.name),
                is_signer=f.metadata["signer"],
                is_writable=f.metadata["writable"],
            )
            for f in fields(self)
        ]

    def writable(self) -> list[Pubkey]:
        """Addresses the instruction may mutate."""
        return [getattr(self, f.name) for f in fields(self) if f.metadata["writable"]]

    def signers(self) -> list[Pubkey]:
        """Addresses that must sign the instruction."""
        return [getattr(self, f.name) for f in fields(self) if f.metadata["signer"]]

    @classmethod
    def from_account_metas(cls: type[T], metas: Sequence[AccountMeta]) -> T:
        """
        Rebuild the account set from wire-order metas.

        Raises:
            InvalidInstructionError: If count or access flags do not match
        """
        expected = fields(cls)
        if len(metas) != len(expected):
            raise InvalidInstructionError(
                f"{cls.__name__} expects {len(expected)} accounts, got {len(metas)}"
            )

        for f, meta in zip(expected, metas):
            if f.metadata["signer"] and not meta.is_signer:
                raise InvalidInstructionError(f"Account {f.name} must be a signer")
            if f.metadata["writable"] and not meta.is_writable:
                raise InvalidInstructionError(f"Account {f.name} must be writable")

        return cls(**{f.name: meta.pubkey for f, meta in zip(expected, metas)})


@dataclass(frozen=True)
class InitializeAccounts(InstructionAccounts):
    """Accounts for Initialize."""

    initializer: Pubkey = account(signer=True, writable=True)
    deposit_mint: Pubkey = account()
    receive_mint: Pubkey = account()
    initializer_deposit_token_account: Pubkey = account(writable=True)
    initializer_receive_token_account: Pubkey = account()
    escrow_state: Pubkey = account(writable=True)
    vault: Pubkey = account(writable=True)
    vault_authority: Pubkey = account()


@dataclass(frozen=True)
class ExchangeAccounts(InstructionAccounts):
    """Accounts for Exchange."""

    taker: Pubkey = account(signer=True, writable=True)
    deposit_mint: Pubkey = account()
    receive_mint: Pubkey = account()
    taker_deposit_token_account: Pubkey = account(writable=True)
    taker_receive_token_account: Pubkey = account(writable=True)
    initializer_deposit_token_account: Pubkey = account(writable=True)
    initializer_receive_token_account: Pubkey = account(writable=True)
    initializer: Pubkey = account(writable=True)
    escrow_state: Pubkey = account(writable=True)
    vault: Pubkey = account(writable=True)
    vault_authority: Pubkey = account()


@dataclass(frozen=True)
class CancelAccounts(InstructionAccounts):
    """Accounts for Cancel."""

    initializer: Pubkey = account(signer=True, writable=True)
    deposit_mint: Pubkey = account()
    initializer_deposit_token_account: Pubkey = account(writable=True)
    escrow_state: Pubkey = account(writable=True)
    vault: Pubkey = account(writable=True)
    vault_authority: Pubkey = account()
