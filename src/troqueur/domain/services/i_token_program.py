"""
Token program interface.

Defines the fungible-token operations the escrow program consumes.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.token_account import Mint, TokenAccount
from troqueur.domain.services.i_ledger import IAccountReader, ILedgerTransaction
from troqueur.domain.value_objects.invocation_context import InvocationContext


class ITokenProgram(ABC):
    """
    Interface for the token subsystem (mint, create, transfer, close).

    Authority checks accept either a key signer from the invocation
    context or program-derived signer seeds of the invoking program.
    """

    program_id: Pubkey

    @abstractmethod
    def get_mint(self, reader: IAccountReader, address: Pubkey) -> Mint:
        """
        Load a mint.

        Raises:
            NotFoundError: If no account exists at address
            ConsistencyError: If the account is not a mint
        """

    @abstractmethod
    def get_token_account(
        self, reader: IAccountReader, address: Pubkey
    ) -> TokenAccount:
        """
        Load a token account.

        Raises:
            NotFoundError: If no account exists at address
            ConsistencyError: If the account is not a token account
        """

    @abstractmethod
    def create_mint(
        self,
        tx: ILedgerTransaction,
        address: Pubkey,
        mint_authority: Pubkey,
        decimals: int,
        payer: Pubkey,
    ) -> Mint:
        """Create a new mint paid for by payer."""

    @abstractmethod
    def mint_to(
        self,
        tx: ILedgerTransaction,
        ctx: InvocationContext,
        mint: Pubkey,
        destination: Pubkey,
        amount: int,
    ) -> TokenAccount:
        """Mint new tokens into destination (mint authority must sign)."""

    @abstractmethod
    def create_account(
        self,
        tx: ILedgerTransaction,
        address: Pubkey,
        mint: Pubkey,
        owner: Pubkey,
        payer: Pubkey,
    ) -> TokenAccount:
        """Create an empty token account for mint owned by owner."""

    @abstractmethod
    def transfer_checked(
        self,
        tx: ILedgerTransaction,
        ctx: InvocationContext,
        source: Pubkey,
        mint: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        amount: int,
        decimals: int,
        signer_seeds: Optional[Sequence[bytes]] = None,
    ) -> None:
        """
        Move amount of mint from source to destination.

        Raises:
            AuthorizationError: If authority does not own source or did not sign
            ConsistencyError: If mint or decimals do not match
            InsufficientFundsError: If source balance is below amount
        """

    @abstractmethod
    def close_account(
        self,
        tx: ILedgerTransaction,
        ctx: InvocationContext,
        account: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        signer_seeds: Optional[Sequence[bytes]] = None,
    ) -> int:
        """
        Close an empty token account, sending its rent to destination.

        Returns:
            Lamports refunded
        """
