"""
Ledger interface.

Defines the contract of the account store that executes instructions
atomically.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Iterable, Optional

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.account import Account


class IAccountReader(ABC):
    """Read-only view over ledger accounts."""

    @abstractmethod
    def get_account(self, address: Pubkey) -> Optional[Account]:
        """
        Get a detached copy of an account.

        Args:
            address: Account address

        Returns:
            Account copy, or None if the address holds no account
        """

    def exists(self, address: Pubkey) -> bool:
        """Check whether an account lives at address."""
        return self.get_account(address) is not None

    @abstractmethod
    def was_closed(self, address: Pubkey) -> bool:
        """Check whether an account at address was closed and not re-created."""


class ILedgerTransaction(IAccountReader):
    """
    Mutations allowed inside one atomic transaction.

    Every mutating call must target addresses declared writable when the
    transaction was opened.
    """

    @abstractmethod
    def create_account(
        self,
        address: Pubkey,
        owner: Pubkey,
        data: bytes,
        payer: Pubkey,
    ) -> Account:
        """
        Allocate a rent-exempt account, paid for by payer.

        Raises:
            DuplicateAllocationError: If address already holds an account
            InsufficientFundsError: If payer cannot cover the rent
            NotFoundError: If payer does not exist
            AccountNotWritableError: If address or payer is not writable
        """

    @abstractmethod
    def write_data(self, address: Pubkey, data: bytes) -> None:
        """Replace the data of an existing account (same length)."""

    @abstractmethod
    def close_account(self, address: Pubkey, destination: Pubkey) -> int:
        """
        Delete an account and move its lamports to destination.

        Returns:
            Lamports refunded to destination
        """


class ILedger(IAccountReader):
    """
    Account store with all-or-nothing transactions.

    Clean Architecture: Domain layer defines interface,
    Infrastructure layer implements the storage and locking.
    """

    @abstractmethod
    def transaction(
        self, writable: Iterable[Pubkey]
    ) -> AbstractAsyncContextManager[ILedgerTransaction]:
        """
        Open an atomic transaction over the writable addresses.

        Transactions with disjoint writable sets run concurrently; any
        exception inside the block restores every writable account.
        """

    @abstractmethod
    def minimum_balance(self, data_len: int) -> int:
        """Rent-exempt minimum for an account of data_len bytes."""

    @abstractmethod
    async def airdrop(self, address: Pubkey, lamports: int) -> Account:
        """Credit lamports to a system account, creating it if needed."""
