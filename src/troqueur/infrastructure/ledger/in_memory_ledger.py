"""
In-memory ledger with per-account locking and rollback.

Reference runtime for the escrow program. Each transaction declares the
accounts it writes; locks are taken per account in a fixed order, so
transactions on disjoint accounts never wait on each other while
conflicting ones are serialized.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.account import Account
from troqueur.domain.exceptions import (
    AccountNotWritableError,
    DuplicateAllocationError,
    InsufficientFundsError,
    NotFoundError,
)
from troqueur.domain.services.i_ledger import ILedger, ILedgerTransaction
from troqueur.infrastructure.ledger.rent import Rent
from troqueur.infrastructure.monitoring import get_logger

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

logger = get_logger(__name__)


class InMemoryLedgerTransaction(ILedgerTransaction):
    """Mutation handle bound to one open transaction."""

    def __init__(self, ledger: "InMemoryLedger", writable: frozenset[Pubkey]):
        self._ledger = ledger
        self._writable = writable

    # ================================================================
    # Reads
    # ================================================================

    def get_account(self, address: Pubkey) -> Optional[Account]:
        return self._ledger.get_account(address)

    def was_closed(self, address: Pubkey) -> bool:
        return self._ledger.was_closed(address)

    # ================================================================
    # Writes
    # ================================================================

    def create_account(
        self,
        address: Pubkey,
        owner: Pubkey,
        data: bytes,
        payer: Pubkey,
    ) -> Account:
        self._require_writable(address, payer)

        if address in self._ledger._accounts:
            raise DuplicateAllocationError(str(address))

        payer_account = self._require_account(payer, "Payer")
        rent = self._ledger.minimum_balance(len(data))
        if payer_account.lamports < rent:
            raise InsufficientFundsError(str(payer), rent, payer_account.lamports)

        payer_account.lamports -= rent
        account = Account(address=address, owner=owner, lamports=rent, data=data)
        self._ledger._accounts[address] = account
        self._ledger._tombstones.discard(address)

        logger.debug(f"Allocated {len(data)} bytes at {address} (rent {rent})")
        return account.copy()

    def write_data(self, address: Pubkey, data: bytes) -> None:
        self._require_writable(address)
        account = self._require_account(address, "Data")
        if len(data) != len(account.data):
            raise ValueError(
                f"Data length mismatch for {address}: "
                f"{len(account.data)} != {len(data)}"
            )
        account.data = data

    def close_account(self, address: Pubkey, destination: Pubkey) -> int:
        self._require_writable(address, destination)
        if address == destination:
            raise ValueError("Cannot close an account into itself")

        account = self._require_account(address, "Closed")
        destination_account = self._require_account(destination, "Destination")

        refunded = account.lamports
        destination_account.lamports += refunded
        del self._ledger._accounts[address]
        self._ledger._tombstones.add(address)

        logger.debug(f"Closed {address}, refunded {refunded} to {destination}")
        return refunded

    # ================================================================
    # Helpers
    # ================================================================

    def _require_writable(self, *addresses: Pubkey) -> None:
        for address in addresses:
            if address not in self._writable:
                raise AccountNotWritableError(str(address))

    def _require_account(self, address: Pubkey, role: str) -> Account:
        account = self._ledger._accounts.get(address)
        if account is None:
            raise NotFoundError(role, str(address))
        return account


class InMemoryLedger(ILedger):
    """
    Dict-backed ledger.

    Atomicity: writable accounts (and their closed markers) are snapshotted
    when a transaction opens and restored if the block raises.
    """

    def __init__(self, rent: Optional[Rent] = None):
        """
        Initialize empty ledger.

        Args:
            rent: Rent parameters (defaults to standard exemption)
        """
        self.rent = rent or Rent()
        self._accounts: dict[Pubkey, Account] = {}
        self._tombstones: set[Pubkey] = set()
        self._locks: dict[Pubkey, asyncio.Lock] = {}
        self._lock_users: dict[Pubkey, int] = {}

    def get_account(self, address: Pubkey) -> Optional[Account]:
        account = self._accounts.get(address)
        return account.copy() if account else None

    def was_closed(self, address: Pubkey) -> bool:
        return address in self._tombstones

    def minimum_balance(self, data_len: int) -> int:
        return self.rent.minimum_balance(data_len)

    @asynccontextmanager
    async def transaction(
        self, writable: Iterable[Pubkey]
    ) -> AsyncIterator[InMemoryLedgerTransaction]:
        keys = sorted(set(writable), key=bytes)
        acquired: list[asyncio.Lock] = []
        for key in keys:
            self._locks.setdefault(key, asyncio.Lock())
            self._lock_users[key] = self._lock_users.get(key, 0) + 1

        try:
            for key in keys:
                lock = self._locks[key]
                await lock.acquire()
                acquired.append(lock)

            snapshot = {
                key: (self.get_account(key), key in self._tombstones) for key in keys
            }
            try:
                yield InMemoryLedgerTransaction(self, frozenset(keys))
            except BaseException:
                self._restore(snapshot)
                logger.debug(f"Rolled back transaction over {len(keys)} accounts")
                raise
        finally:
            for lock in reversed(acquired):
                lock.release()
            self._forget_locks(keys)

    async def airdrop(self, address: Pubkey, lamports: int) -> Account:
        if lamports <= 0:
            raise ValueError(f"Airdrop amount must be positive: {lamports}")

        async with self.transaction([address]):
            account = self._accounts.get(address)
            if account is None:
                account = Account(address=address, owner=SYSTEM_PROGRAM_ID)
                self._accounts[address] = account
                self._tombstones.discard(address)
            account.lamports += lamports
            return account.copy()

    def _restore(
        self, snapshot: dict[Pubkey, tuple[Optional[Account], bool]]
    ) -> None:
        for key, (account, closed) in snapshot.items():
            if account is None:
                self._accounts.pop(key, None)
            else:
                self._accounts[key] = account
            if closed:
                self._tombstones.add(key)
            else:
                self._tombstones.discard(key)

    def _forget_locks(self, keys: Iterable[Pubkey]) -> None:
        # A lock is dropped once no transaction holds or awaits it.
        for key in keys:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]
