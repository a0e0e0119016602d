"""
In-memory token program.

Implements the fungible-token subsystem consumed by the escrow program:
mints, token accounts, checked transfers and account closure. Accounts
are stored on the ledger in the fixed layouts of the token entities.
"""

from typing import Optional, Sequence

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.account import Account
from troqueur.domain.entities.token_account import U64_MAX, Mint, TokenAccount
from troqueur.domain.exceptions import (
    AuthorizationError,
    ConsistencyError,
    InsufficientFundsError,
    NotFoundError,
)
from troqueur.domain.services.i_ledger import IAccountReader, ILedgerTransaction
from troqueur.domain.services.i_token_program import ITokenProgram
from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.infrastructure.monitoring import get_logger

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")

logger = get_logger(__name__)


class InMemoryTokenProgram(ITokenProgram):
    """Token program operating on ledger transactions."""

    def __init__(self, program_id: Pubkey = TOKEN_PROGRAM_ID):
        """
        Initialize token program.

        Args:
            program_id: Owner id stamped on every mint and token account
        """
        self.program_id = program_id

    # ================================================================
    # Queries
    # ================================================================

    def get_mint(self, reader: IAccountReader, address: Pubkey) -> Mint:
        account = self._load(reader, address, "Mint")
        if len(account.data) != Mint.LEN:
            raise ConsistencyError("mint", "mint account", f"{len(account.data)} bytes")
        return Mint.unpack(address, account.data)

    def get_token_account(
        self, reader: IAccountReader, address: Pubkey
    ) -> TokenAccount:
        account = self._load(reader, address, "Token")
        if len(account.data) != TokenAccount.LEN:
            raise ConsistencyError(
                "token_account", "token account", f"{len(account.data)} bytes"
            )
        return TokenAccount.unpack(address, account.data)

    # ================================================================
    # Instructions
    # ================================================================

    def create_mint(
        self,
        tx: ILedgerTransaction,
        address: Pubkey,
        mint_authority: Pubkey,
        decimals: int,
        payer: Pubkey,
    ) -> Mint:
        mint = Mint(address=address, mint_authority=mint_authority, decimals=decimals)
        tx.create_account(address, self.program_id, mint.pack(), payer)
        logger.debug(f"Created mint {address} ({decimals} decimals)")
        return mint

    def mint_to(
        self,
        tx: ILedgerTransaction,
        ctx: InvocationContext,
        mint: Pubkey,
        destination: Pubkey,
        amount: int,
    ) -> TokenAccount:
        mint_state = self.get_mint(tx, mint)
        self._require_signature(ctx, mint_state.mint_authority, None)

        target = self.get_token_account(tx, destination)
        self._require_mint(target, mint)
        if mint_state.supply + amount > U64_MAX or target.amount + amount > U64_MAX:
            raise ValueError(f"Minting {amount} overflows u64")

        mint_state.supply += amount
        target.amount += amount
        tx.write_data(mint, mint_state.pack())
        tx.write_data(destination, target.pack())
        return target

    def create_account(
        self,
        tx: ILedgerTransaction,
        address: Pubkey,
        mint: Pubkey,
        owner: Pubkey,
        payer: Pubkey,
    ) -> TokenAccount:
        self.get_mint(tx, mint)
        token_account = TokenAccount(address=address, mint=mint, owner=owner)
        tx.create_account(address, self.program_id, token_account.pack(), payer)
        logger.debug(f"Created token account {address} for mint {mint}")
        return token_account

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
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative: {amount}")

        mint_state = self.get_mint(tx, mint)
        if mint_state.decimals != decimals:
            raise ConsistencyError(
                "decimals", str(mint_state.decimals), str(decimals)
            )

        source_account = self.get_token_account(tx, source)
        destination_account = self.get_token_account(tx, destination)
        self._require_mint(source_account, mint)
        self._require_mint(destination_account, mint)
        self._require_owner(source_account, authority)
        self._require_signature(ctx, authority, signer_seeds)

        if source_account.amount < amount:
            raise InsufficientFundsError(str(source), amount, source_account.amount)

        if source == destination:
            return

        source_account.amount -= amount
        destination_account.amount += amount
        tx.write_data(source, source_account.pack())
        tx.write_data(destination, destination_account.pack())

        logger.debug(f"Transferred {amount} of {mint} from {source} to {destination}")

    def close_account(
        self,
        tx: ILedgerTransaction,
        ctx: InvocationContext,
        account: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        signer_seeds: Optional[Sequence[bytes]] = None,
    ) -> int:
        token_account = self.get_token_account(tx, account)
        self._require_owner(token_account, authority)
        self._require_signature(ctx, authority, signer_seeds)

        if token_account.amount != 0:
            raise ConsistencyError("balance", "0", str(token_account.amount))

        return tx.close_account(account, destination)

    # ================================================================
    # Helpers
    # ================================================================

    def _load(self, reader: IAccountReader, address: Pubkey, kind: str) -> Account:
        account = reader.get_account(address)
        if account is None:
            raise NotFoundError(kind, str(address))
        if account.owner != self.program_id:
            raise ConsistencyError(
                f"{kind.lower()} owner", str(self.program_id), str(account.owner)
            )
        return account

    @staticmethod
    def _require_mint(token_account: TokenAccount, mint: Pubkey) -> None:
        if token_account.mint != mint:
            raise ConsistencyError(
                f"mint of {token_account.address}", str(mint), str(token_account.mint)
            )

    @staticmethod
    def _require_owner(token_account: TokenAccount, authority: Pubkey) -> None:
        if token_account.owner != authority:
            raise AuthorizationError(
                f"{authority} is not the owner of {token_account.address}",
                account=str(authority),
            )

    @staticmethod
    def _require_signature(
        ctx: InvocationContext,
        authority: Pubkey,
        signer_seeds: Optional[Sequence[bytes]],
    ) -> None:
        """Accept a key signature or program-derived signer seeds."""
        if ctx.has_signed(authority):
            return

        if signer_seeds is not None:
            try:
                derived = Pubkey.create_program_address(
                    list(signer_seeds), ctx.program_id
                )
            except Exception as e:
                raise AuthorizationError(
                    f"Invalid signer seeds for {authority}: {e}",
                    account=str(authority),
                )
            if derived == authority:
                return

        raise AuthorizationError(
            f"Missing signature for {authority}", account=str(authority)
        )
