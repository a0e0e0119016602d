"""
Test fixtures and configuration.

Every test gets a fresh container with an empty in-memory ledger, two
mints (asset A and asset B) and two funded parties:

    initializer: 1000 A, 0 B
    taker:       0 A, 1000 B
"""

from dataclasses import dataclass
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from troqueur.application.dto import (
    CancelAccounts,
    ExchangeAccounts,
    InitializeAccounts,
    InitializeArgs,
)
from troqueur.application.escrow_program import EscrowProgram
from troqueur.config.settings import Settings, override_settings, reset_settings
from troqueur.di.container import DIContainer, reset_container
from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.services.i_ledger import ILedger
from troqueur.domain.services.i_token_program import ITokenProgram
from troqueur.domain.value_objects.invocation_context import InvocationContext

LAMPORTS_PER_SOL = 1_000_000_000
DECIMALS = 6
STARTING_BALANCE = 1000


@dataclass
class Party:
    """Wallet plus its two token accounts."""

    keypair: Keypair
    deposit_token_account: Pubkey
    receive_token_account: Pubkey

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()


class EscrowScenario:
    """Builds parties and instruction accounts on top of a container."""

    def __init__(self, container: DIContainer):
        self.container = container
        self.ledger: ILedger = container.ledger
        self.token_program: ITokenProgram = container.token_program
        self.program: EscrowProgram = container.escrow_program
        self.mint_authority = Keypair()
        self.mint_a = Keypair().pubkey()
        self.mint_b = Keypair().pubkey()
        self.initializer: Optional[Party] = None
        self.taker: Optional[Party] = None

    async def setup(self) -> "EscrowScenario":
        authority = self.mint_authority.pubkey()
        await self.ledger.airdrop(authority, 10 * LAMPORTS_PER_SOL)

        async with self.ledger.transaction(
            [authority, self.mint_a, self.mint_b]
        ) as tx:
            self.token_program.create_mint(
                tx, self.mint_a, authority, DECIMALS, authority
            )
            self.token_program.create_mint(
                tx, self.mint_b, authority, DECIMALS, authority
            )

        self.initializer = await self.new_party(self.mint_a, self.mint_b)
        self.taker = await self.new_party(self.mint_b, self.mint_a)
        return self

    async def new_party(
        self,
        pays_with: Pubkey,
        receives: Pubkey,
        amount: int = STARTING_BALANCE,
        lamports: int = 10 * LAMPORTS_PER_SOL,
    ) -> Party:
        """
        Create a wallet holding `amount` of `pays_with`.

        Token account rent is paid by the mint authority, so `lamports`
        is exactly what the wallet owns afterwards.
        """
        keypair = Keypair()
        party = Party(
            keypair=keypair,
            deposit_token_account=Keypair().pubkey(),
            receive_token_account=Keypair().pubkey(),
        )
        await self.ledger.airdrop(party.pubkey, lamports)

        ctx = InvocationContext(
            program_id=self.token_program.program_id,
            signers=frozenset({self.mint_authority.pubkey()}),
        )
        payer = self.mint_authority.pubkey()
        writable = [
            payer,
            party.deposit_token_account,
            party.receive_token_account,
            pays_with,
        ]
        async with self.ledger.transaction(writable) as tx:
            self.token_program.create_account(
                tx, party.deposit_token_account, pays_with, party.pubkey, payer
            )
            self.token_program.create_account(
                tx, party.receive_token_account, receives, party.pubkey, payer
            )
            if amount:
                self.token_program.mint_to(
                    tx, ctx, pays_with, party.deposit_token_account, amount
                )
        return party

    # ================================================================
    # Accounts
    # ================================================================

    def initialize_accounts(
        self, seed: int, initializer: Optional[Party] = None
    ) -> InitializeAccounts:
        initializer = initializer or self.initializer
        addresses = self.program.derive_addresses(seed)
        return InitializeAccounts(
            initializer=initializer.pubkey,
            deposit_mint=self.mint_a,
            receive_mint=self.mint_b,
            initializer_deposit_token_account=initializer.deposit_token_account,
            initializer_receive_token_account=initializer.receive_token_account,
            escrow_state=addresses.escrow_state.address,
            vault=addresses.vault.address,
            vault_authority=addresses.vault_authority.address,
        )

    def exchange_accounts(
        self,
        seed: int,
        taker: Optional[Party] = None,
        initializer: Optional[Party] = None,
    ) -> ExchangeAccounts:
        taker = taker or self.taker
        initializer = initializer or self.initializer
        addresses = self.program.derive_addresses(seed)
        return ExchangeAccounts(
            taker=taker.pubkey,
            deposit_mint=self.mint_a,
            receive_mint=self.mint_b,
            taker_deposit_token_account=taker.deposit_token_account,
            taker_receive_token_account=taker.receive_token_account,
            initializer_deposit_token_account=initializer.deposit_token_account,
            initializer_receive_token_account=initializer.receive_token_account,
            initializer=initializer.pubkey,
            escrow_state=addresses.escrow_state.address,
            vault=addresses.vault.address,
            vault_authority=addresses.vault_authority.address,
        )

    def cancel_accounts(
        self, seed: int, initializer: Optional[Party] = None
    ) -> CancelAccounts:
        initializer = initializer or self.initializer
        addresses = self.program.derive_addresses(seed)
        return CancelAccounts(
            initializer=initializer.pubkey,
            deposit_mint=self.mint_a,
            initializer_deposit_token_account=initializer.deposit_token_account,
            escrow_state=addresses.escrow_state.address,
            vault=addresses.vault.address,
            vault_authority=addresses.vault_authority.address,
        )

    # ================================================================
    # Actions and queries
    # ================================================================

    async def open(
        self,
        seed: int = 42,
        deposit_amount: int = 500,
        receive_amount: int = 1000,
        taker: Optional[Pubkey] = None,
    ) -> EscrowState:
        """Initialize an escrow signed by the default initializer."""
        return await self.program.initialize(
            [self.initializer.pubkey],
            self.initialize_accounts(seed),
            InitializeArgs(
                random_seed=seed,
                deposit_amount=deposit_amount,
                receive_amount=receive_amount,
                taker=taker,
            ),
        )

    def balance(self, token_account: Pubkey) -> int:
        return self.token_program.get_token_account(self.ledger, token_account).amount

    def lamports(self, address: Pubkey) -> int:
        account = self.ledger.get_account(address)
        return account.lamports if account else 0

    def snapshot(self) -> dict:
        """Every account on the ledger, for no-change assertions."""
        return {
            address: (account.owner, account.lamports, account.data)
            for address, account in self.ledger._accounts.items()
        }


@pytest.fixture
def settings() -> Settings:
    """Test settings installed as the global settings."""
    test_settings = Settings(ENV="test", LOG_LEVEL="WARNING", LOG_JSON=False)
    override_settings(test_settings)
    yield test_settings
    reset_settings()
    reset_container()


@pytest.fixture
def container(settings: Settings) -> DIContainer:
    """Fresh container with an empty ledger."""
    return DIContainer(settings)


@pytest_asyncio.fixture
async def scenario(container: DIContainer) -> AsyncGenerator[EscrowScenario, None]:
    """Ledger with two mints, a funded initializer and a funded taker."""
    yield await EscrowScenario(container).setup()


@pytest.fixture
def make_scenario():
    """Build a scenario on a custom container."""

    async def _make(container: DIContainer) -> EscrowScenario:
        return await EscrowScenario(container).setup()

    return _make
