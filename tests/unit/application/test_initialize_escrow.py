"""
Unit tests for InitializeEscrow use case.

Tests escrow opening and every rejected precondition.

Usage:
    pytest tests/unit/application/test_initialize_escrow.py
"""

from dataclasses import replace

import pytest
from solders.keypair import Keypair  # type: ignore

from troqueur.application.dto import InitializeArgs
from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.entities.token_account import TokenAccount
from troqueur.domain.exceptions import (
    AuthorizationError,
    ConsistencyError,
    DuplicateAllocationError,
    InsufficientFundsError,
    NotFoundError,
)
from troqueur.infrastructure.token import TOKEN_PROGRAM_ID


class TestInitializeEscrow:
    """Unit tests for InitializeEscrow use case."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _args(self, seed=42, deposit=500, receive=1000, taker=None):
        return InitializeArgs(
            random_seed=seed,
            deposit_amount=deposit,
            receive_amount=receive,
            taker=taker,
        )

    async def _initialize(self, scenario, accounts, args=None, signers=None):
        signers = signers if signers is not None else [scenario.initializer.pubkey]
        return await scenario.program.initialize(
            signers, accounts, args or self._args()
        )

    # ================================================================
    # Success
    # ================================================================

    async def test_initialize_success(self, scenario):
        """Test deposit moves into a vault owned by the vault authority."""
        init = scenario.initializer
        accounts = scenario.initialize_accounts(42)

        state = await self._initialize(scenario, accounts)

        assert scenario.balance(accounts.vault) == 500
        assert scenario.balance(init.deposit_token_account) == 500
        vault = scenario.token_program.get_token_account(
            scenario.ledger, accounts.vault
        )
        assert vault.owner == accounts.vault_authority
        assert vault.mint == scenario.mint_a

        stored = await scenario.program.get_escrow_state(accounts.escrow_state)
        assert stored == state
        assert stored.initializer == init.pubkey
        assert stored.deposit_amount == 500
        assert stored.receive_amount == 1000
        assert stored.receive_mint == scenario.mint_b
        assert stored.initializer_receive_token_account == init.receive_token_account
        assert stored.vault == accounts.vault

    async def test_initialize_records_bumps(self, scenario):
        """Test the stored bumps match the derived addresses."""
        addresses = scenario.program.derive_addresses(42)

        state = await self._initialize(scenario, scenario.initialize_accounts(42))

        assert state.state_bump == addresses.escrow_state.bump
        assert state.vault_authority_bump == addresses.vault_authority.bump

    async def test_initializer_pays_rent(self, scenario):
        """Test the initializer funds both new accounts."""
        init = scenario.initializer
        before = scenario.lamports(init.pubkey)

        await self._initialize(scenario, scenario.initialize_accounts(42))

        rent = scenario.ledger.minimum_balance(
            EscrowState.LEN
        ) + scenario.ledger.minimum_balance(TokenAccount.LEN)
        assert scenario.lamports(init.pubkey) == before - rent

    async def test_state_owned_by_program(self, scenario):
        """Test the record is owned by the escrow program."""
        accounts = scenario.initialize_accounts(42)

        await self._initialize(scenario, accounts)

        account = scenario.ledger.get_account(accounts.escrow_state)
        assert account.owner == scenario.program.program_id
        assert scenario.ledger.get_account(accounts.vault).owner == TOKEN_PROGRAM_ID

    async def test_full_balance_deposit(self, scenario):
        """Test depositing the whole balance is allowed."""
        accounts = scenario.initialize_accounts(42)

        await self._initialize(scenario, accounts, self._args(deposit=1000))

        assert scenario.balance(scenario.initializer.deposit_token_account) == 0

    # ================================================================
    # Rejections
    # ================================================================

    async def test_initializer_must_sign(self, scenario):
        """Test unsigned Initialize is rejected without effect."""
        before = scenario.snapshot()

        with pytest.raises(AuthorizationError):
            await self._initialize(
                scenario, scenario.initialize_accounts(42), signers=[]
            )

        assert scenario.snapshot() == before

    async def test_escrow_state_must_be_derived(self, scenario):
        """Test an arbitrary escrow state address is rejected."""
        accounts = replace(
            scenario.initialize_accounts(42), escrow_state=Keypair().pubkey()
        )

        with pytest.raises(ConsistencyError):
            await self._initialize(scenario, accounts)

    async def test_seed_must_match_escrow_state(self, scenario):
        """Test accounts derived from another seed are rejected."""
        with pytest.raises(ConsistencyError):
            await self._initialize(
                scenario, scenario.initialize_accounts(7), self._args(seed=8)
            )

    async def test_vault_must_be_derived(self, scenario):
        """Test a vault that is not the escrow's vault is rejected."""
        other_vault = scenario.program.derive_addresses(99).vault.address
        accounts = replace(scenario.initialize_accounts(42), vault=other_vault)

        with pytest.raises(ConsistencyError):
            await self._initialize(scenario, accounts)

    async def test_vault_authority_must_be_derived(self, scenario):
        """Test a foreign vault authority is rejected."""
        accounts = replace(
            scenario.initialize_accounts(42), vault_authority=Keypair().pubkey()
        )

        with pytest.raises(ConsistencyError):
            await self._initialize(scenario, accounts)

    async def test_unknown_mint(self, scenario):
        """Test a mint that does not exist is rejected."""
        accounts = replace(
            scenario.initialize_accounts(42), receive_mint=Keypair().pubkey()
        )

        with pytest.raises(NotFoundError):
            await self._initialize(scenario, accounts)

    async def test_deposit_account_of_other_owner(self, scenario):
        """Test the deposit account must belong to the initializer."""
        accounts = replace(
            scenario.initialize_accounts(42),
            initializer_deposit_token_account=scenario.taker.receive_token_account,
        )

        with pytest.raises(ConsistencyError):
            await self._initialize(scenario, accounts)

    async def test_receive_account_wrong_mint(self, scenario):
        """Test the receive account must hold the receive mint."""
        init = scenario.initializer
        accounts = replace(
            scenario.initialize_accounts(42),
            initializer_receive_token_account=init.deposit_token_account,
        )

        with pytest.raises(ConsistencyError):
            await self._initialize(scenario, accounts)

    async def test_insufficient_deposit_balance(self, scenario):
        """Test depositing more than the balance fails without effect."""
        before = scenario.snapshot()

        with pytest.raises(InsufficientFundsError):
            await self._initialize(
                scenario, scenario.initialize_accounts(42), self._args(deposit=1001)
            )

        assert scenario.snapshot() == before

    async def test_insufficient_rent(self, scenario):
        """Test an initializer that cannot pay rent is rejected."""
        poor = await scenario.new_party(scenario.mint_a, scenario.mint_b, lamports=1)
        accounts = scenario.initialize_accounts(42, initializer=poor)
        before = scenario.snapshot()

        with pytest.raises(InsufficientFundsError):
            await scenario.program.initialize([poor.pubkey], accounts, self._args())

        assert scenario.snapshot() == before

    async def test_same_seed_twice(self, scenario):
        """Test a live escrow address cannot be allocated again."""
        accounts = scenario.initialize_accounts(42)
        await self._initialize(scenario, accounts)

        with pytest.raises(DuplicateAllocationError):
            await self._initialize(scenario, accounts)

        assert scenario.balance(scenario.initializer.deposit_token_account) == 500
