"""
Exchange Escrow use case.

Completes the swap: the taker pays the initializer, the vault pays the
taker, then the vault and the escrow record are closed.
"""

from troqueur.application.dto.instruction_accounts import ExchangeAccounts
from troqueur.application.use_cases.escrow_guards import (
    load_escrow_state,
    require_match,
    require_signer,
    require_vault_authority,
)
from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.exceptions import (
    AuthorizationError,
    ConsistencyError,
    InsufficientFundsError,
)
from troqueur.domain.services.i_ledger import ILedger
from troqueur.domain.services.i_token_program import ITokenProgram
from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.infrastructure.blockchain.address_derivation import AddressDerivation
from troqueur.infrastructure.monitoring import get_logger

logger = get_logger(__name__)


class ExchangeEscrow:
    """
    Settle an open escrow with a taker.

    Business rules:
    - Taker must sign
    - Every account must match what the escrow recorded
    - A directed escrow only accepts its recorded taker
    - Vault must hold at least the deposit
    - Taker receives exactly deposit_amount; any surplus sent into the
      vault by others goes back to the initializer deposit account
    - Taker must own enough of the receive asset
    - Rent of the vault and the record goes back to the initializer
    """

    def __init__(
        self,
        ledger: ILedger,
        token_program: ITokenProgram,
        addresses: AddressDerivation,
    ):
        """
        Initialize use case with dependencies.

        Args:
            ledger: Account store executing the instruction atomically
            token_program: Token subsystem for transfers and closing
            addresses: Address book of the escrow program
        """
        self.ledger = ledger
        self.token_program = token_program
        self.addresses = addresses

    async def execute(
        self,
        ctx: InvocationContext,
        accounts: ExchangeAccounts,
    ) -> EscrowState:
        """
        Execute the swap.

        Args:
            ctx: Verified signers and executing program
            accounts: Instruction accounts

        Returns:
            The EscrowState that was settled and closed

        Raises:
            AuthorizationError: If the taker did not sign, is not the
                directed taker or does not own the paying account
            NotFoundError: If the escrow is not open
            ConsistencyError: If an account differs from the record or the
                vault holds less than the deposit
            InsufficientFundsError: If the taker cannot pay receive_amount
        """
        require_signer(ctx, accounts.taker, "taker")

        async with self.ledger.transaction(accounts.writable()) as tx:
            # 1. Escrow record and stored references
            state = load_escrow_state(tx, accounts.escrow_state, self.addresses)
            require_match("initializer", state.initializer, accounts.initializer)
            require_match(
                "initializer_deposit_token_account",
                state.initializer_deposit_token_account,
                accounts.initializer_deposit_token_account,
            )
            require_match(
                "initializer_receive_token_account",
                state.initializer_receive_token_account,
                accounts.initializer_receive_token_account,
            )
            require_match("deposit_mint", state.deposit_mint, accounts.deposit_mint)
            require_match("receive_mint", state.receive_mint, accounts.receive_mint)
            require_match("vault", state.vault, accounts.vault)
            authority_seeds = require_vault_authority(
                self.addresses, state, accounts.vault_authority
            )

            if state.is_directed and state.taker != accounts.taker:
                raise AuthorizationError(
                    f"Escrow {accounts.escrow_state} is reserved for {state.taker}",
                    account=str(accounts.taker),
                )

            # 2. Taker token accounts
            taker_deposit = self.token_program.get_token_account(
                tx, accounts.taker_deposit_token_account
            )
            taker_receive = self.token_program.get_token_account(
                tx, accounts.taker_receive_token_account
            )
            if taker_deposit.owner != accounts.taker:
                raise AuthorizationError(
                    f"Taker does not own {taker_deposit.address}",
                    account=str(accounts.taker),
                )
            require_match(
                "taker_deposit_token_account.mint",
                state.receive_mint,
                taker_deposit.mint,
            )
            require_match(
                "taker_receive_token_account.mint",
                state.deposit_mint,
                taker_receive.mint,
            )

            # 3. Balances
            vault = self.token_program.get_token_account(tx, accounts.vault)
            if vault.amount < state.deposit_amount:
                raise ConsistencyError(
                    "vault balance", str(state.deposit_amount), str(vault.amount)
                )
            if taker_deposit.amount < state.receive_amount:
                raise InsufficientFundsError(
                    str(taker_deposit.address),
                    state.receive_amount,
                    taker_deposit.amount,
                )

            receive_mint = self.token_program.get_mint(tx, state.receive_mint)
            deposit_mint = self.token_program.get_mint(tx, state.deposit_mint)

            # 4. Swap legs
            self.token_program.transfer_checked(
                tx,
                ctx,
                source=taker_deposit.address,
                mint=state.receive_mint,
                destination=state.initializer_receive_token_account,
                authority=accounts.taker,
                amount=state.receive_amount,
                decimals=receive_mint.decimals,
            )
            self.token_program.transfer_checked(
                tx,
                ctx,
                source=state.vault,
                mint=state.deposit_mint,
                destination=taker_receive.address,
                authority=accounts.vault_authority,
                amount=state.deposit_amount,
                decimals=deposit_mint.decimals,
                signer_seeds=authority_seeds,
            )
            surplus = vault.amount - state.deposit_amount
            if surplus:
                self.token_program.transfer_checked(
                    tx,
                    ctx,
                    source=state.vault,
                    mint=state.deposit_mint,
                    destination=state.initializer_deposit_token_account,
                    authority=accounts.vault_authority,
                    amount=surplus,
                    decimals=deposit_mint.decimals,
                    signer_seeds=authority_seeds,
                )

            # 5. Close vault and record, rent to the initializer
            self.token_program.close_account(
                tx,
                ctx,
                account=state.vault,
                destination=state.initializer,
                authority=accounts.vault_authority,
                signer_seeds=authority_seeds,
            )
            tx.close_account(state.address, state.initializer)

        logger.info(
            f"Escrow {state.address} exchanged with taker {accounts.taker}: "
            f"{state.deposit_amount} <-> {state.receive_amount}"
        )
        return state
