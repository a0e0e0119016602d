"""
Cancel Escrow use case.

Returns the vault balance to the initializer and closes the escrow.
"""

from troqueur.application.dto.instruction_accounts import CancelAccounts
from troqueur.application.use_cases.escrow_guards import (
    load_escrow_state,
    require_match,
    require_signer,
    require_vault_authority,
)
from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.exceptions import AuthorizationError
from troqueur.domain.services.i_ledger import ILedger
from troqueur.domain.services.i_token_program import ITokenProgram
from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.infrastructure.blockchain.address_derivation import AddressDerivation
from troqueur.infrastructure.monitoring import get_logger

logger = get_logger(__name__)


class CancelEscrow:
    """
    Refund and close an open escrow.

    Business rules:
    - Only the recorded initializer may cancel, and must sign
    - Deposit account, mint and vault must match the record
    - Whole vault balance goes back to the initializer's deposit account
    """

    def __init__(
        self,
        ledger: ILedger,
        token_program: ITokenProgram,
        addresses: AddressDerivation,
    ):
        self.ledger = ledger
        self.token_program = token_program
        self.addresses = addresses

    async def execute(
        self,
        ctx: InvocationContext,
        accounts: CancelAccounts,
    ) -> EscrowState:
        """
        Execute cancellation.

        Args:
            ctx: Verified signers and executing program
            accounts: Instruction accounts

        Returns:
            The EscrowState that was closed

        Raises:
            AuthorizationError: If the signer is not the recorded initializer
            NotFoundError: If the escrow is not open
            ConsistencyError: If an account differs from the record
        """
        require_signer(ctx, accounts.initializer, "initializer")

        async with self.ledger.transaction(accounts.writable()) as tx:
            state = load_escrow_state(tx, accounts.escrow_state, self.addresses)
            if state.initializer != accounts.initializer:
                raise AuthorizationError(
                    f"Only the initializer of {state.address} may cancel",
                    account=str(accounts.initializer),
                )

            require_match(
                "initializer_deposit_token_account",
                state.initializer_deposit_token_account,
                accounts.initializer_deposit_token_account,
            )
            require_match("deposit_mint", state.deposit_mint, accounts.deposit_mint)
            require_match("vault", state.vault, accounts.vault)
            authority_seeds = require_vault_authority(
                self.addresses, state, accounts.vault_authority
            )

            vault = self.token_program.get_token_account(tx, state.vault)
            deposit_mint = self.token_program.get_mint(tx, state.deposit_mint)

            self.token_program.transfer_checked(
                tx,
                ctx,
                source=state.vault,
                mint=state.deposit_mint,
                destination=state.initializer_deposit_token_account,
                authority=accounts.vault_authority,
                amount=vault.amount,
                decimals=deposit_mint.decimals,
                signer_seeds=authority_seeds,
            )
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
            f"Escrow {state.address} cancelled, {vault.amount} returned to "
            f"{state.initializer_deposit_token_account}"
        )
        return state
