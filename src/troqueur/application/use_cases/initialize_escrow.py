"""
Initialize Escrow use case.

Opens an escrow: allocates the EscrowState record, creates the vault
owned by the program's vault authority and moves the deposit into it.
"""

from troqueur.application.dto.instruction_accounts import InitializeAccounts
from troqueur.application.dto.instruction_args import InitializeArgs
from troqueur.application.use_cases.escrow_guards import (
    require_match,
    require_signer,
)
from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.entities.token_account import TokenAccount
from troqueur.domain.exceptions import (
    DuplicateAllocationError,
    InsufficientFundsError,
)
from troqueur.domain.services.i_ledger import ILedger
from troqueur.domain.services.i_token_program import ITokenProgram
from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.infrastructure.blockchain.address_derivation import AddressDerivation
from troqueur.infrastructure.monitoring import get_logger

logger = get_logger(__name__)


class InitializeEscrow:
    """
    Initialize an escrow for the signing initializer.

    Business rules:
    - Initializer must sign
    - Escrow state, vault and vault authority must be the derived addresses
    - Initializer token accounts must belong to the initializer and hold
      the declared mints
    - Escrow state and vault must not exist yet; a closed escrow address is
      only reusable when allow_seed_reuse is set
    - Initializer pays the rent of both new accounts
    - All effects apply together or not at all
    """

    def __init__(
        self,
        ledger: ILedger,
        token_program: ITokenProgram,
        addresses: AddressDerivation,
        allow_seed_reuse: bool = False,
    ):
        """
        Initialize use case with dependencies.

        Args:
            ledger: Account store executing the instruction atomically
            token_program: Token subsystem for vault creation and transfers
            addresses: Address book of the escrow program
            allow_seed_reuse: Permit re-opening a closed escrow address
        """
        self.ledger = ledger
        self.token_program = token_program
        self.addresses = addresses
        self.allow_seed_reuse = allow_seed_reuse

    async def execute(
        self,
        ctx: InvocationContext,
        accounts: InitializeAccounts,
        args: InitializeArgs,
    ) -> EscrowState:
        """
        Execute escrow initialization.

        Args:
            ctx: Verified signers and executing program
            accounts: Instruction accounts
            args: Seed and swap amounts

        Returns:
            The stored EscrowState

        Raises:
            AuthorizationError: If the initializer did not sign
            ConsistencyError: If an account is not the expected one
            NotFoundError: If a mint or token account does not exist
            DuplicateAllocationError: If the escrow address is taken
            InsufficientFundsError: If tokens or rent lamports fall short
        """
        require_signer(ctx, accounts.initializer, "initializer")

        state_address = self.addresses.escrow_state(args.random_seed)
        vault_authority = self.addresses.vault_authority
        vault_address = self.addresses.vault(state_address.address)

        require_match("escrow_state", state_address.address, accounts.escrow_state)
        require_match(
            "vault_authority", vault_authority.address, accounts.vault_authority
        )
        require_match("vault", vault_address.address, accounts.vault)

        async with self.ledger.transaction(accounts.writable()) as tx:
            # 1. Validate mints and the initializer's token accounts
            deposit_mint = self.token_program.get_mint(tx, accounts.deposit_mint)
            self.token_program.get_mint(tx, accounts.receive_mint)

            deposit_account = self.token_program.get_token_account(
                tx, accounts.initializer_deposit_token_account
            )
            receive_account = self.token_program.get_token_account(
                tx, accounts.initializer_receive_token_account
            )
            require_match(
                "initializer_deposit_token_account.owner",
                accounts.initializer,
                deposit_account.owner,
            )
            require_match(
                "initializer_deposit_token_account.mint",
                accounts.deposit_mint,
                deposit_account.mint,
            )
            require_match(
                "initializer_receive_token_account.owner",
                accounts.initializer,
                receive_account.owner,
            )
            require_match(
                "initializer_receive_token_account.mint",
                accounts.receive_mint,
                receive_account.mint,
            )

            # 2. Both new accounts must be free
            for address in (accounts.escrow_state, accounts.vault):
                if tx.exists(address):
                    raise DuplicateAllocationError(str(address))
            if tx.was_closed(accounts.escrow_state) and not self.allow_seed_reuse:
                raise DuplicateAllocationError(
                    str(accounts.escrow_state),
                    reason="was closed and its seed cannot be reused",
                )

            # 3. Funds for the deposit and for rent
            if deposit_account.amount < args.deposit_amount:
                raise InsufficientFundsError(
                    str(deposit_account.address),
                    args.deposit_amount,
                    deposit_account.amount,
                )

            rent = self.ledger.minimum_balance(
                EscrowState.LEN
            ) + self.ledger.minimum_balance(TokenAccount.LEN)
            initializer_account = tx.get_account(accounts.initializer)
            lamports = initializer_account.lamports if initializer_account else 0
            if lamports < rent:
                raise InsufficientFundsError(str(accounts.initializer), rent, lamports)

            # 4. Allocate state, create vault, move deposit
            state = EscrowState(
                address=state_address.address,
                random_seed=args.random_seed,
                initializer=accounts.initializer,
                taker=args.taker,
                initializer_deposit_token_account=deposit_account.address,
                initializer_receive_token_account=receive_account.address,
                deposit_mint=accounts.deposit_mint,
                receive_mint=accounts.receive_mint,
                vault=vault_address.address,
                deposit_amount=args.deposit_amount,
                receive_amount=args.receive_amount,
                vault_authority_bump=vault_authority.bump,
                state_bump=state_address.bump,
            )
            tx.create_account(
                state.address,
                self.addresses.program_id,
                state.pack(),
                accounts.initializer,
            )
            self.token_program.create_account(
                tx,
                vault_address.address,
                accounts.deposit_mint,
                owner=vault_authority.address,
                payer=accounts.initializer,
            )
            self.token_program.transfer_checked(
                tx,
                ctx,
                source=deposit_account.address,
                mint=accounts.deposit_mint,
                destination=vault_address.address,
                authority=accounts.initializer,
                amount=args.deposit_amount,
                decimals=deposit_mint.decimals,
            )

        logger.info(
            f"Escrow {state_address.truncated()} opened: "
            f"{args.deposit_amount} of {accounts.deposit_mint} for "
            f"{args.receive_amount} of {accounts.receive_mint}"
        )
        return state
