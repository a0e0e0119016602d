"""
Escrow program facade.

Entry point for the three escrow instructions. Direct calls
(initialize / exchange / cancel) take the set of keys that already
proved their signatures; process() accepts a wire instruction plus the
caller's signatures and verifies them itself.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from solders.instruction import Instruction  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore

from troqueur.application.dto.instruction_accounts import (
    CancelAccounts,
    ExchangeAccounts,
    InitializeAccounts,
)
from troqueur.application.dto.instruction_args import InitializeArgs
from troqueur.application.dto.instruction_codec import (
    CANCEL,
    EXCHANGE,
    INITIALIZE,
    decode_instruction,
    signing_message,
)
from troqueur.application.use_cases import (
    CancelEscrow,
    ExchangeEscrow,
    InitializeEscrow,
)
from troqueur.application.use_cases.escrow_guards import load_escrow_state
from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.exceptions import (
    AuthorizationError,
    InvalidInstructionError,
    TroqueurException,
)
from troqueur.domain.services.i_ledger import ILedger
from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.domain.value_objects.program_address import ProgramAddress
from troqueur.infrastructure.blockchain.address_derivation import AddressDerivation
from troqueur.infrastructure.monitoring import get_logger, instruction_scope

logger = get_logger(__name__)


@dataclass(frozen=True)
class EscrowAddresses:
    """Derived addresses a client needs to build escrow instructions."""

    escrow_state: ProgramAddress
    vault: ProgramAddress
    vault_authority: ProgramAddress


class EscrowProgram:
    """
    Escrow program bound to one ledger.

    Every instruction is logged at INFO on success and at WARNING when
    rejected; the rejection is re-raised unchanged.
    """

    def __init__(
        self,
        ledger: ILedger,
        addresses: AddressDerivation,
        initialize_escrow: InitializeEscrow,
        exchange_escrow: ExchangeEscrow,
        cancel_escrow: CancelEscrow,
    ):
        self.ledger = ledger
        self.addresses = addresses
        self.initialize_escrow = initialize_escrow
        self.exchange_escrow = exchange_escrow
        self.cancel_escrow = cancel_escrow

    @property
    def program_id(self) -> Pubkey:
        return self.addresses.program_id

    # ================================================================
    # Queries
    # ================================================================

    def derive_addresses(self, random_seed: int) -> EscrowAddresses:
        """
        Derive the escrow state, vault and vault authority for a seed.

        Args:
            random_seed: Seed the initializer will pass to Initialize

        Returns:
            EscrowAddresses
        """
        state = self.addresses.escrow_state(random_seed)
        return EscrowAddresses(
            escrow_state=state,
            vault=self.addresses.vault(state.address),
            vault_authority=self.addresses.vault_authority,
        )

    async def get_escrow_state(self, address: Pubkey) -> EscrowState:
        """
        Decode the live escrow record at address.

        Raises:
            NotFoundError: If no escrow is open at address
            ConsistencyError: If the account is not an escrow record
        """
        return load_escrow_state(self.ledger, address, self.addresses)

    # ================================================================
    # Instructions
    # ================================================================

    async def initialize(
        self,
        signers: Iterable[Pubkey],
        accounts: InitializeAccounts,
        args: InitializeArgs,
    ) -> EscrowState:
        """Open an escrow (see InitializeEscrow)."""
        ctx = self._context(signers)
        try:
            return await self.initialize_escrow.execute(ctx, accounts, args)
        except TroqueurException as e:
            self._log_rejection("initialize", accounts.escrow_state, e)
            raise

    async def exchange(
        self,
        signers: Iterable[Pubkey],
        accounts: ExchangeAccounts,
    ) -> EscrowState:
        """Settle an escrow with a taker (see ExchangeEscrow)."""
        ctx = self._context(signers)
        try:
            return await self.exchange_escrow.execute(ctx, accounts)
        except TroqueurException as e:
            self._log_rejection("exchange", accounts.escrow_state, e)
            raise

    async def cancel(
        self,
        signers: Iterable[Pubkey],
        accounts: CancelAccounts,
    ) -> EscrowState:
        """Refund and close an escrow (see CancelEscrow)."""
        ctx = self._context(signers)
        try:
            return await self.cancel_escrow.execute(ctx, accounts)
        except TroqueurException as e:
            self._log_rejection("cancel", accounts.escrow_state, e)
            raise

    async def process(
        self,
        instruction: Instruction,
        signatures: Sequence[tuple[Pubkey, Signature]],
        instruction_id: Optional[str] = None,
    ) -> EscrowState:
        """
        Verify, decode and execute a wire instruction.

        Each (pubkey, signature) pair must verify against the canonical
        instruction bytes; a pair that does not is rejected outright.
        Every account the instruction requires as a signer must be among
        the verified keys.

        Args:
            instruction: Instruction addressed to this program
            signatures: Signatures over signing_message(instruction)
            instruction_id: Optional id stamped on log records

        Returns:
            EscrowState created or closed by the instruction

        Raises:
            InvalidInstructionError: If the instruction is not for this
                program or cannot be decoded
            AuthorizationError: If a signature is invalid or a required
                signature is missing
        """
        with instruction_scope(instruction_id):
            try:
                signers = self._verify_signatures(instruction, signatures)
                selector, accounts, args = decode_instruction(instruction)
                for required in accounts.signers():
                    if required not in signers:
                        raise AuthorizationError(
                            f"Missing signature for {required}",
                            account=str(required),
                        )
            except TroqueurException as e:
                logger.warning(
                    f"Instruction rejected before dispatch: {e.message}",
                    extra={"error_code": e.code},
                )
                raise

            if selector == INITIALIZE:
                return await self.initialize(signers, accounts, args)
            if selector == EXCHANGE:
                return await self.exchange(signers, accounts)
            return await self.cancel(signers, accounts)

    # ================================================================
    # Helpers
    # ================================================================

    def _verify_signatures(
        self,
        instruction: Instruction,
        signatures: Sequence[tuple[Pubkey, Signature]],
    ) -> set[Pubkey]:
        if instruction.program_id != self.program_id:
            raise InvalidInstructionError(
                f"Instruction targets {instruction.program_id}, not {self.program_id}"
            )

        message = signing_message(instruction)
        signers = set()
        for pubkey, signature in signatures:
            if not signature.verify(pubkey, message):
                raise AuthorizationError(
                    f"Invalid signature for {pubkey}", account=str(pubkey)
                )
            signers.add(pubkey)
        return signers

    def _context(self, signers: Iterable[Pubkey]) -> InvocationContext:
        return InvocationContext(program_id=self.program_id, signers=frozenset(signers))

    @staticmethod
    def _log_rejection(name: str, escrow: Pubkey, error: TroqueurException) -> None:
        logger.warning(
            f"{name} rejected: {error.message}",
            extra={
                "instruction": name,
                "escrow": str(escrow),
                "error_code": error.code,
            },
        )
