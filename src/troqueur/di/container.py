"""
Dependency Injection Container for Troqueur.

Wires the ledger, token program, address book, use cases and the
escrow program from settings.
"""

from typing import Optional

from troqueur.application.escrow_program import EscrowProgram
from troqueur.application.use_cases.cancel_escrow import CancelEscrow
from troqueur.application.use_cases.exchange_escrow import ExchangeEscrow
from troqueur.application.use_cases.initialize_escrow import InitializeEscrow
from troqueur.config.settings import Settings, get_settings
from troqueur.domain.services.i_ledger import ILedger
from troqueur.domain.services.i_token_program import ITokenProgram
from troqueur.infrastructure.blockchain.address_derivation import AddressDerivation
from troqueur.infrastructure.ledger.in_memory_ledger import InMemoryLedger
from troqueur.infrastructure.ledger.rent import Rent
from troqueur.infrastructure.monitoring import setup_logging
from troqueur.infrastructure.token.token_program import InMemoryTokenProgram


class DIContainer:
    """
    Dependency Injection Container.

    Manages singleton instances of all services and use cases.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize container with None instances.

        Args:
            settings: Explicit settings (defaults to the global settings)
        """
        self._settings = settings

        # Infrastructure
        self._rent: Optional[Rent] = None
        self._ledger: Optional[ILedger] = None
        self._token_program: Optional[ITokenProgram] = None
        self._addresses: Optional[AddressDerivation] = None

        # Use Cases
        self._initialize_escrow: Optional[InitializeEscrow] = None
        self._exchange_escrow: Optional[ExchangeEscrow] = None
        self._cancel_escrow: Optional[CancelEscrow] = None

        # Program
        self._escrow_program: Optional[EscrowProgram] = None

    def initialize(self) -> None:
        """Configure logging from settings."""
        setup_logging(level=self.settings.LOG_LEVEL, json_logs=self.settings.LOG_JSON)

    @property
    def settings(self) -> Settings:
        """Get settings instance."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    # Infrastructure Getters

    @property
    def rent(self) -> Rent:
        """Get rent calculator."""
        if self._rent is None:
            self._rent = Rent(
                storage_overhead=self.settings.ACCOUNT_STORAGE_OVERHEAD,
                lamports_per_byte_year=self.settings.LAMPORTS_PER_BYTE_YEAR,
                exemption_threshold=self.settings.EXEMPTION_THRESHOLD_YEARS,
            )
        return self._rent

    @property
    def ledger(self) -> ILedger:
        """Get ledger instance."""
        if self._ledger is None:
            self._ledger = InMemoryLedger(rent=self.rent)
        return self._ledger

    @property
    def token_program(self) -> ITokenProgram:
        """Get token program instance."""
        if self._token_program is None:
            self._token_program = InMemoryTokenProgram()
        return self._token_program

    @property
    def addresses(self) -> AddressDerivation:
        """Get escrow address derivation."""
        if self._addresses is None:
            self._addresses = AddressDerivation(
                program_id=self.settings.program_id,
                state_seed=self.settings.STATE_SEED.encode(),
                authority_seed=self.settings.AUTHORITY_SEED.encode(),
                vault_seed=self.settings.VAULT_SEED.encode(),
            )
        return self._addresses

    # Use Case Getters

    @property
    def initialize_escrow(self) -> InitializeEscrow:
        """Get initialize escrow use case."""
        if self._initialize_escrow is None:
            self._initialize_escrow = InitializeEscrow(
                ledger=self.ledger,
                token_program=self.token_program,
                addresses=self.addresses,
                allow_seed_reuse=self.settings.ALLOW_SEED_REUSE,
            )
        return self._initialize_escrow

    @property
    def exchange_escrow(self) -> ExchangeEscrow:
        """Get exchange escrow use case."""
        if self._exchange_escrow is None:
            self._exchange_escrow = ExchangeEscrow(
                ledger=self.ledger,
                token_program=self.token_program,
                addresses=self.addresses,
            )
        return self._exchange_escrow

    @property
    def cancel_escrow(self) -> CancelEscrow:
        """Get cancel escrow use case."""
        if self._cancel_escrow is None:
            self._cancel_escrow = CancelEscrow(
                ledger=self.ledger,
                token_program=self.token_program,
                addresses=self.addresses,
            )
        return self._cancel_escrow

    @property
    def escrow_program(self) -> EscrowProgram:
        """Get escrow program facade."""
        if self._escrow_program is None:
            self._escrow_program = EscrowProgram(
                ledger=self.ledger,
                addresses=self.addresses,
                initialize_escrow=self.initialize_escrow,
                exchange_escrow=self.exchange_escrow,
                cancel_escrow=self.cancel_escrow,
            )
        return self._escrow_program


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get global DI container instance."""
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


def reset_container() -> None:
    """Drop the global container (for testing)."""
    global _container
    _container = None
