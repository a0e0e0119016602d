"""
Precondition checks shared by the escrow instructions.

All of these only read; instructions call them before any mutation.
"""

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.escrow_state import EscrowState
from troqueur.domain.exceptions import (
    AuthorizationError,
    ConsistencyError,
    NotFoundError,
)
from troqueur.domain.services.i_ledger import IAccountReader
from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.infrastructure.blockchain.address_derivation import AddressDerivation


def require_signer(ctx: InvocationContext, key: Pubkey, role: str) -> None:
    """Raise AuthorizationError unless key signed the instruction."""
    if not ctx.has_signed(key):
        raise AuthorizationError(f"{role} {key} must sign", account=str(key))


def require_match(field: str, expected: Pubkey, actual: Pubkey) -> None:
    """Raise ConsistencyError if a supplied account differs from the record."""
    if expected != actual:
        raise ConsistencyError(field, str(expected), str(actual))


def load_escrow_state(
    reader: IAccountReader,
    address: Pubkey,
    addresses: AddressDerivation,
) -> EscrowState:
    """
    Load and validate a live escrow record.

    Args:
        reader: Ledger or open transaction
        address: Escrow state address supplied by the caller
        addresses: Address book of the owning program

    Returns:
        Decoded EscrowState

    Raises:
        NotFoundError: If no account lives at address
        ConsistencyError: If the account is not an escrow record of this
            program or does not sit at its derived address
    """
    account = reader.get_account(address)
    if account is None:
        raise NotFoundError("EscrowState", str(address))

    if account.owner != addresses.program_id:
        raise ConsistencyError(
            "escrow_state owner", str(addresses.program_id), str(account.owner)
        )

    try:
        state = EscrowState.unpack(address, account.data)
    except ValueError as e:
        raise ConsistencyError("escrow_state data", "EscrowState", str(e))

    state_seeds = [
        addresses.state_seed,
        state.random_seed.to_bytes(8, "little"),
        bytes([state.state_bump]),
    ]
    if not addresses.verify(address, state_seeds):
        raise ConsistencyError("escrow_state", "derived escrow address", str(address))

    return state


def require_vault_authority(
    addresses: AddressDerivation, state: EscrowState, supplied: Pubkey
) -> list[bytes]:
    """
    Check the supplied vault authority against the stored bump.

    Returns:
        Signer seeds for the vault authority
    """
    seeds = [addresses.authority_seed, bytes([state.vault_authority_bump])]
    if not addresses.verify(supplied, seeds):
        raise ConsistencyError(
            "vault_authority", str(addresses.vault_authority), str(supplied)
        )
    return seeds
