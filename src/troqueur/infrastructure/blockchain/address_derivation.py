"""
Program-derived address utilities.

Deterministic, key-less addresses for escrow records, vaults and the
shared vault authority.
"""

from functools import cached_property
from typing import Sequence

from solders.pubkey import Pubkey  # type: ignore

from troqueur.domain.entities.token_account import U64_MAX
from troqueur.domain.exceptions import AddressDerivationError
from troqueur.domain.value_objects.program_address import ProgramAddress


def derive_program_address(
    seeds: Sequence[bytes], program_id: Pubkey
) -> ProgramAddress:
    """
    Derive a program address and its bump.

    Args:
        seeds: Ordered seed byte strings (each at most 32 bytes)
        program_id: Program that owns the derived address

    Returns:
        ProgramAddress with the canonical (highest valid) bump

    Raises:
        AddressDerivationError: If no bump yields an off-curve address
    """
    seed_list = [bytes(seed) for seed in seeds]
    try:
        address, bump = Pubkey.find_program_address(seed_list, program_id)
    except Exception as e:
        raise AddressDerivationError(seed_list, str(program_id)) from e

    return ProgramAddress(address=address, bump=bump, seeds=tuple(seed_list))


def derive_escrow_state(
    random_seed: int, program_id: Pubkey, label: bytes = b"state"
) -> ProgramAddress:
    """Address of the escrow record chosen by random_seed."""
    if not 0 <= random_seed <= U64_MAX:
        raise ValueError(f"Random seed must be a u64, got {random_seed}")
    seed_bytes = random_seed.to_bytes(8, "little")
    return derive_program_address([label, seed_bytes], program_id)


def derive_vault_authority(
    program_id: Pubkey, label: bytes = b"authority"
) -> ProgramAddress:
    """Single signing authority shared by every vault of the program."""
    return derive_program_address([label], program_id)


def derive_vault(
    escrow_state: Pubkey, program_id: Pubkey, label: bytes = b"vault"
) -> ProgramAddress:
    """Token account holding the deposit of one escrow."""
    return derive_program_address([label, bytes(escrow_state)], program_id)


class AddressDerivation:
    """
    Address book of the escrow program.

    Seeds:
        escrow state:    [state_seed, random_seed as u64 little-endian]
        vault authority: [authority_seed]
        vault:           [vault_seed, escrow state address]
    """

    def __init__(
        self,
        program_id: Pubkey,
        state_seed: bytes = b"state",
        authority_seed: bytes = b"authority",
        vault_seed: bytes = b"vault",
    ):
        """
        Initialize address derivation for one program.

        Args:
            program_id: Escrow program id
            state_seed: Label for escrow state addresses
            authority_seed: Label for the vault authority
            vault_seed: Label for vault addresses
        """
        self.program_id = program_id
        self.state_seed = state_seed
        self.authority_seed = authority_seed
        self.vault_seed = vault_seed

    def escrow_state(self, random_seed: int) -> ProgramAddress:
        return derive_escrow_state(random_seed, self.program_id, self.state_seed)

    @cached_property
    def vault_authority(self) -> ProgramAddress:
        return derive_vault_authority(self.program_id, self.authority_seed)

    def vault(self, escrow_state: Pubkey) -> ProgramAddress:
        return derive_vault(escrow_state, self.program_id, self.vault_seed)

    def verify(self, address: Pubkey, signer_seeds: Sequence[bytes]) -> bool:
        """Check that signer seeds (bump included) re-create address."""
        try:
            derived = Pubkey.create_program_address(list(signer_seeds), self.program_id)
        except Exception:
            return False
        return derived == address
