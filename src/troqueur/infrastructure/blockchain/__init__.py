"""
Blockchain infrastructure (address derivation).
"""

from troqueur.infrastructure.blockchain.address_derivation import (
    AddressDerivation,
    derive_escrow_state,
    derive_program_address,
    derive_vault,
    derive_vault_authority,
)

__all__ = [
    "AddressDerivation",
    "derive_escrow_state",
    "derive_program_address",
    "derive_vault",
    "derive_vault_authority",
]
