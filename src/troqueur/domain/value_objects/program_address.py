"""
ProgramAddress value object - Immutable program-derived address.
"""

from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore


@dataclass(frozen=True)
class ProgramAddress:
    """
    Value object representing a program-derived address (PDA).

    Business rules:
    - Address has no private key; only the deriving program can sign for it
    - Bump is the disambiguator that pushed the hash off the ed25519 curve
    - Same seeds and program always give the same address and bump
    """

    address: Pubkey
    bump: int
    seeds: tuple[bytes, ...]

    def __post_init__(self):
        """Validate bump range on creation."""
        if not 0 <= self.bump <= 255:
            raise ValueError(f"Invalid bump seed: {self.bump}")

    def signer_seeds(self) -> list[bytes]:
        """Seeds plus bump, as required for program-derived signing."""
        return [*self.seeds, bytes([self.bump])]

    def truncated(self) -> str:
        """Return truncated address for display (e.g., 'ABC...XYZ')."""
        text = str(self.address)
        return f"{text[:6]}...{text[-4:]}"

    def __str__(self) -> str:
        return str(self.address)
