"""
InvocationContext value object - Who is executing an instruction.
"""

from dataclasses import dataclass, field

from solders.pubkey import Pubkey  # type: ignore


@dataclass(frozen=True)
class InvocationContext:
    """
    Value object describing one instruction invocation.

    Business rules:
    - signers holds only keys whose signatures were verified by the runtime
    - program_id is the program currently executing, used to check
      program-derived signer seeds
    """

    program_id: Pubkey
    signers: frozenset[Pubkey] = field(default_factory=frozenset)

    def has_signed(self, key: Pubkey) -> bool:
        """True if key signed the enclosing transaction."""
        return key in self.signers
