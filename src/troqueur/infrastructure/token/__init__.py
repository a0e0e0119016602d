"""
Token subsystem infrastructure.
"""

from troqueur.infrastructure.token.token_program import (
    TOKEN_PROGRAM_ID,
    InMemoryTokenProgram,
)

__all__ = [
    "TOKEN_PROGRAM_ID",
    "InMemoryTokenProgram",
]
