"""
Value objects for Troqueur domain.
"""

from troqueur.domain.value_objects.invocation_context import InvocationContext
from troqueur.domain.value_objects.program_address import ProgramAddress

__all__ = [
    "InvocationContext",
    "ProgramAddress",
]
