"""
Instruction data transfer objects.
"""

from troqueur.application.dto.instruction_accounts import (
    CancelAccounts,
    ExchangeAccounts,
    InitializeAccounts,
    InstructionAccounts,
)
from troqueur.application.dto.instruction_args import InitializeArgs

__all__ = [
    "CancelAccounts",
    "ExchangeAccounts",
    "InitializeAccounts",
    "InitializeArgs",
    "InstructionAccounts",
]
