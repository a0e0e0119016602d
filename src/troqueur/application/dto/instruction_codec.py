"""
Instruction wire format.

Data layout (little-endian):
    initialize: discriminator(8) | random_seed(u64) | deposit_amount(u64) |
                receive_amount(u64) | has_taker(u8) | taker(32)
    exchange:   discriminator(8)
    cancel:     discriminator(8)

Discriminators are the first 8 bytes of sha256("global:<name>").
"""

import hashlib
import struct
from typing import Iterable, Optional, Union

from pydantic import ValidationError
from solders.instruction import Instruction  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore

from troqueur.application.dto.instruction_accounts import (
    CancelAccounts,
    ExchangeAccounts,
    InitializeAccounts,
)
from troqueur.application.dto.instruction_args import InitializeArgs
from troqueur.domain.exceptions import InvalidInstructionError

INITIALIZE_ARGS_LAYOUT = struct.Struct("<QQQB32s")


def instruction_discriminator(name: str) -> bytes:
    """8-byte selector for an instruction name."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


INITIALIZE = instruction_discriminator("initialize")
EXCHANGE = instruction_discriminator("exchange")
CANCEL = instruction_discriminator("cancel")

ACCOUNT_SETS = {
    INITIALIZE: InitializeAccounts,
    EXCHANGE: ExchangeAccounts,
    CANCEL: CancelAccounts,
}

AnyAccounts = Union[InitializeAccounts, ExchangeAccounts, CancelAccounts]


def encode_initialize_args(args: InitializeArgs) -> bytes:
    taker = args.taker or Pubkey.default()
    return INITIALIZE + INITIALIZE_ARGS_LAYOUT.pack(
        args.random_seed,
        args.deposit_amount,
        args.receive_amount,
        1 if args.taker else 0,
        bytes(taker),
    )


def decode_initialize_args(payload: bytes) -> InitializeArgs:
    if len(payload) != INITIALIZE_ARGS_LAYOUT.size:
        raise InvalidInstructionError(
            f"Initialize data must be {INITIALIZE_ARGS_LAYOUT.size} bytes, "
            f"got {len(payload)}"
        )

    random_seed, deposit_amount, receive_amount, has_taker, taker = (
        INITIALIZE_ARGS_LAYOUT.unpack(payload)
    )
    if has_taker not in (0, 1):
        raise InvalidInstructionError(f"Invalid taker flag: {has_taker}")

    try:
        return InitializeArgs(
            random_seed=random_seed,
            deposit_amount=deposit_amount,
            receive_amount=receive_amount,
            taker=Pubkey.from_bytes(taker) if has_taker else None,
        )
    except ValidationError as e:
        raise InvalidInstructionError(f"Invalid initialize arguments: {e}")


def build_initialize(
    program_id: Pubkey, accounts: InitializeAccounts, args: InitializeArgs
) -> Instruction:
    """Build a signed-ready Initialize instruction."""
    return Instruction(
        program_id, encode_initialize_args(args), accounts.to_account_metas()
    )


def build_exchange(program_id: Pubkey, accounts: ExchangeAccounts) -> Instruction:
    """Build an Exchange instruction."""
    return Instruction(program_id, EXCHANGE, accounts.to_account_metas())


def build_cancel(program_id: Pubkey, accounts: CancelAccounts) -> Instruction:
    """Build a Cancel instruction."""
    return Instruction(program_id, CANCEL, accounts.to_account_metas())


def decode_instruction(
    instruction: Instruction,
) -> tuple[bytes, AnyAccounts, Optional[InitializeArgs]]:
    """
    Split an instruction into selector, account set and arguments.

    Returns:
        Tuple of (discriminator, accounts, args or None)

    Raises:
        InvalidInstructionError: If the selector is unknown or data is malformed
    """
    data = bytes(instruction.data)
    selector, payload = data[:8], data[8:]

    accounts_cls = ACCOUNT_SETS.get(selector)
    if accounts_cls is None:
        raise InvalidInstructionError(f"Unknown instruction selector: {selector.hex()}")

    accounts = accounts_cls.from_account_metas(list(instruction.accounts))

    if selector == INITIALIZE:
        return selector, accounts, decode_initialize_args(payload)

    if payload:
        raise InvalidInstructionError(
            f"Unexpected {len(payload)} trailing bytes in instruction data"
        )
    return selector, accounts, None


def signing_message(instruction: Instruction) -> bytes:
    """Canonical bytes signed by every signer of an instruction."""
    parts = [bytes(instruction.program_id)]
    for meta in instruction.accounts:
        flags = (1 if meta.is_signer else 0) | (2 if meta.is_writable else 0)
        parts.append(bytes(meta.pubkey) + bytes([flags]))
    parts.append(bytes(instruction.data))
    return b"".join(parts)


def sign_instruction(
    instruction: Instruction, keypairs: Iterable[Keypair]
) -> list[tuple[Pubkey, Signature]]:
    """Sign the canonical instruction bytes with each keypair."""
    message = signing_message(instruction)
    return [(keypair.pubkey(), keypair.sign_message(message)) for keypair in keypairs]
