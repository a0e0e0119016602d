"""
Unit tests for ProgramAddress and InvocationContext value objects.

Usage:
    pytest tests/unit/domain/test_value_objects.py
"""

from dataclasses import FrozenInstanceError

import pytest
from solders.keypair import Keypair  # type: ignore

from troqueur.domain.value_objects import InvocationContext, ProgramAddress


class TestProgramAddress:
    """Unit tests for ProgramAddress value object."""

    def test_signer_seeds_append_bump(self):
        """Test signer seeds are the seeds followed by the bump byte."""
        address = ProgramAddress(
            address=Keypair().pubkey(), bump=254, seeds=(b"vault", b"x")
        )

        assert address.signer_seeds() == [b"vault", b"x", b"\xfe"]

    def test_invalid_bump(self):
        """Test bump must fit in one byte."""
        with pytest.raises(ValueError):
            ProgramAddress(address=Keypair().pubkey(), bump=-1, seeds=())

    def test_immutable(self):
        """Test value object cannot be mutated."""
        address = ProgramAddress(address=Keypair().pubkey(), bump=1, seeds=())

        with pytest.raises(FrozenInstanceError):
            address.bump = 2

    def test_str_and_truncated(self):
        """Test display helpers."""
        key = Keypair().pubkey()
        address = ProgramAddress(address=key, bump=1, seeds=())

        assert str(address) == str(key)
        assert address.truncated() == f"{str(key)[:6]}...{str(key)[-4:]}"


class TestInvocationContext:
    """Unit tests for InvocationContext value object."""

    def test_has_signed(self):
        """Test only listed keys count as signers."""
        signer = Keypair().pubkey()
        ctx = InvocationContext(
            program_id=Keypair().pubkey(), signers=frozenset({signer})
        )

        assert ctx.has_signed(signer)
        assert not ctx.has_signed(Keypair().pubkey())

    def test_default_has_no_signers(self):
        """Test default context has no signers."""
        ctx = InvocationContext(program_id=Keypair().pubkey())

        assert ctx.signers == frozenset()
