"""
Troqueur - trustless two-party token swap escrow.

An initializer deposits asset A into a program-owned vault and names the
amount of asset B it wants back. A taker completes the swap atomically,
or the initializer cancels and is refunded.

Usage:
    from troqueur.di.container import get_container

    container = get_container()
    container.initialize()
    program = container.escrow_program
    addresses = program.derive_addresses(random_seed=42)
"""

__version__ = "0.1.0"
