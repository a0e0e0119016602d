"""
Rent calculator for account storage.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rent:
    """
    Rent-exemption parameters.

    An account is allocated with the rent-exempt minimum for its size and
    refunded that balance when closed.
    """

    storage_overhead: int = 128
    lamports_per_byte_year: int = 3480
    exemption_threshold: float = 2.0

    def minimum_balance(self, data_len: int) -> int:
        """
        Lamports needed to keep an account of data_len bytes alive.

        Args:
            data_len: Account data size in bytes

        Returns:
            Rent-exempt minimum balance
        """
        if data_len < 0:
            raise ValueError(f"Data length cannot be negative: {data_len}")
        bytes_total = self.storage_overhead + data_len
        return int(bytes_total * self.lamports_per_byte_year * self.exemption_threshold)
