# src/veridata/ledger/base.py

from abc import ABC, abstractmethod


class Ledger(ABC):
    """
    Fungible balance store used to pay verification rewards.

    Implementations must keep the sum of all balances equal to the total
    minted supply and apply each transfer atomically.
    """

    @abstractmethod
    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Move ``amount`` tokens from ``sender`` to ``recipient``.

        Returns:
            True on success, False if the sender's balance is insufficient.
        """

    @abstractmethod
    def mint(self, recipient: str, amount: int) -> None:
        """Create ``amount`` new tokens in ``recipient``'s balance."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Balance of ``account`` (0 for unknown accounts)."""
