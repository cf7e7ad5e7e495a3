# src/veridata/ledger/__init__.py

"""
Ledger adapters for VeriData.
The registry pays rewards through any implementation of the Ledger interface.
"""

from .base import Ledger
from .memory import InMemoryLedger
from .http import HttpLedger, LedgerServiceError

__all__ = [
    "Ledger",
    "InMemoryLedger",
    "HttpLedger",
    "LedgerServiceError",
]
