# src/veridata/ledger/memory.py

import logging
from threading import RLock
from typing import Dict, Optional

from veridata.ledger.base import Ledger

logger = logging.getLogger(__name__)


class InMemoryLedger(Ledger):
    """Thread-safe in-process ledger with conserved total supply."""

    def __init__(self, balances: Optional[Dict[str, int]] = None):
        self._lock = RLock()
        self._balances: Dict[str, int] = {}
        self._total_supply = 0
        for account, amount in (balances or {}).items():
            self.mint(account, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError("Transfer amount must be non-negative")
        with self._lock:
            available = self._balances.get(sender, 0)
            if available < amount:
                logger.info(
                    f"Transfer of {amount} from {sender} refused: balance {available}"
                )
                return False
            self._balances[sender] = available - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
        logger.debug(f"Transferred {amount} from {sender} to {recipient}")
        return True

    def mint(self, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Mint amount must be non-negative")
        with self._lock:
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
            self._total_supply += amount
        logger.debug(f"Minted {amount} to {recipient}")

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    @property
    def total_supply(self) -> int:
        with self._lock:
            return self._total_supply

    def balances(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._balances)
