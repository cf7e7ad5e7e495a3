# src/veridata/registry/verifiers.py

import logging
from threading import RLock
from typing import Dict, List, Optional

from veridata.audit.events import EventLog, EventType
from veridata.errors import AlreadyVerifierError, EmptyInputError, NotFoundError
from veridata.hashing import is_null_identity
from veridata.registry.admin import AdminGate
from veridata.registry.schema import VerifierRecord, validate_timestamp

logger = logging.getLogger(__name__)

REPUTATION_INCREMENT = 10


class VerifierRegistry:
    """
    Accounts authorized to verify data sources, with their reputation.

    Verifiers are only ever added, never removed or deactivated, and
    reputation only grows.
    """

    def __init__(self, gate: AdminGate, event_log: Optional[EventLog] = None):
        self._lock = RLock()
        self.gate = gate
        self.event_log = event_log if event_log is not None else EventLog()
        self._verifiers: Dict[str, VerifierRecord] = {}
        self._order: List[str] = []

    def add_verifier(
        self, account: str, requesting_principal: str, now: int
    ) -> VerifierRecord:
        """
        Register ``account`` as an active verifier.

        Args:
            account: Account to authorize
            requesting_principal: Caller; must be the administrator
            now: Unix timestamp of the call

        Returns:
            The new VerifierRecord.

        Raises:
            NotAuthorizedError: Caller is not the administrator
            EmptyInputError: Account is blank or the zero address
            AlreadyVerifierError: Account is already active
            InvalidTimestampError: ``now`` is not a non-negative integer
        """
        self.gate.authorize(requesting_principal, "verifier registration")
        if is_null_identity(account):
            raise EmptyInputError("Verifier account must not be empty", subject=account)
        validate_timestamp(now)
        account = account.strip()

        with self._lock:
            existing = self._verifiers.get(account)
            if existing is not None and existing.active:
                raise AlreadyVerifierError(
                    f"{account} is already a verifier", subject=account
                )
            record = VerifierRecord(account=account, active=True, added_at=now)
            self._verifiers[account] = record
            self._order.append(account)

        logger.info(f"Verifier added: {account}")
        self.event_log.emit(
            EventType.VERIFIER_ADDED,
            subject=account,
            timestamp=now,
            actor=requesting_principal,
        )
        return record

    def is_active(self, account) -> bool:
        if not isinstance(account, str):
            return False
        record = self._verifiers.get(account.strip())
        return record is not None and record.active

    def reputation_of(self, account) -> int:
        if not isinstance(account, str):
            return 0
        record = self._verifiers.get(account.strip())
        return record.reputation if record else 0

    def get_verifier(self, account: str) -> VerifierRecord:
        record = self._verifiers.get(account.strip()) if isinstance(account, str) else None
        if record is None:
            raise NotFoundError(f"{account!r} is not a registered verifier", subject=account)
        return record

    def list_verifiers(self) -> List[str]:
        with self._lock:
            return list(self._order)

    def bump_reputation(self, account: str, delta: int = REPUTATION_INCREMENT) -> int:
        """
        Increase a verifier's reputation after a successful verification.

        Only DataSourceRegistry.verify calls this.

        Returns:
            The new reputation.
        """
        if delta < 0:
            raise ValueError("Reputation never decreases")
        with self._lock:
            record = self.get_verifier(account)
            updated = record.model_copy(
                update={
                    "reputation": record.reputation + delta,
                    "verifications": record.verifications + 1,
                }
            )
            self._verifiers[record.account] = updated
        logger.debug(f"Reputation of {account} raised to {updated.reputation}")
        return updated.reputation

    def restore(self, records: List[VerifierRecord]) -> None:
        """Load verifier records in enumeration order into an empty registry."""
        with self._lock:
            if self._verifiers:
                raise RuntimeError("Cannot restore into a non-empty verifier registry")
            for record in records:
                self._verifiers[record.account] = record
                self._order.append(record.account)

    def __len__(self) -> int:
        with self._lock:
            return len(self._order)
