# src/veridata/registry/datasources.py

import logging
from threading import RLock
from typing import Dict, Iterator, List, Optional

from veridata.audit.events import EventLog, EventType
from veridata.errors import (
    AlreadyExistsError,
    AlreadyVerifiedError,
    EmptyHashError,
    EmptyInputError,
    InsufficientFundsError,
    MalformedHashError,
    NotAuthorizedError,
    NotFoundError,
)
from veridata.hashing import is_null_identity
from veridata.ledger.base import Ledger
from veridata.registry.schema import DataSourceRecord, validate_timestamp
from veridata.registry.verifiers import REPUTATION_INCREMENT, VerifierRegistry
from veridata.scoring.ratings import RatingAggregator, validate_rating
from veridata.scoring.rewards import RewardCalculator

logger = logging.getLogger(__name__)


class DataSourceRegistry:
    """
    Append-only registry of data sources keyed by content hash.

    A record is created once by ``add`` and moves from unverified to
    verified exactly once. Records are frozen models replaced under the
    registry lock, so readers never observe a half-applied update.
    """

    def __init__(
        self,
        verifiers: VerifierRegistry,
        ledger: Ledger,
        treasury: str,
        reward_calculator: Optional[RewardCalculator] = None,
        rating_aggregator: Optional[RatingAggregator] = None,
        event_log: Optional[EventLog] = None,
        reputation_increment: int = REPUTATION_INCREMENT,
    ):
        """
        Initialize the registry.

        Args:
            verifiers: Registry used to authorize verification calls
            ledger: Balance store rewards are paid through
            treasury: Account rewards are paid from
            reward_calculator: Reputation to reward mapping
            rating_aggregator: Running-average updater for feedback
            event_log: Stream receiving registry events
            reputation_increment: Reputation added per successful verification
        """
        if is_null_identity(treasury):
            raise EmptyInputError("Treasury account must not be empty")
        self._lock = RLock()
        self.verifiers = verifiers
        self.ledger = ledger
        self.treasury = treasury
        self.reward_calculator = reward_calculator or RewardCalculator()
        self.rating_aggregator = rating_aggregator or RatingAggregator()
        self.event_log = event_log if event_log is not None else verifiers.event_log
        self.reputation_increment = reputation_increment
        self._records: Dict[str, DataSourceRecord] = {}
        self._order: List[str] = []

    def add(
        self, name: str, content_hash: str, submitting_account: str, now: int
    ) -> DataSourceRecord:
        """
        Register a new data source owned by the submitting account.

        Args:
            name: Display name
            content_hash: Content hash identifying the dataset
            submitting_account: Caller; becomes the permanent owner
            now: Unix timestamp of the submission

        Returns:
            The new DataSourceRecord.

        Raises:
            EmptyHashError: Content hash is blank
            MalformedHashError: Content hash has surrounding whitespace
            EmptyInputError: Submitting account is blank
            InvalidTimestampError: ``now`` is not a non-negative integer
            AlreadyExistsError: Content hash is already registered
        """
        if not isinstance(content_hash, str) or not content_hash.strip():
            raise EmptyHashError("Content hash must not be empty", subject=content_hash)
        if content_hash != content_hash.strip():
            raise MalformedHashError(
                f"Content hash {content_hash!r} has surrounding whitespace",
                subject=content_hash,
            )
        if is_null_identity(submitting_account):
            raise EmptyInputError(
                "Submitting account must not be empty", subject=submitting_account
            )
        validate_timestamp(now)

        with self._lock:
            if content_hash in self._records:
                logger.info(f"Rejected duplicate data source {content_hash}")
                raise AlreadyExistsError(
                    f"Data source {content_hash} already exists", subject=content_hash
                )
            record = DataSourceRecord(
                content_hash=content_hash,
                name=name or "",
                owner=submitting_account,
                created_at=now,
            )
            self._records[content_hash] = record
            self._order.append(content_hash)

        logger.info(f"Data source added: {content_hash} ({record.name}) by {record.owner}")
        self.event_log.emit(
            EventType.ADDED,
            subject=content_hash,
            timestamp=now,
            actor=record.owner,
            name=record.name,
            owner=record.owner,
        )
        return record

    def verify(self, content_hash: str, verifying_account: str, now: int) -> int:
        """
        Verify a data source and pay its owner.

        The lookup, reward transfer, record update and reputation bump run
        as one unit under the registry lock. If the ledger refuses the
        transfer nothing is changed.

        Args:
            content_hash: Data source to verify
            verifying_account: Caller; must be an active verifier
            now: Unix timestamp of the verification

        Returns:
            Reward paid to the owner.

        Raises:
            NotFoundError: Unknown content hash
            NotAuthorizedError: Caller is not an active verifier
            AlreadyVerifiedError: Data source was verified before
            InsufficientFundsError: Treasury cannot cover the reward
            InvalidTimestampError: ``now`` is not a non-negative integer
        """
        validate_timestamp(now)
        with self._lock:
            record = self._require(content_hash)
            if not self.verifiers.is_active(verifying_account):
                logger.warning(
                    f"Verification of {record.content_hash} refused for {verifying_account!r}"
                )
                raise NotAuthorizedError(
                    f"{verifying_account!r} is not an active verifier",
                    subject=verifying_account,
                )
            if record.verified:
                raise AlreadyVerifiedError(
                    f"Data source {record.content_hash} is already verified",
                    subject=record.content_hash,
                )

            reputation = self.verifiers.reputation_of(verifying_account)
            reward = self.reward_calculator.compute(reputation)

            if not self.ledger.transfer(self.treasury, record.owner, reward):
                available = self.ledger.balance_of(self.treasury)
                logger.error(
                    f"Treasury {self.treasury} cannot pay reward {reward} "
                    f"for {record.content_hash} (balance {available})"
                )
                raise InsufficientFundsError(
                    f"Treasury balance {available} is below reward {reward}",
                    subject=self.treasury,
                    required=reward,
                    available=available,
                )

            self._records[record.content_hash] = record.model_copy(
                update={
                    "verified": True,
                    "verified_by": verifying_account,
                    "verified_at": now,
                    "reward": reward,
                }
            )
            new_reputation = self.verifiers.bump_reputation(
                verifying_account, self.reputation_increment
            )

        logger.info(
            f"Data source {record.content_hash} verified by {verifying_account}, "
            f"reward {reward}, reputation now {new_reputation}"
        )
        self.event_log.emit(
            EventType.VERIFIED,
            subject=record.content_hash,
            timestamp=now,
            actor=verifying_account,
            verifier=verifying_account,
        )
        self.event_log.emit(
            EventType.REWARDED,
            subject=record.content_hash,
            timestamp=now,
            actor=verifying_account,
            recipient=record.owner,
            amount=reward,
        )
        return reward

    def get(self, content_hash: str) -> DataSourceRecord:
        return self._require(content_hash)

    def exists(self, content_hash: str) -> bool:
        return isinstance(content_hash, str) and content_hash in self._records

    def list_all_hashes(self) -> List[str]:
        with self._lock:
            return list(self._order)

    def iter_records(self) -> Iterator[DataSourceRecord]:
        with self._lock:
            records = [self._records[h] for h in self._order]
        return iter(records)

    def count(self) -> int:
        with self._lock:
            return len(self._order)

    def record_access(self, content_hash: str, accessor: str, now: int) -> None:
        """Log that ``accessor`` accessed a data source. No state changes."""
        validate_timestamp(now)
        record = self._require(content_hash)
        logger.debug(f"Access to {record.content_hash} by {accessor}")
        self.event_log.emit(
            EventType.ACCESSED,
            subject=record.content_hash,
            timestamp=now,
            actor=accessor,
            accessor=accessor,
        )

    def submit_feedback(
        self,
        content_hash: str,
        rating: int,
        now: int,
        submitter: Optional[str] = None,
    ) -> DataSourceRecord:
        """
        Fold a 1-5 rating into a data source's running average.

        Returns:
            The updated DataSourceRecord.

        Raises:
            InvalidRatingError: Rating is not an integer in 1..5
            NotFoundError: Unknown content hash
            InvalidTimestampError: ``now`` is not a non-negative integer
        """
        rating = validate_rating(rating)
        validate_timestamp(now)
        with self._lock:
            record = self._require(content_hash)
            updated = self.rating_aggregator.apply(record, rating)
            self._records[record.content_hash] = updated

        logger.info(
            f"Feedback {rating} on {updated.content_hash}: "
            f"average {updated.average_rating} over {updated.rating_count}"
        )
        self.event_log.emit(
            EventType.FEEDBACK_PROVIDED,
            subject=updated.content_hash,
            timestamp=now,
            actor=submitter,
            rating=rating,
            average_rating=updated.average_rating,
            rating_count=updated.rating_count,
        )
        return updated

    def restore(self, records: List[DataSourceRecord]) -> None:
        """Load records in insertion order into an empty registry."""
        with self._lock:
            if self._records:
                raise RuntimeError("Cannot restore into a non-empty registry")
            for record in records:
                if record.content_hash in self._records:
                    raise AlreadyExistsError(
                        f"Duplicate data source {record.content_hash} in snapshot",
                        subject=record.content_hash,
                    )
                self._records[record.content_hash] = record
                self._order.append(record.content_hash)

    def _require(self, content_hash: str) -> DataSourceRecord:
        record = self._records.get(content_hash) if isinstance(content_hash, str) else None
        if record is None:
            raise NotFoundError(f"Data source {content_hash!r} not found", subject=content_hash)
        return record
