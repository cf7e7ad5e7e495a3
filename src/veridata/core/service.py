# src/veridata/core/service.py

import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from veridata.audit.events import EventLog, RegistryEvent
from veridata.core.config import VeriDataConfig
from veridata.ledger import HttpLedger, InMemoryLedger, Ledger
from veridata.registry.admin import AdminGate
from veridata.registry.datasources import DataSourceRegistry
from veridata.registry.schema import DataSourceRecord, VerifierRecord
from veridata.registry.verifiers import VerifierRegistry
from veridata.scoring.ratings import RatingAggregator
from veridata.scoring.rewards import RewardCalculator

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())


class RegistrySnapshot(BaseModel):
    admin: str
    treasury: str
    records: List[DataSourceRecord] = Field(default_factory=list)
    verifiers: List[VerifierRecord] = Field(default_factory=list)
    balances: Dict[str, int] = Field(default_factory=dict)
    events: List[RegistryEvent] = Field(default_factory=list)


class VeriDataService:
    """
    Caller-facing entry point for the registry.

    Wires the admin gate, registries, reward calculator and ledger from
    configuration, and passes the caller identity and the current time
    explicitly into every registry call.
    """

    def __init__(
        self,
        config: VeriDataConfig,
        ledger: Ledger,
        clock: Optional[Clock] = None,
        event_log: Optional[EventLog] = None,
        treasury: Optional[str] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Validated VeriData configuration
            ledger: Balance store rewards are paid through
            clock: Returns the current Unix time (default: system time)
            event_log: Event stream to append to (default: a new one)
            treasury: Account rewards are paid from (default: from config)
        """
        self.config = config
        self.ledger = ledger
        self.clock = clock or system_clock
        self.event_log = event_log if event_log is not None else EventLog()
        self.gate = AdminGate(config.admin.principal)
        self.verifiers = VerifierRegistry(self.gate, self.event_log)
        self.reward_calculator = RewardCalculator(
            base_reward=config.rewards.base_reward,
            per_tier_bonus=config.rewards.per_tier_bonus,
            tier_size=config.rewards.tier_size,
        )
        self.datasources = DataSourceRegistry(
            verifiers=self.verifiers,
            ledger=ledger,
            treasury=treasury or config.admin.treasury_account,
            reward_calculator=self.reward_calculator,
            rating_aggregator=RatingAggregator(),
            event_log=self.event_log,
            reputation_increment=config.rewards.reputation_increment,
        )

    @classmethod
    def from_config(
        cls,
        config: VeriDataConfig,
        ledger: Optional[Ledger] = None,
        clock: Optional[Clock] = None,
    ) -> "VeriDataService":
        """Build a service, creating the configured ledger if none is given."""
        if ledger is None:
            ledger = build_ledger(config)
        return cls(config, ledger, clock=clock)

    # --- data sources ---

    def add(self, caller: str, name: str, content_hash: str) -> DataSourceRecord:
        return self.datasources.add(name, content_hash, caller, self.clock())

    def verify(self, caller: str, content_hash: str) -> int:
        return self.datasources.verify(content_hash, caller, self.clock())

    def get(self, content_hash: str) -> DataSourceRecord:
        return self.datasources.get(content_hash)

    def record_access(self, caller: str, content_hash: str) -> None:
        self.datasources.record_access(content_hash, caller, self.clock())

    def list_all_hashes(self) -> List[str]:
        return self.datasources.list_all_hashes()

    def submit_feedback(
        self, caller: str, content_hash: str, rating: int
    ) -> DataSourceRecord:
        return self.datasources.submit_feedback(
            content_hash, rating, self.clock(), submitter=caller
        )

    # --- verifiers ---

    def add_verifier(self, caller: str, account: str) -> VerifierRecord:
        return self.verifiers.add_verifier(account, caller, self.clock())

    def reputation_of(self, account: str) -> int:
        return self.verifiers.reputation_of(account)

    # --- ledger ---

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def mint(self, caller: str, account: str, amount: int) -> None:
        """Mint new tokens. Only the administrator may mint."""
        self.gate.authorize(caller, "mint")
        self.ledger.mint(account, amount)
        logger.info(f"Minted {amount} to {account}")

    # --- state ---

    def snapshot(self) -> RegistrySnapshot:
        """
        Capture registry state, indices and events for later restore.

        Balances are only included for an InMemoryLedger; a remote ledger
        keeps its own state.
        """
        balances = {}
        if isinstance(self.ledger, InMemoryLedger):
            balances = self.ledger.balances()
        return RegistrySnapshot(
            admin=self.gate.admin,
            treasury=self.datasources.treasury,
            records=list(self.datasources.iter_records()),
            verifiers=[
                self.verifiers.get_verifier(a) for a in self.verifiers.list_verifiers()
            ],
            balances=balances,
            events=self.event_log.events(),
        )

    @classmethod
    def restore(
        cls,
        config: VeriDataConfig,
        snapshot: RegistrySnapshot,
        ledger: Optional[Ledger] = None,
        clock: Optional[Clock] = None,
    ) -> "VeriDataService":
        """Rebuild a service from a snapshot taken with ``snapshot``."""
        if snapshot.admin != config.admin.principal:
            logger.warning(
                f"Snapshot admin {snapshot.admin} differs from configured "
                f"admin {config.admin.principal}; using configuration"
            )
        if snapshot.treasury != config.admin.treasury_account:
            logger.warning(
                f"Snapshot treasury {snapshot.treasury} differs from configured "
                f"treasury {config.admin.treasury_account}; keeping the snapshot treasury"
            )
        if ledger is None:
            if config.ledger.backend == "memory":
                ledger = InMemoryLedger(snapshot.balances)
            else:
                ledger = build_ledger(config)
        service = cls(
            config,
            ledger,
            clock=clock,
            event_log=EventLog(snapshot.events),
            treasury=snapshot.treasury,
        )
        service.verifiers.restore(snapshot.verifiers)
        service.datasources.restore(snapshot.records)
        logger.info(
            f"Restored {len(snapshot.records)} data sources and "
            f"{len(snapshot.verifiers)} verifiers"
        )
        return service

    def save_state(self, path: Union[str, Path]) -> str:
        path = Path(path).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.snapshot().model_dump_json(indent=2))
        logger.debug(f"State saved to {path}")
        return str(path)

    @classmethod
    def load_state(
        cls,
        config: VeriDataConfig,
        path: Union[str, Path],
        clock: Optional[Clock] = None,
    ) -> "VeriDataService":
        with open(path, "r", encoding="utf-8") as f:
            snapshot = RegistrySnapshot.model_validate(json.load(f))
        return cls.restore(config, snapshot, clock=clock)


def build_ledger(config: VeriDataConfig) -> Ledger:
    """Create the ledger named by ``config.ledger.backend``."""
    if config.ledger.backend == "http":
        logger.info(f"Using remote ledger at {config.ledger.base_url}")
        return HttpLedger(
            base_url=config.ledger.base_url,
            api_key=config.ledger.api_key.get_secret_value(),
            timeout=config.ledger.timeout,
        )
    ledger = InMemoryLedger()
    if config.ledger.initial_treasury_supply:
        ledger.mint(config.admin.treasury_account, config.ledger.initial_treasury_supply)
    return ledger
