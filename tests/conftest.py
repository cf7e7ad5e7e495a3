# tests/conftest.py

import sys
from pathlib import Path

import pytest

# Add src and project root (for scripts) to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))

from veridata.audit.events import EventLog
from veridata.ledger.memory import InMemoryLedger
from veridata.registry.admin import AdminGate
from veridata.registry.datasources import DataSourceRegistry
from veridata.registry.verifiers import VerifierRegistry

ADMIN = "admin"
TREASURY = "treasury"


class FakeClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def ledger():
    return InMemoryLedger({TREASURY: 10_000})


@pytest.fixture
def verifiers(event_log):
    return VerifierRegistry(AdminGate(ADMIN), event_log)


@pytest.fixture
def registry(verifiers, ledger, event_log):
    return DataSourceRegistry(
        verifiers=verifiers,
        ledger=ledger,
        treasury=TREASURY,
        event_log=event_log,
    )
