# tests/integration/test_end_to_end.py

import json
from unittest.mock import MagicMock

import pytest

from veridata.audit.events import EventType
from veridata.core.config import AdminConfig, LedgerConfig, VeriDataConfig
from veridata.core.service import VeriDataService, build_ledger
from veridata.errors import InsufficientFundsError, NotAuthorizedError
from veridata.ledger.http import HttpLedger
from veridata.ledger.memory import InMemoryLedger

from conftest import FakeClock


class TestRegistryService:
    """Integration tests for the caller-facing service."""

    @pytest.fixture
    def config(self):
        return VeriDataConfig(
            admin=AdminConfig(principal="admin"),
            ledger=LedgerConfig(initial_treasury_supply=1_000),
        )

    @pytest.fixture
    def service(self, config):
        return VeriDataService.from_config(config, clock=FakeClock())

    def test_full_scenario(self, service):
        """Admin registers V, U adds h1, V verifies, a third party rates it."""
        service.add_verifier("admin", "V")
        service.add("U", "sensor-log", "h1")

        reward = service.verify("V", "h1")

        assert reward == 100
        assert service.balance_of("U") == 100
        assert service.balance_of("admin") == 900
        assert service.reputation_of("V") == 10

        record = service.submit_feedback("W", "h1", 5)
        assert record.average_rating == 5
        assert record.rating_count == 1

        kinds = [e.kind for e in service.event_log.events()]
        assert kinds == [
            EventType.VERIFIER_ADDED,
            EventType.ADDED,
            EventType.VERIFIED,
            EventType.REWARDED,
            EventType.FEEDBACK_PROVIDED,
        ]

    def test_timestamps_come_from_clock(self, config):
        clock = FakeClock(start=100)
        service = VeriDataService.from_config(config, clock=clock)
        record = service.add("U", "sensor-log", "h1")
        assert record.created_at == 101

    def test_treasury_exhaustion(self, config):
        config = config.model_copy(
            update={"ledger": LedgerConfig(initial_treasury_supply=150)}
        )
        service = VeriDataService.from_config(config, clock=FakeClock())
        service.add_verifier("admin", "V")
        service.add("U", "a", "h1")
        service.add("U", "b", "h2")

        service.verify("V", "h1")
        with pytest.raises(InsufficientFundsError):
            service.verify("V", "h2")

        assert service.get("h2").verified is False
        assert service.reputation_of("V") == 10

        service.mint("admin", "admin", 1_000)
        assert service.verify("V", "h2") == 110
        assert service.balance_of("U") == 210

    def test_only_admin_mints(self, service):
        with pytest.raises(NotAuthorizedError):
            service.mint("U", "U", 1_000)
        assert service.balance_of("U") == 0

    def test_record_access(self, service):
        service.add("U", "sensor-log", "h1")
        service.record_access("reader", "h1")
        events = service.event_log.events(kind=EventType.ACCESSED)
        assert events[0].subject == "h1"
        assert events[0].actor == "reader"

    def test_snapshot_roundtrip(self, service, config, tmp_path):
        service.add_verifier("admin", "V")
        service.add("U", "first", "h1")
        service.add("U", "second", "h2")
        service.verify("V", "h2")
        service.submit_feedback("W", "h1", 4)
        service.submit_feedback("W", "h1", 2)

        path = service.save_state(tmp_path / "state.json")
        restored = VeriDataService.load_state(config, path, clock=FakeClock())

        assert restored.list_all_hashes() == ["h1", "h2"]
        assert restored.get("h1") == service.get("h1")
        assert restored.get("h2").reward == 100
        assert restored.reputation_of("V") == 10
        assert restored.balance_of("U") == 100
        assert restored.balance_of("admin") == 900
        assert len(restored.event_log) == len(service.event_log)

        # Restored state keeps enforcing the same invariants
        restored.add("U", "third", "h3")
        assert restored.verify("V", "h3") == 110
        assert restored.event_log.events()[-1].sequence == len(restored.event_log)

    def test_restore_keeps_snapshot_treasury(self, service, config, tmp_path, caplog):
        """Rewards keep coming from the account the snapshot was funded under."""
        service.add_verifier("admin", "V")
        service.add("U", "sensor-log", "h1")
        path = service.save_state(tmp_path / "state.json")

        moved = config.model_copy(
            update={"admin": AdminConfig(principal="admin", treasury="vault")}
        )
        with caplog.at_level("WARNING"):
            restored = VeriDataService.load_state(moved, path, clock=FakeClock())

        assert "Snapshot treasury admin differs" in caplog.text
        assert restored.datasources.treasury == "admin"
        assert restored.verify("V", "h1") == 100
        assert restored.balance_of("admin") == 900
        assert restored.balance_of("vault") == 0

    def test_build_http_ledger(self):
        config = VeriDataConfig(
            ledger={"backend": "http", "base_url": "http://ledger.test", "api_key": "k"}
        )
        ledger = build_ledger(config)
        assert isinstance(ledger, HttpLedger)
        assert ledger.base_url == "http://ledger.test"

    def test_injected_ledger(self, config):
        ledger = MagicMock()
        ledger.transfer.return_value = True
        service = VeriDataService.from_config(config, ledger=ledger, clock=FakeClock())
        service.add_verifier("admin", "V")
        service.add("U", "sensor-log", "h1")

        service.verify("V", "h1")

        ledger.transfer.assert_called_once_with("admin", "U", 100)
        ledger.mint.assert_not_called()


class TestCommandLine:
    """Integration tests for the veridata CLI."""

    @pytest.fixture
    def cli(self, tmp_path, monkeypatch):
        from scripts import veridata_cli

        for var in ("VERIDATA_ADMIN", "VERIDATA_TREASURY", "VERIDATA_INITIAL_SUPPLY"):
            monkeypatch.delenv(var, raising=False)
        state = tmp_path / "state.json"
        config = tmp_path / "config.yaml"
        config.write_text("admin:\n  principal: admin\n")

        def run(*args):
            veridata_cli.main(["--config", str(config), "--state", str(state), *args])

        run("init")
        return run

    def test_cli_workflow(self, cli, tmp_path, capsys):
        dataset = tmp_path / "data.csv"
        dataset.write_text("t,value\n1,20.5\n")

        cli("--as", "admin", "add-verifier", "alice")
        cli("--as", "bob", "add", "--name", "sensor-log", "--file", str(dataset))
        content_hash = capsys.readouterr().out.strip().splitlines()[-1]
        assert len(content_hash) == 64

        cli("--as", "alice", "verify", content_hash)
        cli("--as", "carol", "feedback", content_hash, "4")
        capsys.readouterr()

        cli("balance", "bob")
        assert capsys.readouterr().out.strip() == "100"

        cli("get", content_hash)
        record = json.loads(capsys.readouterr().out)
        assert record["verified"] is True
        assert record["average_rating"] == 4

        cli("list")
        assert capsys.readouterr().out.strip() == content_hash

    def test_cli_error_exits_nonzero(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli("--as", "mallory", "add-verifier", "alice")
        assert exc_info.value.code == 1

    def test_cli_missing_file_exits_nonzero(self, cli, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli("--as", "bob", "add", "--file", str(tmp_path / "missing.csv"))
        assert exc_info.value.code == 1

    def test_cli_negative_mint_exits_nonzero(self, cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli("--as", "admin", "mint", "bob", "-5")
        assert exc_info.value.code == 1

        cli("balance", "bob")
        assert capsys.readouterr().out.strip() == "0"

    def test_cli_requires_caller(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli("add", "--hash", "h1")
        assert exc_info.value.code == 2

    def test_cli_export_events(self, cli, tmp_path, capsys):
        cli("--as", "bob", "add", "--hash", "h1")
        export = tmp_path / "audit.json"
        cli("events", "--export", str(export))

        manifest = json.loads(export.read_text())
        assert manifest["event_summary"]["total_events"] == 1

    def test_cli_export_default_path(self, cli, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cli("--as", "bob", "add", "--hash", "h1")
        cli("events", "--export")

        manifest = json.loads((tmp_path / "reports" / "audit_log.json").read_text())
        assert manifest["events"][0]["subject"] == "h1"


if __name__ == "__main__":
    pytest.main([__file__])
