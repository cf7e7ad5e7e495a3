# tests/unit/test_audit.py

import json

import pytest

from veridata.audit.events import EventLog, EventType


class TestEventLog:
    """Test the append-only event stream."""

    def test_emit_assigns_sequence(self):
        log = EventLog()
        first = log.emit(EventType.ADDED, subject="h1", timestamp=10, actor="user")
        second = log.emit(EventType.ACCESSED, subject="h1", timestamp=11)

        assert first.sequence == 1
        assert second.sequence == 2
        assert len(log) == 2

    def test_filter_by_kind_and_subject(self):
        log = EventLog()
        log.emit(EventType.ADDED, subject="h1", timestamp=1)
        log.emit(EventType.ADDED, subject="h2", timestamp=2)
        log.emit(EventType.ACCESSED, subject="h1", timestamp=3)

        assert [e.subject for e in log.events(kind=EventType.ADDED)] == ["h1", "h2"]
        assert [e.kind for e in log.events(subject="h1")] == [
            EventType.ADDED,
            EventType.ACCESSED,
        ]

    def test_events_returns_copy(self):
        log = EventLog()
        log.emit(EventType.ADDED, subject="h1", timestamp=1)
        log.events().clear()
        assert len(log) == 1

    def test_listeners_notified(self):
        log = EventLog()
        received = []
        log.subscribe(received.append)
        event = log.emit(EventType.REWARDED, subject="h1", timestamp=1, amount=100)

        assert received == [event]
        assert event.data == {"amount": 100}

    def test_failing_listener_does_not_break_stream(self):
        log = EventLog()

        def broken(event):
            raise RuntimeError("observer down")

        log.subscribe(broken)
        log.emit(EventType.ADDED, subject="h1", timestamp=1)
        assert len(log) == 1

    def test_unsubscribe(self):
        log = EventLog()
        received = []
        log.subscribe(received.append)
        log.unsubscribe(received.append)
        log.emit(EventType.ADDED, subject="h1", timestamp=1)
        assert received == []

    def test_export_json(self, tmp_path):
        log = EventLog()
        log.emit(EventType.ADDED, subject="h1", timestamp=1, name="ds", owner="u")
        log.emit(EventType.VERIFIED, subject="h1", timestamp=2, actor="v")

        path = log.export_json(tmp_path / "audit" / "log.json")
        with open(path, encoding="utf-8") as f:
            manifest = json.load(f)

        assert manifest["event_summary"]["total_events"] == 2
        assert manifest["event_summary"]["kinds"] == ["added", "verified"]
        assert manifest["events"][0]["data"] == {"name": "ds", "owner": "u"}
        assert manifest["events"][1]["kind"] == "verified"
        assert manifest["audit_header"]["tool"].startswith("VeriData v")


if __name__ == "__main__":
    pytest.main([__file__])
