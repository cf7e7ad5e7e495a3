# src/veridata/audit/events.py

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    ADDED = "added"
    VERIFIED = "verified"
    ACCESSED = "accessed"
    VERIFIER_ADDED = "verifier_added"
    REWARDED = "rewarded"
    FEEDBACK_PROVIDED = "feedback_provided"


class RegistryEvent(BaseModel):
    sequence: int = Field(..., ge=1, description="Position in the event stream")
    kind: EventType = Field(..., description="Event category")
    timestamp: int = Field(..., ge=0, description="Unix timestamp supplied by the caller")
    subject: str = Field(..., description="Content hash or verifier account")
    actor: Optional[str] = Field(None, description="Account that triggered the event")
    data: Dict[str, Any] = Field(default_factory=dict, description="Outcome values")

    class Config:
        frozen = True


EventListener = Callable[[RegistryEvent], None]


class EventLog:
    """
    Append-only stream of registry events.

    Events are never rewritten or removed. External observers register a
    listener with ``subscribe`` and are called synchronously after each
    append; a failing listener is logged and does not affect the stream.
    """

    def __init__(self, events: Optional[List[RegistryEvent]] = None):
        self._lock = RLock()
        self._events: List[RegistryEvent] = list(events or [])
        self._listeners: List[EventListener] = []

    def emit(
        self,
        kind: EventType,
        subject: str,
        timestamp: int,
        actor: Optional[str] = None,
        **data: Any,
    ) -> RegistryEvent:
        """
        Append a new event and notify listeners.

        Args:
            kind: Event category
            subject: Content hash or account the event is about
            timestamp: Caller-supplied Unix time
            actor: Account responsible for the event
            **data: Outcome values carried by the event

        Returns:
            The appended RegistryEvent.
        """
        with self._lock:
            event = RegistryEvent(
                sequence=len(self._events) + 1,
                kind=kind,
                timestamp=timestamp,
                subject=subject,
                actor=actor,
                data=data,
            )
            self._events.append(event)
            listeners = list(self._listeners)

        logger.debug(f"Event #{event.sequence} {kind.value} subject={subject}")
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Event listener {listener!r} failed: {e}")
        return event

    def subscribe(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def events(
        self,
        kind: Optional[EventType] = None,
        subject: Optional[str] = None,
    ) -> List[RegistryEvent]:
        """Return a copy of the stream, optionally filtered by kind and subject."""
        with self._lock:
            snapshot = list(self._events)
        return [
            ev
            for ev in snapshot
            if (kind is None or ev.kind == kind)
            and (subject is None or ev.subject == subject)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def __iter__(self) -> Iterator[RegistryEvent]:
        return iter(self.events())

    def export_json(self, output_path: Union[str, Path]) -> str:
        """
        Write the event stream to a standalone JSON audit log.

        Args:
            output_path: Path to save the log

        Returns:
            Absolute path to the log file.
        """
        output_path = Path(output_path).resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)

        events = self.events()
        manifest = {
            "audit_header": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool": f"VeriData v{self._get_tool_version()}",
            },
            "event_summary": {
                "total_events": len(events),
                "kinds": sorted(set(ev.kind.value for ev in events)),
            },
            "events": [ev.model_dump(mode="json") for ev in events],
        }

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2)

        logger.info(f"Audit log saved to: {output_path}")
        return str(output_path)

    def _get_tool_version(self) -> str:
        from veridata import __version__

        return __version__
