"""
Process trace for the sequence-diagram generator.

Constructs documented with an ``@process`` comment report, in execution
order, that they ran. Turning the stream into a diagram is the consumer's job.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class EventKind(Enum):
    """What happened to the documented construct."""
    CALL = "call"           # process-tagged function invoked
    CREATE = "create"       # instance of a process-tagged coroutine created
    RESUME = "resume"       # instance of a process-tagged coroutine resumed
    DECLARE = "declare"     # process-tagged variable declaration executed
    NOTE = "note"           # @process comment statement executed


@dataclass
class ProcessEvent:
    """One entry of the trace."""
    sequence: int           # 0-based relative order within the run
    kind: EventKind
    name: str               # Declaration or variable name
    note: str               # Text after the @process marker
    owner: str              # Body the construct ran in (function, coroutine, "main")
    instance: Optional[str] = None  # Task name, for create and resume events

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "kind": self.kind.value,
            "name": self.name,
            "note": self.note,
            "owner": self.owner,
            "instance": self.instance,
        }


@dataclass
class ProcessTrace:
    """
    Ordered process events of one run.

    Serializes the same way run metadata does elsewhere in the tooling:
    a dict with a header and the event list.
    """
    program_name: str = ""
    events: List[ProcessEvent] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def record(self, kind: EventKind, name: str, note: str, owner: str,
               instance: Optional[str] = None) -> ProcessEvent:
        """Append an event with the next sequence number."""
        event = ProcessEvent(len(self.events), kind, name, note, owner, instance)
        self.events.append(event)
        return event

    def names(self) -> List[str]:
        """Event names in execution order."""
        return [e.name for e in self.events]

    def __iter__(self) -> Iterator[ProcessEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run": {
                "program": self.program_name,
                "timestamp": self.timestamp,
            },
            "events": [e.to_dict() for e in self.events],
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessTrace":
        """Create from dictionary."""
        run = data.get("run", {})
        events = [
            ProcessEvent(
                sequence=e["sequence"],
                kind=EventKind(e["kind"]),
                name=e["name"],
                note=e.get("note", ""),
                owner=e.get("owner", ""),
                instance=e.get("instance"),
            )
            for e in data.get("events", [])
        ]
        return cls(
            program_name=run.get("program", ""),
            events=events,
            timestamp=run.get("timestamp", ""),
        )
