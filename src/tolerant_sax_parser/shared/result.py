"""Recorded parse events and result objects.

The parser itself only reports through callbacks. These types exist for
callers that want the callback stream captured as data, such as the
``collect_events`` API and the command-line tool.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class EventType(Enum):
    """Kinds of callback a parse can produce."""

    START_TAG = "start"
    END_TAG = "end"
    TEXT = "text"


@dataclass(frozen=True)
class ParseEvent:
    """A single recorded callback.

    ``attributes`` is a copy taken during the callback, so it stays valid
    after the parser has moved on to the next tag.
    """

    type: EventType
    name: Optional[str] = None
    attributes: Tuple[Tuple[str, str], ...] = ()
    text: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate that the payload matches the event type."""
        if self.type is EventType.TEXT:
            if self.text is None:
                raise ValueError("Text events require text")
        elif not self.name:
            raise ValueError("Tag events require a name")

    def to_dict(self) -> Dict[str, Any]:
        if self.type is EventType.TEXT:
            return {"type": self.type.value, "text": self.text}
        data: Dict[str, Any] = {"type": self.type.value, "name": self.name}
        if self.type is EventType.START_TAG:
            data["attributes"] = [list(pair) for pair in self.attributes]
        return data


@dataclass
class PerformanceMetrics:
    """Performance metrics for parsing operations."""

    processing_time_ms: float = 0.0
    bytes_processed: int = 0
    events_emitted: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_processed * 1000.0) / self.processing_time_ms

    @property
    def events_per_second(self) -> float:
        """Calculate events emitted per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_emitted * 1000.0) / self.processing_time_ms


@dataclass
class ParseResult:
    """Captured event stream of one parse."""

    events: List[ParseEvent] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def start_tags(self) -> List[ParseEvent]:
        return [event for event in self.events if event.type is EventType.START_TAG]

    @property
    def end_tags(self) -> List[ParseEvent]:
        return [event for event in self.events if event.type is EventType.END_TAG]

    @property
    def text(self) -> str:
        """All text events concatenated in document order."""
        return "".join(event.text or "" for event in self.events if event.type is EventType.TEXT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events": [event.to_dict() for event in self.events],
            "metrics": {
                "processing_time_ms": self.performance.processing_time_ms,
                "bytes_processed": self.performance.bytes_processed,
                "events_emitted": self.performance.events_emitted,
            },
        }
