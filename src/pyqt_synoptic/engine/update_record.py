"""Update and snapshot records flowing through the dispatch path."""

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

KEY_SEPARATOR = "|"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant {name}")


def parse_payload(raw_payload: Any) -> Tuple[Any, bool]:
    """Parse a raw payload as JSON when possible.

    Returns:
        ``(value, is_structured)``. Text that is not strict JSON (``NaN`` and
        ``Infinity`` included) comes back unchanged with ``is_structured=False``.
        Non-text payloads (already decoded by an in-process publisher) count as
        structured.
    """
    if isinstance(raw_payload, (bytes, bytearray)):
        raw_payload = bytes(raw_payload).decode("utf-8", errors="replace")
    if isinstance(raw_payload, str):
        try:
            return json.loads(raw_payload, parse_constant=_reject_constant), True
        except ValueError:
            return raw_payload, False
    return raw_payload, raw_payload is not None


def record_key(source_id: str, topic_id: str) -> str:
    return f"{source_id}{KEY_SEPARATOR}{topic_id}"


@dataclass
class UpdateRecord:
    """One pending update. Parsed lazily so coalesced-away payloads are never decoded."""
    source_id: str
    topic_id: str
    raw_payload: Any
    parsed_value: Any = None
    is_structured: bool = False
    parsed: bool = False

    @property
    def key(self) -> str:
        return record_key(self.source_id, self.topic_id)

    def ensure_parsed(self) -> "UpdateRecord":
        if not self.parsed:
            self.parsed_value, self.is_structured = parse_payload(self.raw_payload)
            self.parsed = True
        return self


def _first(mapping: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in mapping:
            return mapping[name]
    return default


@dataclass(frozen=True)
class SnapshotEntry:
    """Last known value of one topic at a point in time."""
    source_id: str
    topic_id: str
    payload: Any
    timestamp_ms: Optional[float] = None

    @property
    def key(self) -> str:
        return record_key(self.source_id, self.topic_id)

    def to_record(self) -> UpdateRecord:
        return UpdateRecord(self.source_id, self.topic_id, self.payload)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SnapshotEntry":
        topic_id = _first(mapping, "topic_id", "topicId", "topic")
        if topic_id is None:
            raise ValueError(f"Snapshot entry without topic: {mapping!r}")
        return cls(
            source_id=str(_first(mapping, "source_id", "sourceId", "broker_id", "brokerId", default="")),
            topic_id=str(topic_id),
            payload=_first(mapping, "payload"),
            timestamp_ms=_first(mapping, "timestamp_ms", "timestampMs"),
        )

    @classmethod
    def coerce(cls, item: Any) -> "SnapshotEntry":
        """Accept a SnapshotEntry, a mapping, or a ``(source_id, topic_id, payload)`` tuple."""
        if isinstance(item, SnapshotEntry):
            return item
        if isinstance(item, Mapping):
            return cls.from_mapping(item)
        if isinstance(item, (tuple, list)) and len(item) == 3:
            source_id, topic_id, payload = item
            return cls(str(source_id), str(topic_id), payload)
        raise TypeError(f"Unsupported snapshot entry: {item!r}")
