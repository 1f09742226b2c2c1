"""
smartpreload.store — Durable snapshot of the hotspot tracker.

The whole TrackerState is written as one JSON document after every update
(not append-only). Reading never raises: a missing file is a fresh session,
an unreadable one is reported and replaced by the empty default.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

SCHEMA_VERSION = 1


def _parse_time(value) -> datetime | None:
    """ISO strings, or epoch milliseconds as written by the older node tool."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        # Everything in memory is naive local time
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _expect(value, kind: type, what: str):
    if not isinstance(value, kind):
        raise ValueError(f"{what} must be a JSON {kind.__name__}, got {type(value).__name__}")
    return value


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class TopicRecord:
    """Tracked heat for one topic."""
    topic: str
    mention_count: int = 0
    last_seen_at: datetime | None = None
    heat: float = 0.0
    seen_heat: float = 0.0  # heat as computed at last_seen_at

    def to_dict(self) -> dict:
        return {
            "mention_count": self.mention_count,
            "last_seen_at": _format_time(self.last_seen_at),
            "heat": self.heat,
            "seen_heat": self.seen_heat,
        }

    @classmethod
    def from_dict(cls, topic: str, data: dict) -> "TopicRecord":
        _expect(data, dict, f"topic record {topic!r}")
        heat = float(data.get("heat", 0.0))
        return cls(
            topic=topic,
            mention_count=int(data.get("mention_count", data.get("count", 0))),
            last_seen_at=_parse_time(data.get("last_seen_at", data.get("lastSeen"))),
            heat=heat,
            seen_heat=float(data.get("seen_heat", heat)),
        )


@dataclass
class HistoryEntry:
    """One ingested message."""
    message: str
    topics: list[str]
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "topics": list(self.topics),
            "timestamp": _format_time(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        _expect(data, dict, "history entry")
        return cls(
            message=data.get("message", ""),
            topics=sorted(_expect(data.get("topics", []), list, "history topics")),
            timestamp=_parse_time(data["timestamp"]),
        )


@dataclass
class TrackerState:
    """Everything the tracker persists between invocations."""
    topics: dict[str, TopicRecord] = field(default_factory=dict)
    history: list[HistoryEntry] = field(default_factory=list)
    last_update_at: datetime | None = None
    version: int = SCHEMA_VERSION

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "topics": {name: rec.to_dict() for name, rec in self.topics.items()},
            "history": [entry.to_dict() for entry in self.history],
            "last_update_at": _format_time(self.last_update_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrackerState":
        if not isinstance(data, dict):
            raise ValueError(f"state must be a JSON object, got {type(data).__name__}")
        topics = {
            name: TopicRecord.from_dict(name, rec)
            for name, rec in _expect(data.get("topics", {}), dict, "topics").items()
        }
        history = [HistoryEntry.from_dict(e) for e in _expect(data.get("history", []), list, "history")]
        return cls(
            topics=topics,
            history=history,
            last_update_at=_parse_time(data.get("last_update_at", data.get("lastUpdate"))),
            version=int(data.get("version", SCHEMA_VERSION)),
        )


class HotspotStore:
    """JSON file holding one TrackerState."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> TrackerState:
        """Load state from disk; empty state if absent or unreadable."""
        if not self.path.exists():
            return TrackerState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return TrackerState.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            print(f"[smartpreload] WARN:Failed to load session cache {self.path}: {e}", file=sys.stderr)
            return TrackerState()

    def save(self, state: TrackerState) -> bool:
        """Write the full state. Returns False (after a warning) on failure."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(state.to_dict(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            return True
        except OSError as e:
            print(f"[smartpreload] WARN:Failed to save session cache {self.path}: {e}", file=sys.stderr)
            return False

    def delete(self) -> bool:
        """Remove the state file. Returns True if a file was removed."""
        try:
            self.path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            print(f"[smartpreload] WARN:Failed to remove session cache {self.path}: {e}", file=sys.stderr)
            return False
