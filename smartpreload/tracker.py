#!/usr/bin/env python3
"""
smartpreload.tracker — Session Topic Hotspot Tracker
=====================================================
Time-decayed topic heat for a stream of user messages.

Per message:
  1. Extract topics from the keyword table
  2. Append to the bounded history window (FIFO)
  3. Mentioned topics: count += 1, heat = count * D^(age at mention)
  4. Unmentioned topics: heat = seen_heat * D^(minutes since last seen)
  5. Drop topics whose heat fell below the epsilon floor

Hot topics are the top-K by heat that have been mentioned at least T times.

The scoring step is the pure function apply_update(); HotspotTracker wraps
it with load-on-start and save-after-update.
"""

import copy
from collections.abc import Callable
from datetime import datetime

from smartpreload.config import PreloadConfig
from smartpreload.store import HistoryEntry, HotspotStore, TopicRecord, TrackerState
from smartpreload.topics import extract_topics

# ============================================================================
# DECAY
# ============================================================================

def elapsed_minutes(since: datetime | None, now: datetime) -> float:
    """Minutes between two instants, never negative (clock skew → 0)."""
    if since is None:
        return 0.0
    return max(0.0, (now - since).total_seconds() / 60)


def decay(heat: float, minutes: float, decay_factor: float) -> float:
    """Closed-form exponential decay: heat * D^minutes."""
    return heat * decay_factor ** minutes


def current_heat(record: TopicRecord, now: datetime, decay_factor: float) -> float:
    """Heat of a record at ``now`` assuming no new mention."""
    return decay(record.seen_heat, elapsed_minutes(record.last_seen_at, now), decay_factor)


# ============================================================================
# PURE UPDATE
# ============================================================================

def apply_update(
    state: TrackerState,
    message: str,
    now: datetime,
    config: PreloadConfig,
) -> tuple[TrackerState, set[str]]:
    """
    Compute the next tracker state for one incoming message.
    The input state is not modified.

    Returns (next_state, detected_topics).
    """
    state = copy.deepcopy(state)
    topics = extract_topics(message, config.keywords)
    text = message if isinstance(message, str) else ""

    # History window
    state.history.append(HistoryEntry(message=text, topics=sorted(topics), timestamp=now))
    while len(state.history) > config.window_size:
        state.history.pop(0)

    # Mentioned topics
    for topic in topics:
        record = state.topics.get(topic)
        if record is None:
            record = TopicRecord(topic=topic)
            state.topics[topic] = record

        previous_seen = record.last_seen_at
        record.mention_count += 1
        record.last_seen_at = now

        age = elapsed_minutes(previous_seen, now) if config.decay_on_mention else 0.0
        record.heat = decay(record.mention_count, age, config.decay_factor)
        record.seen_heat = record.heat

    # Everything else fades from its last mention
    for topic, record in state.topics.items():
        if topic in topics:
            continue
        record.heat = current_heat(record, now, config.decay_factor)

    # Prune cold topics
    for topic in [t for t, r in state.topics.items() if r.heat < config.heat_epsilon]:
        del state.topics[topic]

    state.last_update_at = now
    return state, topics


def rank_hot_topics(state: TrackerState, config: PreloadConfig) -> list[TopicRecord]:
    """
    Top-K records by heat, then filtered to mention_count >= T.

    Ties break on more recent last_seen_at, then topic name.
    """
    records = sorted(state.topics.values(), key=lambda r: r.topic)
    records.sort(key=lambda r: r.last_seen_at or datetime.min, reverse=True)
    records.sort(key=lambda r: r.heat, reverse=True)
    top = records[:config.max_hotspots]
    return [r for r in top if r.mention_count >= config.threshold_count]


def hot_memory_paths(hot_topics: list[TopicRecord], memory_map: dict[str, list[str]]) -> list[str]:
    """Curated paths for hot topics, in rank order, without duplicates."""
    paths: list[str] = []
    seen: set[str] = set()
    for record in hot_topics:
        for path in memory_map.get(record.topic, []):
            if path not in seen:
                seen.add(path)
                paths.append(path)
    return paths


# ============================================================================
# TRACKER
# ============================================================================

class HotspotTracker:
    """
    Owns the durable hotspot state for one process.

    State is loaded at construction and saved after every update. A failed
    save leaves the in-memory state authoritative (see ``last_save_ok``).
    """

    def __init__(
        self,
        store: HotspotStore,
        config: PreloadConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.config = config or PreloadConfig()
        self.clock = clock
        self.state = self.store.load()
        self.last_save_ok = True

    @property
    def history(self) -> list[HistoryEntry]:
        return self.state.history

    def update(self, message: str) -> set[str]:
        """Ingest one message, persist, and return the topics it carried."""
        self.state, topics = apply_update(self.state, message, self.clock(), self.config)
        self.last_save_ok = self.store.save(self.state)
        return topics

    def get_hot_topics(self) -> list[TopicRecord]:
        return rank_hot_topics(self.state, self.config)

    def get_hot_memory_paths(self) -> list[str]:
        return hot_memory_paths(self.get_hot_topics(), self.config.memory_map)

    def reset(self) -> bool:
        """Delete the durable state. Returns True if a state file existed."""
        removed = self.store.delete()
        self.state = TrackerState()
        return removed
