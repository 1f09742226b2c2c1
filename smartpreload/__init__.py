"""
smartpreload - Three-tier memory preloading for conversational agents

Decides which workspace notes an agent should load for the next turn
without re-reading its whole knowledge base.

Tiers:
- Tier 1: Core files, always loaded
- Tier 2: Semantic memory search request
- Tier 3: Session hotspots (time-decayed topic heat)

Quick start:
    pip install smartpreload
    smartpreload preload "push the fix to github"
    smartpreload status
"""

__version__ = "0.3.0"
__all__ = [
    "__version__",
    "extract_topics",
    "HotspotStore",
    "TrackerState",
    "TopicRecord",
    "HistoryEntry",
    "HotspotTracker",
    "apply_update",
    "PreloadConfig",
    "load_config",
    "SmartPreloadEngine",
    "PreloadPlan",
]

# Core exports (noqa comments suppress F401 for intentional re-exports)
from smartpreload.config import PreloadConfig, load_config  # noqa: F401
from smartpreload.preload import PreloadPlan, SmartPreloadEngine  # noqa: F401
from smartpreload.store import HistoryEntry, HotspotStore, TopicRecord, TrackerState  # noqa: F401
from smartpreload.topics import extract_topics  # noqa: F401
from smartpreload.tracker import HotspotTracker, apply_update  # noqa: F401
