"""
smartpreload.config — Static tables, tunables and workspace resolution.

Everything here is configuration data, not logic: the keyword table that
drives topic detection, the topic → memory map used for hotspot paths,
the always-load list and the decay parameters.

Overrides are read from preload.json (workspace first, then ~/.openclaw).
"""

import json
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path

# ============================================================================
# PATHS
# ============================================================================

DEFAULT_WORKSPACE = Path.home() / ".openclaw" / "workspace"
GLOBAL_CONFIG = Path.home() / ".openclaw" / "preload.json"
STATE_FILENAME = ".session-hotspots.json"
CONFIG_FILENAME = "preload.json"
MEMORY_DIRNAME = "memory"

COMPRESSOR_SCRIPT = (
    Path.home() / ".local" / "share" / "openclaw-skills"
    / "openclaw-token-compressor" / "scripts" / "mem_compress.py"
)

# ============================================================================
# TIER A: always loaded
# ============================================================================

ALWAYS_LOAD = ["SOUL.md", "USER.md", "AGENTS.md"]

# Files reported by the footprint command
CORE_FILES = ["MEMORY.md", "SOUL.md", "AGENTS.md", "TOOLS.md", "LESSONS.md", "USER.md"]

# ============================================================================
# TIER B: semantic search request
# ============================================================================

SEMANTIC_MAX_RESULTS = 5
SEMANTIC_MIN_SCORE = 0.6

# ============================================================================
# TIER C: session hotspots
# ============================================================================

WINDOW_SIZE = 10            # Recent messages kept in history
THRESHOLD_COUNT = 3         # Mentions before a topic counts as hot
DECAY_FACTOR = 0.8          # Multiplicative heat decay per minute
HEAT_EPSILON = 0.1          # Records below this heat are dropped
MAX_HOTSPOTS = 5            # Top-K cap on reported hot topics
DECAY_ON_MENTION = True     # Decay a re-mentioned topic by its age at mention time

# ============================================================================
# KEYWORD TABLE
# topic → substrings (case-insensitive)
# ============================================================================

TOPIC_KEYWORDS: dict[str, list[str]] = {
    "github": ["github", "repo", "git", "commit", "pr", "issue"],
    "defi": ["defi", "swap", "uniswap", "wallet", "eth", "usdc", "token"],
    "model_router": ["model", "router", "deepseek", "claude", "gemini", "openrouter"],
    "memory": ["memory", "记忆", "compression", "token", "memos"],
    "browser": ["browser", "actionbook", "automation", "screenshot"],
    "email": ["email", "protonmail", "mail", "邮件"],
    "twitter": ["twitter", "x.com", "tweet", "bird"],
    "coding": ["code", "代码", "debug", "bug", "programming", "function"],
    "git": ["git", "github", "push", "pull", "commit", "clone", "merge", "branch"],
    "file_ops": ["file", "encrypt", "decrypt", "save", "文件", "保存", "加密"],
    "security": ["password", "passphrase", "encrypt", "decrypt", "credential"],
}

# ============================================================================
# MEMORY MAP
# topic → curated resource paths ("FILE#Section" anchors allowed)
# ============================================================================

TOPIC_MEMORY_MAP: dict[str, list[str]] = {
    "github": ["MEMORY.md#GitHub Account", ".credentials-info.md", "TOOLS.md"],
    "defi": ["MEMORY.md#DeFi Operations", ".tony-wallet-info.md"],
    "model_router": ["MODEL-ROUTER-USAGE.md", "MEMORY.md#OpenRouter"],
    "memory": ["OPENCLAW-MEMORY-SYSTEM.md", "TOOLS.md#token-compressor"],
    "browser": ["TOOLS.md#actionbook", "TOOLS.md#Browser"],
    "email": ["MEMORY.md#Email", ".credentials-info.md"],
    "git": ["MEMORY.md#GitHub Account", ".credentials-info.md", "workflow-analysis.md"],
    "file_ops": ["TOOLS.md", "LESSONS.md#文件操作"],
    "coding": ["LESSONS.md", "AGENTS.md#Working Principles"],
}


@dataclass
class PreloadConfig:
    """All static knobs for one invocation."""
    window_size: int = WINDOW_SIZE
    threshold_count: int = THRESHOLD_COUNT
    decay_factor: float = DECAY_FACTOR
    heat_epsilon: float = HEAT_EPSILON
    max_hotspots: int = MAX_HOTSPOTS
    decay_on_mention: bool = DECAY_ON_MENTION
    semantic_max_results: int = SEMANTIC_MAX_RESULTS
    semantic_min_score: float = SEMANTIC_MIN_SCORE
    always_load: list[str] = field(default_factory=lambda: list(ALWAYS_LOAD))
    keywords: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in TOPIC_KEYWORDS.items()}
    )
    memory_map: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in TOPIC_MEMORY_MAP.items()}
    )

    def __post_init__(self):
        if not 0 < self.decay_factor < 1:
            raise ValueError(f"decay_factor must be in (0, 1), got {self.decay_factor}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")
        if self.max_hotspots < 0:
            raise ValueError(f"max_hotspots must be >= 0, got {self.max_hotspots}")

    @classmethod
    def from_dict(cls, data: dict) -> "PreloadConfig":
        """Build a config from a preload.json payload, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        hotspot = data.get("hotspot", {})
        semantic = data.get("semantic", {})
        kwargs = {k: v for k, v in data.items() if k in known}
        kwargs.update({k: v for k, v in hotspot.items() if k in known})
        if "max_results" in semantic:
            kwargs["semantic_max_results"] = int(semantic["max_results"])
        if "min_score" in semantic:
            kwargs["semantic_min_score"] = float(semantic["min_score"])
        return cls(**kwargs)


# ============================================================================
# WORKSPACE RESOLUTION
# ============================================================================

def resolve_workspace() -> Path:
    """
    Resolve the agent workspace root.

    Priority:
    1. PRELOAD_WORKSPACE environment variable
    2. ~/.openclaw/workspace
    """
    if env_root := os.getenv("PRELOAD_WORKSPACE"):
        return Path(env_root).expanduser()
    return DEFAULT_WORKSPACE


def state_file_for(workspace: Path) -> Path:
    return workspace / STATE_FILENAME


def load_config(workspace: Path | None = None) -> PreloadConfig:
    """
    Load configuration overrides from preload.json.
    Falls back to built-in defaults if no file exists or none parses.
    """
    workspace = workspace if workspace is not None else resolve_workspace()
    config_paths = [workspace / CONFIG_FILENAME, GLOBAL_CONFIG]

    for config_path in config_paths:
        if not config_path.exists():
            continue
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return PreloadConfig.from_dict(data)
        except (OSError, json.JSONDecodeError, TypeError, ValueError) as e:
            print(f"[smartpreload] WARN:Failed to load {config_path}: {e}", file=sys.stderr)
            continue

    return PreloadConfig()
