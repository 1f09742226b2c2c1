#!/usr/bin/env python3
"""
smartpreload.preload — Three-tier preload planning.

Tiers:
  A  Always-load core files (identity, user, agent checklist)
  B  Semantic memory search request (handed to the agent, not run here)
  C  Session hotspots: curated files for topics that keep coming up

The plan is an instruction set for the calling agent plus a reasoning
trail explaining why each item is there.
"""

from dataclasses import dataclass, field
from pathlib import Path

from smartpreload.tokens import estimate_tokens
from smartpreload.tracker import HotspotTracker


@dataclass
class SemanticSearchRequest:
    """Descriptor for the agent's memory_search tool."""
    query: str
    max_results: int
    min_score: float
    action: str = "memory_search"

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "query": self.query,
            "maxResults": self.max_results,
            "minScore": self.min_score,
        }


@dataclass
class PreloadPlan:
    tier_a: list[str] = field(default_factory=list)
    tier_b: list[SemanticSearchRequest] = field(default_factory=list)
    tier_c: list[str] = field(default_factory=list)
    reasoning: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "tier1": list(self.tier_a),
            "tier2": [req.to_dict() for req in self.tier_b],
            "tier3": list(self.tier_c),
            "reasoning": list(self.reasoning),
        }


def split_anchor(resource: str) -> tuple[str, str | None]:
    """'MEMORY.md#DeFi' → ('MEMORY.md', 'DeFi')."""
    if "#" in resource:
        path, section = resource.split("#", 1)
        return path, section
    return resource, None


class SmartPreloadEngine:
    """Composes the three tiers around one HotspotTracker."""

    def __init__(self, tracker: HotspotTracker):
        self.tracker = tracker
        self.config = tracker.config

    def plan(self, message: str) -> PreloadPlan:
        """
        Build the preload plan for ``message``.

        Updates the hotspot tracker as a side effect (tier C), so calling
        plan() twice with the same message counts two mentions.
        """
        plan = PreloadPlan()
        text = message if isinstance(message, str) else ""

        # Tier A: core files
        plan.tier_a = list(self.config.always_load)
        plan.reasoning.append(f"📌 Tier 1: Core identity files ({', '.join(plan.tier_a)})")

        # Tier B: semantic search
        request = SemanticSearchRequest(
            query=text,
            max_results=self.config.semantic_max_results,
            min_score=self.config.semantic_min_score,
        )
        plan.tier_b.append(request)
        preview = text if len(text) <= 50 else text[:50] + "..."
        plan.reasoning.append(f'🔍 Tier 2: Semantic search for "{preview}"')
        plan.reasoning.append(
            f'   → Use memory_search({{query: "{text}", maxResults: {request.max_results}}})'
        )

        # Tier C: session hotspots
        self.tracker.update(message)
        if not self.tracker.last_save_ok:
            plan.reasoning.append("⚠️  Hotspot state not saved; this plan uses in-memory state only")

        already_loaded = {split_anchor(p)[0] for p in plan.tier_a}
        hot_paths = [
            p for p in self.tracker.get_hot_memory_paths()
            if split_anchor(p)[0] not in already_loaded
        ]
        if hot_paths:
            plan.tier_c = hot_paths
            plan.reasoning.append("🔥 Tier 3: Session hotspots detected")
            for record in self.tracker.get_hot_topics():
                plan.reasoning.append(
                    f"   • {record.topic}: {record.mention_count} mentions, heat={record.heat:.2f}"
                )

        return plan


def load_commands(plan: PreloadPlan) -> list[str]:
    """Render the plan as tool calls the agent can execute in order."""
    commands = [f'read("{path}")' for path in plan.tier_a]

    if plan.tier_b:
        search = plan.tier_b[0]
        commands.append(
            f'memory_search({{query: "{search.query}", maxResults: {search.max_results}}})'
        )

    for resource in plan.tier_c:
        path, section = split_anchor(resource)
        if section:
            commands.append(f'read("{path}") // focus: {section}')
        else:
            commands.append(f'read("{path}")')

    return commands


def estimate_plan_tokens(plan: PreloadPlan, workspace: Path) -> int:
    """Token estimate for the tier A and C files present in ``workspace``."""
    files = []
    for resource in plan.tier_a + plan.tier_c:
        path, _ = split_anchor(resource)
        if path not in files:
            files.append(path)

    total = 0
    for name in files:
        full_path = workspace / name
        if not full_path.is_file():
            continue
        try:
            total += estimate_tokens(full_path.read_text(encoding="utf-8", errors="replace"))
        except OSError:
            continue
    return total


def format_report(plan: PreloadPlan, commands: list[str], hot_topics: list) -> str:
    """Human-readable preload report."""
    lines = ["🧠 Smart Preload Report", "", "📋 Loading Strategy:"]
    lines.extend(f"  {line}" for line in plan.reasoning)

    lines.append("")
    lines.append("🔧 Commands to Execute:")
    lines.extend(f"  {i}. {cmd}" for i, cmd in enumerate(commands, 1))

    lines.append("")
    lines.append("📊 Session Context:")
    if hot_topics:
        for record in hot_topics:
            lines.append(f"  • {record.topic}: {record.mention_count} mentions (heat: {record.heat:.2f})")
    else:
        lines.append("  (no hot topics yet)")

    return "\n".join(lines)
