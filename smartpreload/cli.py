#!/usr/bin/env python3
"""
smartpreload CLI - Unified command-line interface

Usage:
    smartpreload preload "<message>"  Generate preload instructions for a message
    smartpreload status               Show session hotspot status
    smartpreload reset                Reset session hotspot tracking
    smartpreload cleanup              Clear task context, keep core principles
    smartpreload footprint            Show memory footprint (files, tokens)
    smartpreload search "<query>"     Substring search over workspace notes
    smartpreload add "<content>"      Append to today's daily note
    smartpreload review               Review today's and yesterday's notes
    smartpreload compress             Run compression benchmark
    smartpreload version              Show version information
"""

import argparse
import json
import sys
from datetime import datetime

from smartpreload.config import resolve_workspace, load_config, state_file_for
from smartpreload.store import HotspotStore
from smartpreload.tokens import format_bytes, windows_utf8_io
from smartpreload.tracker import HotspotTracker


def _tracker(workspace) -> HotspotTracker:
    config = load_config(workspace)
    return HotspotTracker(HotspotStore(state_file_for(workspace)), config)


def cmd_preload(args):
    """Generate preload instructions for a user message."""
    from smartpreload.preload import (
        SmartPreloadEngine,
        estimate_plan_tokens,
        format_report,
        load_commands,
    )

    workspace = resolve_workspace()
    engine = SmartPreloadEngine(_tracker(workspace))
    message = " ".join(args.message)

    plan = engine.plan(message)
    commands = load_commands(plan)

    if args.json:
        print(json.dumps({**plan.to_dict(), "commands": commands}, indent=2, ensure_ascii=False))
        return

    print(format_report(plan, commands, engine.tracker.get_hot_topics()))
    tokens = estimate_plan_tokens(plan, workspace)
    if tokens:
        print(f"\n💡 Estimated preload: ~{tokens:,} tokens")
    print()


def cmd_status(args):
    """Show session hotspot status."""
    tracker = _tracker(resolve_workspace())
    now = datetime.now()

    print("🔥 Session Hotspot Status\n")
    hot_topics = tracker.get_hot_topics()
    if hot_topics:
        print("Current Hot Topics:")
        for record in hot_topics:
            ago = int((now - record.last_seen_at).total_seconds() // 60) if record.last_seen_at else 0
            print(f"  🔥 {record.topic:<15} count={record.mention_count} "
                  f"heat={record.heat:.2f} ({ago}m ago)")

        print("\nRecommended Memory Paths:")
        for path in tracker.get_hot_memory_paths():
            print(f"  • {path}")
    else:
        print("No hot topics detected yet.")

    print("\nRecent History:")
    recent = tracker.history[-args.last:] if args.last > 0 else []
    if not recent:
        print("  (empty)")
    for i, entry in enumerate(recent, 1):
        text = entry.message if len(entry.message) <= 60 else entry.message[:60] + "..."
        print(f"  {i}. {text}")
        if entry.topics:
            print(f"     topics: [{', '.join(entry.topics)}]")


def cmd_reset(args):
    """Reset session hotspot tracking."""
    tracker = _tracker(resolve_workspace())
    if tracker.reset():
        print("✅ Session hotspot tracker reset")
    else:
        print("⚠️  No session cache to reset")


def cmd_cleanup(args):
    """Clear task-specific context after a task completes."""
    tracker = _tracker(resolve_workspace())
    removed = tracker.reset()

    print("🧹 Memory Cleanup")
    print("=" * 16)
    print()
    print(f"  ✓ Task-specific hotspots cleared{'' if removed else ' (nothing tracked)'}")
    print(f"  ✓ Core principles retained: {', '.join(tracker.config.always_load)}")


def cmd_footprint(args):
    """Show memory system footprint."""
    from smartpreload.workspace import memory_footprint

    workspace = resolve_workspace()
    report = memory_footprint(workspace)
    today = f"{datetime.now().date().isoformat()}.md"

    print("📊 Memory System Status\n")
    print("🗂️  Core Files:")
    for f in report.core_files:
        if f.exists:
            print(f"  ✓ {f.name:<15} {f.tokens:>6,} tokens  {format_bytes(f.size)}")
        else:
            print(f"  ✗ {f.name:<15} (not found)")
    print(f"  {'─' * 50}")
    print(f"  {'Total':<15} {report.core_tokens:>6,} tokens  {format_bytes(report.core_size)}\n")

    print("📅 Daily Notes:")
    if report.memory_dir_exists:
        for f in report.daily_notes:
            marker = "📍" if f.name == today else "  "
            print(f"  {marker} {f.name}  {f.tokens:>6,} tokens")
        print(f"  {'─' * 50}")
        print(f"  {'Recent 7 days':<15} {report.daily_tokens:>6,} tokens\n")
    else:
        print("  ⚠️  memory/ directory not found\n")

    print("🗜️  Compression:")
    if report.codebook_entries is not None:
        print(f"  ✓ Codebook active ({report.codebook_entries} entries)")
        if report.observation_files is not None:
            print(f"  ✓ Observations: {report.observation_files} compressed sessions")
    else:
        print("  ⚠️  No compression data (run compress command)")

    print(f"\n📈 Total Memory Footprint: {report.core_tokens:,} tokens")


def cmd_search(args):
    """Substring search over workspace markdown."""
    from smartpreload.workspace import search_workspace

    query = " ".join(args.query)
    print(f'🔍 Searching memory for: "{query}"\n')
    print("📄 File Matches:")
    hits = search_workspace(query, resolve_workspace(), limit=args.limit)
    if hits:
        for hit in hits:
            print(f"  {hit.path}:{hit.line_number}")
            print(f"    {hit.snippet}...")
    else:
        print("  No matches found")

    print("\n💡 Tip: Use memory_search for semantic search")
    print(f'   Example: memory_search({{query: "{query}", maxResults: 10}})')


def cmd_add(args):
    """Append content to today's daily note."""
    from smartpreload.workspace import add_daily_note

    content = " ".join(args.content)
    note, created = add_daily_note(content, resolve_workspace())
    if created:
        print(f"✅ Created new daily note: {note.name}")
    else:
        print(f"✅ Added to daily note: {note.name}")
    preview = content if len(content) <= 60 else content[:60] + "..."
    print(f"📝 Content: {preview}")


def cmd_review(args):
    """Review today's and yesterday's notes."""
    from smartpreload.workspace import review_notes

    today, yesterday = review_notes(resolve_workspace())

    print("📖 Reviewing Recent Memory\n")
    print(f"📅 Today ({today.day.isoformat()}):")
    if today.exists:
        print(f"  {today.entries} entries")
        for title in today.recent_titles:
            print(f"  • {title}")
    else:
        print("  (no entries yet)")

    print(f"\n📅 Yesterday ({yesterday.day.isoformat()}):")
    if yesterday.exists:
        print(f"  {yesterday.entries} entries")
    else:
        print("  (no file)")

    print("\n💡 Suggestions:")
    print("  1. Review if any important info should be added to MEMORY.md")
    print("  2. Extract lessons learned to LESSONS.md")
    print("  3. Update TOOLS.md with new tool discoveries")


def cmd_compress(args):
    """Check compression potential with the external compressor."""
    from smartpreload.config import COMPRESSOR_SCRIPT
    from smartpreload.workspace import run_compression_check

    print("🗜️  Checking Compression Potential\n")
    workspace = resolve_workspace()
    result = run_compression_check(workspace, script=COMPRESSOR_SCRIPT)

    if not result.available:
        print("⚠️  openclaw-token-compressor not installed")
        print("   Install: Clone to ~/.local/share/openclaw-skills/")
        return

    if not result.ok:
        print(f"❌ Compression check failed: {result.error}", file=sys.stderr)
        sys.exit(1)

    print(result.output)
    print("\n💡 To apply compression:")
    print(f'   python3 "{COMPRESSOR_SCRIPT}" "{workspace}" full')


def cmd_version(args):
    """Show version information."""
    from smartpreload import __version__
    print(f"smartpreload version {__version__}")


def main(argv=None):
    """Main CLI entry point."""
    windows_utf8_io()

    parser = argparse.ArgumentParser(
        prog="smartpreload",
        description="Three-tier memory preloading with session hotspot tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Strategy:
  Tier 1: Core files (SOUL, USER, AGENTS) - always loaded
  Tier 2: Semantic search (memory_search) - primary strategy
  Tier 3: Session hotspots - conversation continuity

Examples:
  smartpreload preload "when does my GitHub token expire"
  smartpreload preload "I want to swap some ETH"
  smartpreload status
  smartpreload search "GitHub config"
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    preload_parser = subparsers.add_parser("preload", help="Generate preload instructions")
    preload_parser.add_argument("message", nargs="+", help="User message")
    preload_parser.add_argument("--json", action="store_true", help="Output the plan as JSON")

    status_parser = subparsers.add_parser("status", help="Show session hotspot status")
    status_parser.add_argument("--last", type=int, default=5, help="History entries to show")

    subparsers.add_parser("reset", help="Reset session hotspot tracking")
    subparsers.add_parser("cleanup", help="Clear task context, keep core principles")
    subparsers.add_parser("footprint", help="Show memory footprint (files, tokens)")

    search_parser = subparsers.add_parser("search", help="Search workspace notes")
    search_parser.add_argument("query", nargs="+", help="Search text")
    search_parser.add_argument("--limit", type=int, default=20, help="Maximum matches")

    add_parser = subparsers.add_parser("add", help="Append to today's daily note")
    add_parser.add_argument("content", nargs="+", help="Note content")

    subparsers.add_parser("review", help="Review recent daily notes")
    subparsers.add_parser("compress", help="Run compression benchmark")
    subparsers.add_parser("version", help="Show version information")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    # Dispatch to command handlers
    commands = {
        "preload": cmd_preload,
        "status": cmd_status,
        "reset": cmd_reset,
        "cleanup": cmd_cleanup,
        "footprint": cmd_footprint,
        "search": cmd_search,
        "add": cmd_add,
        "review": cmd_review,
        "compress": cmd_compress,
        "version": cmd_version,
    }

    handler = commands.get(args.command)
    try:
        handler(args)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
