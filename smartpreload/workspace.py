"""
smartpreload.workspace — Helpers over the agent's markdown workspace.

Footprint reporting, substring search, daily notes and the external
compression benchmark. None of this feeds the hotspot scores.
"""

import json
import re
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path

from smartpreload.config import COMPRESSOR_SCRIPT, CORE_FILES, MEMORY_DIRNAME
from smartpreload.tokens import estimate_tokens

DAILY_NOTE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\.md$")
RECENT_NOTES = 7
SEARCH_LIMIT = 20
SNIPPET_CHARS = 80
COMPRESS_TIMEOUT_SECONDS = 300


# ============================================================================
# FOOTPRINT
# ============================================================================

@dataclass
class FileFootprint:
    name: str
    exists: bool
    tokens: int = 0
    size: int = 0


@dataclass
class FootprintReport:
    core_files: list[FileFootprint] = field(default_factory=list)
    daily_notes: list[FileFootprint] = field(default_factory=list)
    memory_dir_exists: bool = False
    codebook_entries: int | None = None
    observation_files: int | None = None

    @property
    def core_tokens(self) -> int:
        return sum(f.tokens for f in self.core_files)

    @property
    def core_size(self) -> int:
        return sum(f.size for f in self.core_files)

    @property
    def daily_tokens(self) -> int:
        return sum(f.tokens for f in self.daily_notes)


def _measure(path: Path) -> FileFootprint:
    if not path.is_file():
        return FileFootprint(name=path.name, exists=False)
    content = path.read_text(encoding="utf-8", errors="replace")
    return FileFootprint(
        name=path.name,
        exists=True,
        tokens=estimate_tokens(content),
        size=path.stat().st_size,
    )


def memory_footprint(workspace: Path, core_files: list[str] = CORE_FILES) -> FootprintReport:
    """Token and size footprint of core files and the last week of daily notes."""
    report = FootprintReport()
    report.core_files = [_measure(workspace / name) for name in core_files]

    memory_dir = workspace / MEMORY_DIRNAME
    if not memory_dir.is_dir():
        return report
    report.memory_dir_exists = True

    notes = sorted(
        (p for p in memory_dir.iterdir() if DAILY_NOTE_RE.match(p.name)),
        key=lambda p: p.name,
        reverse=True,
    )[:RECENT_NOTES]
    report.daily_notes = [_measure(p) for p in notes]

    codebook = memory_dir / ".codebook.json"
    if codebook.exists():
        try:
            report.codebook_entries = len(json.loads(codebook.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, TypeError) as e:
            print(f"[smartpreload] WARN:Unreadable codebook {codebook}: {e}", file=sys.stderr)
        observations = memory_dir / "observations"
        if observations.is_dir():
            report.observation_files = sum(1 for _ in observations.iterdir())

    return report


# ============================================================================
# SEARCH
# ============================================================================

@dataclass
class SearchHit:
    path: str
    line_number: int
    snippet: str


def search_workspace(query: str, root: Path, limit: int = SEARCH_LIMIT) -> list[SearchHit]:
    """Case-insensitive substring search over markdown files under ``root``."""
    if not query:
        return []

    needle = query.lower()
    hits: list[SearchHit] = []
    for md_file in sorted(root.rglob("*.md")):
        if not md_file.is_file():
            continue
        try:
            lines = md_file.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError:
            continue
        for line_number, line in enumerate(lines, 1):
            if needle in line.lower():
                hits.append(SearchHit(
                    path=md_file.relative_to(root).as_posix(),
                    line_number=line_number,
                    snippet=line.strip()[:SNIPPET_CHARS],
                ))
                if len(hits) >= limit:
                    return hits
    return hits


# ============================================================================
# DAILY NOTES
# ============================================================================

def daily_note_path(workspace: Path, day: date) -> Path:
    return workspace / MEMORY_DIRNAME / f"{day.isoformat()}.md"


def add_daily_note(content: str, workspace: Path, now: datetime | None = None) -> tuple[Path, bool]:
    """
    Append a timestamped entry to today's note.

    Returns (note_path, created).
    """
    now = now or datetime.now()
    today = now.date().isoformat()
    note = daily_note_path(workspace, now.date())
    note.parent.mkdir(parents=True, exist_ok=True)

    entry = f"\n## {now.strftime('%Y-%m-%d %H:%M:%S')}\n{content}\n"
    created = not note.exists()
    if created:
        note.write_text(f"# Daily Notes - {today}\n{entry}", encoding="utf-8")
    else:
        with open(note, "a", encoding="utf-8") as f:
            f.write(entry)
    return note, created


@dataclass
class NoteReview:
    day: date
    exists: bool
    entries: int = 0
    recent_titles: list[str] = field(default_factory=list)


def _review_day(workspace: Path, day: date) -> NoteReview:
    note = daily_note_path(workspace, day)
    if not note.is_file():
        return NoteReview(day=day, exists=False)
    sections = [s for s in note.read_text(encoding="utf-8", errors="replace").split("##") if s.strip()]
    # First section is the "# Daily Notes" header
    entries = sections[1:]
    titles = [s.strip().split("\n")[0].strip() for s in entries[-3:]]
    return NoteReview(day=day, exists=True, entries=len(entries), recent_titles=titles)


def review_notes(workspace: Path, today: date | None = None) -> tuple[NoteReview, NoteReview]:
    """Summaries of today's and yesterday's notes."""
    today = today or date.today()
    return _review_day(workspace, today), _review_day(workspace, today - timedelta(days=1))


# ============================================================================
# COMPRESSION CHECK
# ============================================================================

@dataclass
class CompressionResult:
    available: bool
    ok: bool = False
    output: str = ""
    error: str = ""


def run_compression_check(
    workspace: Path,
    script: Path = COMPRESSOR_SCRIPT,
    timeout: int = COMPRESS_TIMEOUT_SECONDS,
) -> CompressionResult:
    """Run the external compressor's benchmark mode against ``workspace``."""
    if not script.exists():
        return CompressionResult(available=False)

    try:
        result = subprocess.run(
            [sys.executable, str(script), str(workspace), "benchmark"],
            capture_output=True, text=True, timeout=timeout
        )
    except subprocess.TimeoutExpired:
        return CompressionResult(available=True, error=f"timed out after {timeout}s")
    except OSError as e:
        return CompressionResult(available=True, error=str(e))

    if result.returncode != 0:
        return CompressionResult(
            available=True,
            output=result.stdout,
            error=result.stderr.strip() or f"exit status {result.returncode}",
        )
    return CompressionResult(available=True, ok=True, output=result.stdout)
