"""Tests for workspace helpers: footprint, search, notes, compression."""
from datetime import date, datetime

import pytest

from smartpreload.tokens import estimate_tokens, format_bytes
from smartpreload.workspace import (
    add_daily_note,
    memory_footprint,
    review_notes,
    run_compression_check,
    search_workspace,
)


class TestFootprint:

    def test_core_files(self, populated_workspace):
        report = memory_footprint(populated_workspace)
        by_name = {f.name: f for f in report.core_files}

        assert by_name["SOUL.md"].exists
        assert by_name["SOUL.md"].size == (populated_workspace / "SOUL.md").stat().st_size
        assert not by_name["MEMORY.md"].exists
        assert not by_name["LESSONS.md"].exists
        assert report.core_tokens == sum(f.tokens for f in report.core_files)

    def test_daily_notes_only(self, populated_workspace):
        report = memory_footprint(populated_workspace)
        assert [f.name for f in report.daily_notes] == ["2026-10-17.md"]

    def test_recent_week_only(self, populated_workspace):
        memory = populated_workspace / "memory"
        for day in range(1, 11):
            (memory / f"2026-09-{day:02d}.md").write_text("note", encoding="utf-8")

        names = [f.name for f in memory_footprint(populated_workspace).daily_notes]
        assert len(names) == 7
        assert names[0] == "2026-10-17.md"
        assert names == sorted(names, reverse=True)

    def test_compression_data(self, populated_workspace):
        report = memory_footprint(populated_workspace)
        assert report.codebook_entries == 2
        assert report.observation_files == 1

    def test_no_memory_dir(self, workspace):
        report = memory_footprint(workspace)
        assert report.memory_dir_exists is False
        assert report.daily_notes == []
        assert report.codebook_entries is None


class TestSearch:

    def test_finds_lines(self, populated_workspace):
        hits = search_workspace("github", populated_workspace)

        assert len(hits) == 1
        assert hits[0].path == "TOOLS.md"
        assert hits[0].line_number == 3
        assert hits[0].snippet == "## GitHub"

    def test_case_insensitive_across_tree(self, populated_workspace):
        hits = search_workspace("ROUTER", populated_workspace)
        assert [(h.path, h.line_number) for h in hits] == [("memory/2026-10-17.md", 4)]

    def test_limit(self, workspace):
        (workspace / "many.md").write_text("\n".join(["token"] * 50), encoding="utf-8")
        assert len(search_workspace("token", workspace, limit=20)) == 20

    def test_snippet_truncated(self, workspace):
        (workspace / "long.md").write_text("   needle " + "y" * 200, encoding="utf-8")
        hit = search_workspace("needle", workspace)[0]
        assert len(hit.snippet) == 80
        assert hit.snippet.startswith("needle")

    def test_empty_query(self, populated_workspace):
        assert search_workspace("", populated_workspace) == []


class TestDailyNotes:

    def test_create_then_append(self, workspace):
        first = datetime(2026, 10, 18, 9, 15, 0)
        note, created = add_daily_note("Finished the router", workspace, now=first)

        assert created is True
        assert note == workspace / "memory" / "2026-10-18.md"
        assert note.read_text(encoding="utf-8") == (
            "# Daily Notes - 2026-10-18\n\n## 2026-10-18 09:15:00\nFinished the router\n"
        )

        _, created = add_daily_note("Pushed to github", workspace, now=datetime(2026, 10, 18, 11, 0, 0))
        assert created is False
        assert note.read_text(encoding="utf-8").endswith("\n## 2026-10-18 11:00:00\nPushed to github\n")

    def test_review(self, workspace):
        for hour in (8, 9, 10, 11):
            add_daily_note(f"entry {hour}", workspace, now=datetime(2026, 10, 18, hour, 0, 0))

        today, yesterday = review_notes(workspace, today=date(2026, 10, 18))
        assert today.exists
        assert today.entries == 4
        assert today.recent_titles == ["2026-10-18 09:00:00", "2026-10-18 10:00:00", "2026-10-18 11:00:00"]
        assert not yesterday.exists
        assert yesterday.day == date(2026, 10, 17)

    def test_review_yesterday(self, populated_workspace):
        today, yesterday = review_notes(populated_workspace, today=date(2026, 10, 18))
        assert not today.exists
        assert yesterday.entries == 1


class TestCompressionCheck:

    def test_missing_script(self, tmp_path):
        result = run_compression_check(tmp_path, script=tmp_path / "nope.py")
        assert result.available is False

    def test_successful_run(self, tmp_path):
        script = tmp_path / "mem_compress.py"
        script.write_text("import sys\nprint('mode=' + sys.argv[2])\n", encoding="utf-8")

        result = run_compression_check(tmp_path, script=script)
        assert result.available and result.ok
        assert "mode=benchmark" in result.output

    def test_failed_run(self, tmp_path):
        script = tmp_path / "mem_compress.py"
        script.write_text("import sys\nsys.stderr.write('boom')\nsys.exit(3)\n", encoding="utf-8")

        result = run_compression_check(tmp_path, script=script)
        assert result.available and not result.ok
        assert result.error == "boom"


class TestTokens:

    def test_empty(self):
        assert estimate_tokens("") == 0

    def test_fallback_estimate(self, offline_tokens):
        assert estimate_tokens("abcdefghi") == 3

    def test_tiktoken_estimate(self):
        from smartpreload import tokens
        if tokens._encoding() is None:
            pytest.skip("cl100k_base encoding not available offline")
        assert 0 < estimate_tokens("Hello, world!") < 10

    def test_format_bytes(self):
        assert format_bytes(0) == "0 B"
        assert format_bytes(512) == "512.00 B"
        assert format_bytes(1024) == "1.00 KB"
        assert format_bytes(3 * 1024 * 1024) == "3.00 MB"
