"""CLI tests for smartpreload."""
import json

import pytest

from smartpreload import cli


class TestCLI:

    def test_commands_exist(self):
        expected = ['cmd_preload', 'cmd_status', 'cmd_reset', 'cmd_cleanup', 'cmd_footprint',
                    'cmd_search', 'cmd_add', 'cmd_review', 'cmd_compress', 'cmd_version']
        for cmd in expected:
            assert hasattr(cli, cmd), f"Missing command: {cmd}"

    def test_no_command_prints_help(self, workspace, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main([])
        assert exc.value.code == 0
        assert "preload" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["preload", "search", "add"])
    def test_missing_argument_exits_nonzero(self, workspace, command):
        with pytest.raises(SystemExit) as exc:
            cli.main([command])
        assert exc.value.code != 0

    def test_preload_report(self, populated_workspace, capsys):
        cli.main(["preload", "push", "to", "github"])
        out = capsys.readouterr().out

        assert "Smart Preload Report" in out
        assert 'read("SOUL.md")' in out
        assert 'memory_search({query: "push to github", maxResults: 5})' in out
        assert "Estimated preload" in out
        assert (populated_workspace / ".session-hotspots.json").exists()

    def test_preload_json(self, workspace, capsys):
        for _ in range(3):
            cli.main(["preload", "--json", "swap some eth"])
            out = capsys.readouterr().out

        data = json.loads(out)
        assert data["tier1"] == ["SOUL.md", "USER.md", "AGENTS.md"]
        assert "MEMORY.md#DeFi Operations" in data["tier3"]
        assert 'read("MEMORY.md") // focus: DeFi Operations' in data["commands"]

    def test_status_after_preloads(self, workspace, capsys):
        for _ in range(3):
            cli.main(["preload", "commit to the repo"])
        capsys.readouterr()

        cli.main(["status"])
        out = capsys.readouterr().out
        assert "Current Hot Topics" in out
        assert "github" in out
        assert "count=3" in out
        assert "commit to the repo" in out

    def test_status_empty(self, workspace, capsys):
        cli.main(["status"])
        out = capsys.readouterr().out
        assert "No hot topics detected yet." in out
        assert "(empty)" in out

    def test_reset(self, workspace, capsys):
        cli.main(["preload", "github"])
        capsys.readouterr()

        cli.main(["reset"])
        assert "reset" in capsys.readouterr().out
        assert not (workspace / ".session-hotspots.json").exists()

        cli.main(["reset"])
        assert "No session cache" in capsys.readouterr().out

    def test_reset_recovers_from_malformed_state(self, workspace, capsys):
        state_file = workspace / ".session-hotspots.json"
        state_file.write_text(json.dumps({"topics": []}), encoding="utf-8")

        cli.main(["reset"])
        captured = capsys.readouterr()
        assert "reset" in captured.out
        assert "WARN" in captured.err
        assert not state_file.exists()

    def test_cleanup_keeps_core(self, workspace, capsys):
        cli.main(["preload", "github"])
        capsys.readouterr()

        cli.main(["cleanup"])
        out = capsys.readouterr().out
        assert "Core principles retained: SOUL.md, USER.md, AGENTS.md" in out
        assert not (workspace / ".session-hotspots.json").exists()

    def test_workspace_config_override(self, workspace, capsys):
        (workspace / "preload.json").write_text(json.dumps({
            "always_load": ["CORE.md"],
            "hotspot": {"threshold_count": 1},
        }), encoding="utf-8")

        cli.main(["preload", "--json", "swap eth"])
        data = json.loads(capsys.readouterr().out)
        assert data["tier1"] == ["CORE.md"]
        assert data["tier3"]

    def test_footprint(self, populated_workspace, capsys):
        cli.main(["footprint"])
        out = capsys.readouterr().out
        assert "✓ SOUL.md" in out
        assert "✗ MEMORY.md" in out
        assert "Codebook active (2 entries)" in out

    def test_search(self, populated_workspace, capsys):
        cli.main(["search", "github"])
        out = capsys.readouterr().out
        assert "TOOLS.md:3" in out

    def test_add_and_review(self, workspace, capsys):
        cli.main(["add", "finished", "the", "router"])
        assert "Created new daily note" in capsys.readouterr().out

        cli.main(["review"])
        assert "1 entries" in capsys.readouterr().out

    def test_compress_not_installed(self, workspace, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr("smartpreload.config.COMPRESSOR_SCRIPT", tmp_path / "missing.py")

        cli.main(["compress"])
        assert "not installed" in capsys.readouterr().out

    def test_version(self, capsys):
        from smartpreload import __version__
        cli.main(["version"])
        assert __version__ in capsys.readouterr().out

    def test_command_error_exits_1(self, workspace, monkeypatch, capsys):
        def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")
        monkeypatch.setattr("smartpreload.workspace.search_workspace", boom)

        with pytest.raises(SystemExit) as exc:
            cli.main(["search", "x"])
        assert exc.value.code == 1
        assert "Error: disk on fire" in capsys.readouterr().err
