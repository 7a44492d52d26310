"""CLI tests.

Most cases call ``main()`` in-process; one smoke test runs the module as
a subprocess to check the entry point.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from iocgraph.cli import create_parser, main


def _run_iocgraph(*args: str, cwd: str | Path | None = None) -> subprocess.CompletedProcess:
    """Run iocgraph as a subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "iocgraph", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        timeout=60,
    )


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test from an empty directory so no config file is found."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


class TestParser:
    """Tests for create_parser()."""

    def test_analyze_arguments(self):
        args = create_parser().parse_args(["analyze", "layers", "case.json", "-f", "json"])

        assert args.command == "analyze"
        assert args.analyze_action == "layers"
        assert args.snapshot == Path("case.json")
        assert args.format == "json"

    def test_format_defaults_to_config(self):
        args = create_parser().parse_args(["analyze", "timeline", "case.json"])
        assert args.format is None

    def test_bad_format_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["analyze", "layers", "case.json", "-f", "xml"])


class TestMain:
    """Top-level dispatch."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: iocgraph" in capsys.readouterr().out

    def test_analyze_without_action(self, capsys):
        assert main(["analyze"]) == 1
        assert "Usage: iocgraph analyze" in capsys.readouterr().out

    def test_missing_snapshot(self, capsys, tmp_path):
        assert main(["analyze", "layers", str(tmp_path / "missing.json")]) == 1
        assert "Cannot read snapshot" in capsys.readouterr().err


class TestAnalyzeLayers:
    """iocgraph analyze layers."""

    def test_text(self, capsys, snapshot_file):
        assert main(["analyze", "layers", str(snapshot_file)]) == 0
        out = capsys.readouterr().out

        assert "Indicators: 5 of 6 nodes" in out
        assert "Connections: 3 of 4 edges" in out
        assert "Layer 3:" in out
        assert "p1 -> c1 [spawned]" in out
        assert "Isolated:" in out and "(solo)" in out

    def test_json(self, capsys, snapshot_file):
        assert main(["analyze", "layers", str(snapshot_file), "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)

        assert [[n["id"] for n in layer] for layer in data["layers"]] == [["p1"], ["c1"], ["c2"], ["p2"]]
        assert data["diagnostics"]["droppedEdgeCount"] == 1
        assert [r["id"] for r in data["isolatedNodes"]] == ["solo"]

    def test_output_format_from_config(self, capsys, snapshot_file, isolated_cwd):
        (isolated_cwd / ".iocgraph.toml").write_text('[output]\nformat = "json"\n', encoding="utf-8")

        assert main(["analyze", "layers", str(snapshot_file)]) == 0
        assert json.loads(capsys.readouterr().out)["graphFound"] is True

    def test_edge_fields_from_config(self, capsys, tmp_path):
        snapshot = tmp_path / "custom.json"
        snapshot.write_text(
            json.dumps(
                {
                    "nodes": [{"id": "a", "type": "IP Address"}, {"id": "b", "type": "Domain Name"}],
                    "edges": [{"parent": "a", "child": "b"}],
                }
            ),
            encoding="utf-8",
        )
        config = tmp_path / "custom.toml"
        config.write_text('[edges]\nfrom_fields = ["parent"]\nto_fields = ["child"]\n', encoding="utf-8")

        assert main(["--config", str(config), "analyze", "layers", str(snapshot), "-f", "json"]) == 0
        data = json.loads(capsys.readouterr().out)

        assert data["edges"] == [{"fromId": "a", "toId": "b", "label": ""}]

    def test_bad_config(self, capsys, snapshot_file, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text('[output]\nformat = "yaml"\n', encoding="utf-8")

        assert main(["--config", str(config), "analyze", "layers", str(snapshot_file)]) == 1
        assert "Error loading config" in capsys.readouterr().err


class TestAnalyzeHierarchy:
    """iocgraph analyze hierarchy."""

    def test_json(self, capsys, snapshot_file):
        assert main(["analyze", "hierarchy", str(snapshot_file), "-f", "json"]) == 0
        data = json.loads(capsys.readouterr().out)

        group = data["groups"][0]
        assert group["parent"]["id"] == "p1"
        assert group["children"][0]["parent"]["id"] == "c1"
        assert [r["id"] for r in data["directionalErrors"]] == ["p2"]

    def test_text_reports_bad_arrow(self, capsys, snapshot_file):
        assert main(["analyze", "hierarchy", str(snapshot_file)]) == 0
        out = capsys.readouterr().out

        assert out.startswith("[P] IP Address 10.0.0.5")
        assert "Child-to-parent arrows (1):" in out


class TestAnalyzeTimeline:
    """iocgraph analyze timeline."""

    def test_json(self, capsys, snapshot_file):
        assert main(["analyze", "timeline", str(snapshot_file), "-f", "json"]) == 0
        data = json.loads(capsys.readouterr().out)

        assert [r["id"] for r in data["entries"]] == ["solo", "p1", "c1", "c2", "p2"]
        assert data["start"] == "2026-02-14 09:00:00"
        assert data["end"] == "2026-02-14 16:00:00"


class TestConfigCommand:
    """iocgraph config."""

    def test_path_without_file(self, capsys):
        assert main(["config", "path"]) == 0
        assert "No .iocgraph.toml found" in capsys.readouterr().out

    def test_path_with_file(self, capsys, isolated_cwd):
        (isolated_cwd / ".iocgraph.toml").write_text("", encoding="utf-8")

        assert main(["config", "path"]) == 0
        assert ".iocgraph.toml" in capsys.readouterr().out

    def test_show(self, capsys):
        assert main(["config", "show"]) == 0
        out = capsys.readouterr().out

        assert "[edges]" in out
        assert 'format = "text"' in out

    def test_without_action(self, capsys):
        assert main(["config"]) == 1


class TestEntryPoint:
    """python -m iocgraph."""

    def test_version(self):
        result = _run_iocgraph("--version")

        assert result.returncode == 0
        assert result.stdout.startswith("iocgraph ")
