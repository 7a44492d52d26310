"""Shared pytest fixtures."""

import json

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep IOCGRAPH_* variables from the host out of every test."""
    import os

    for name in list(os.environ):
        if name.startswith("IOCGRAPH_"):
            monkeypatch.delenv(name)


@pytest.fixture
def sample_snapshot():
    """Snapshot document with a parent chain, a bad arrow and an isolated card."""
    return {
        "nodes": [
            {"id": "p1", "type": "IP Address", "value": "10.0.0.5", "time": "2026-02-14 15:34:00"},
            {
                "id": "c1",
                "type": "Process Name",
                "value": "powershell.exe",
                "time": "2026-02-14 15:40:00",
                "isChild": True,
            },
            {
                "id": "c2",
                "type": "File Hash",
                "value": "d41d8cd98f00b204e9800998ecf8427e",
                "time": "2026-02-14 15:45:00",
                "isChild": True,
            },
            {"id": "p2", "type": "Domain Name", "value": "evil.example", "time": "2026-02-14 16:00:00"},
            {"id": "solo", "type": "Note", "time": "2026-02-14 09:00:00"},
            {"id": "text-only", "text": "just a note without an indicator"},
        ],
        "edges": [
            {"id": "e1", "fromNode": "p1", "toNode": "c1", "label": "spawned"},
            {"id": "e2", "fromNode": "c1", "toNode": "c2", "label": "dropped"},
            {"id": "e3", "fromNode": "c2", "toNode": "p2", "label": "beacons to"},
            {"id": "e4", "fromNode": "p1", "toNode": "text-only"},
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path, sample_snapshot):
    """Write the sample snapshot to disk and return its path."""
    path = tmp_path / "case.json"
    path.write_text(json.dumps(sample_snapshot), encoding="utf-8")
    return path
