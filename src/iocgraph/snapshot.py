"""Snapshot input.

A snapshot is one atomic copy of the nodes and edges produced by the
extraction layer, stored as JSON::

    {
      "nodes": [{"id": "n1", "type": "IP Address", "time": "...", "isChild": false}, ...],
      "edges": [{"fromNode": "n1", "toNode": "n2", "label": "beacons to"}, ...]
    }

Nodes without an indicator ``type`` are counted but not turned into
records. Edges are kept raw; endpoint resolution happens in the passes.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from iocgraph.models import IndicatorRecord


class SnapshotError(ValueError):
    """Raised when a snapshot document does not have the expected shape."""


@dataclass
class Snapshot:
    """
    Records and raw edges of one snapshot.

    Attributes:
        records: Indicator records, in node order
        edges: Raw edge descriptors, as found in the document
        total_nodes: Number of nodes in the document, indicator or not
    """

    records: list[IndicatorRecord] = field(default_factory=list)
    edges: list[Any] = field(default_factory=list)
    total_nodes: int = 0


def snapshot_from_dict(data: Any) -> Snapshot:
    """Build a snapshot from an already-decoded JSON document.

    Raises:
        SnapshotError: If the document or one of its nodes is malformed.
    """
    if not isinstance(data, Mapping):
        raise SnapshotError("Snapshot must be a JSON object with 'nodes' and 'edges'")

    nodes = data.get("nodes", [])
    edges = data.get("edges", [])
    if not isinstance(nodes, list):
        raise SnapshotError("Snapshot 'nodes' must be a list")
    if not isinstance(edges, list):
        raise SnapshotError("Snapshot 'edges' must be a list")

    records = []
    for index, node in enumerate(nodes):
        if not isinstance(node, Mapping):
            raise SnapshotError(f"Snapshot node {index} must be an object")
        if not node.get("type"):
            continue
        try:
            records.append(IndicatorRecord.from_dict(node))
        except ValueError as e:
            raise SnapshotError(f"Snapshot node {index}: {e}") from e

    return Snapshot(records=records, edges=list(edges), total_nodes=len(nodes))


def load_snapshot(path: Path) -> Snapshot:
    """Read a snapshot JSON file.

    Raises:
        SnapshotError: If the file cannot be read or decoded.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e
    return snapshot_from_dict(data)
