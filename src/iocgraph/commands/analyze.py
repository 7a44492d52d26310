"""
iocgraph.commands.analyze - Analyze an indicator snapshot.

Runs the layering pass, the hierarchy pass, or the chronological ordering
over a snapshot file and prints the result as text or JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from iocgraph.config import ConfigError, load_config
from iocgraph.edges import EdgeResolver
from iocgraph.hierarchy import build_parent_child_groups
from iocgraph.layering import build_layered_graph
from iocgraph.serialize import (
    hierarchy_to_text,
    layers_to_text,
    serialize_hierarchy,
    serialize_layered_graph,
    serialize_timeline,
    timeline_to_text,
)
from iocgraph.snapshot import Snapshot, SnapshotError, load_snapshot
from iocgraph.timeline import build_time_timeline

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    """Run the analyze command."""
    if not args.analyze_action:
        print("Usage: iocgraph analyze {layers|hierarchy|timeline} SNAPSHOT")
        return 1

    config = load_configuration(args)
    if config is None:
        return 1

    snapshot = read_snapshot(args.snapshot)
    if snapshot is None:
        return 1

    output_format = args.format or config["output"]["format"]

    if args.analyze_action == "layers":
        return run_layers(snapshot, config, output_format)
    elif args.analyze_action == "hierarchy":
        return run_hierarchy(snapshot, config, output_format)
    elif args.analyze_action == "timeline":
        return run_timeline(snapshot, config, output_format)

    return 1


def run_layers(snapshot: Snapshot, config: Dict[str, Any], output_format: str) -> int:
    """Print the layered placement of the snapshot."""
    graph = build_layered_graph(
        snapshot.records,
        snapshot.edges,
        total_nodes=snapshot.total_nodes,
        resolver=EdgeResolver.from_config(config),
    )
    d = graph.diagnostics
    logger.info(
        "Layered %d indicators into %d layer(s); %d edge(s) dropped",
        d.indicator_count,
        len(graph.layers),
        d.dropped_edge_count,
    )
    emit(serialize_layered_graph(graph) if output_format == "json" else layers_to_text(graph))
    return 0


def run_hierarchy(snapshot: Snapshot, config: Dict[str, Any], output_format: str) -> int:
    """Print the parent/child groups of the snapshot."""
    result = build_parent_child_groups(
        snapshot.records,
        snapshot.edges,
        resolver=EdgeResolver.from_config(config),
        time_formats=config["timeline"]["formats"],
    )
    emit(serialize_hierarchy(result) if output_format == "json" else hierarchy_to_text(result))
    return 0


def run_timeline(snapshot: Snapshot, config: Dict[str, Any], output_format: str) -> int:
    """Print the snapshot's records in chronological order."""
    timeline = build_time_timeline(snapshot.records, config["timeline"]["formats"])
    emit(serialize_timeline(timeline) if output_format == "json" else timeline_to_text(timeline))
    return 0


def emit(payload: Any) -> None:
    """Write a text listing or a JSON document to stdout."""
    if isinstance(payload, str):
        print(payload)
    else:
        print(json.dumps(payload, indent=2))


def load_configuration(args: argparse.Namespace) -> Optional[Dict[str, Any]]:
    """Load configuration from file or use defaults."""
    try:
        return load_config(getattr(args, "config", None))
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None


def read_snapshot(path: Path) -> Optional[Snapshot]:
    """Load the snapshot, reporting problems on stderr."""
    try:
        return load_snapshot(path)
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
