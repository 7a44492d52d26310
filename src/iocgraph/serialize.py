"""Serialization - Export pass results to JSON-compatible dicts and text.

Dict keys follow the camelCase contract the presentation layer consumes
(``isolatedNodes``, ``directionalErrors``, ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from iocgraph.models import (
    Edge,
    HierarchyResult,
    IndicatorRecord,
    LayeredGraph,
    ParentChildGroup,
)
from iocgraph.timeline import TimeTimeline


def serialize_record(record: IndicatorRecord) -> dict[str, Any]:
    """Serialize an IndicatorRecord to a JSON-compatible dict."""
    result: dict[str, Any] = {
        "id": record.id,
        "type": record.type,
        "value": record.value,
        "time": record.time,
        "splunkQuery": record.splunk_query,
        "tactic": record.tactic,
        "technique": record.technique,
        "icon": record.icon,
        "color": record.color,
    }
    if record.card_id is not None:
        result["cardId"] = record.card_id
    if record.is_child:
        result["isChild"] = True
    return result


def serialize_edge(edge: Edge) -> dict[str, Any]:
    """Serialize an Edge to a JSON-compatible dict."""
    return {"fromId": edge.from_id, "toId": edge.to_id, "label": edge.label}


def serialize_layered_graph(graph: LayeredGraph) -> dict[str, Any]:
    """Serialize a LayeredGraph to a JSON-compatible dict.

    Args:
        graph: Result of the layering pass.

    Returns:
        Dict with layers, edges, isolatedNodes and diagnostics.
    """
    diagnostics = graph.diagnostics
    return {
        "graphFound": graph.graph_found,
        "layers": [
            [
                {"id": node.id, "depth": node.depth, "data": serialize_record(node.record)}
                for node in layer
            ]
            for layer in graph.layers
        ],
        "edges": [serialize_edge(edge) for edge in graph.edges],
        "isolatedNodes": [serialize_record(record) for record in graph.isolated_nodes],
        "diagnostics": {
            "totalNodes": diagnostics.total_nodes,
            "totalEdges": diagnostics.total_edges,
            "indicatorCount": diagnostics.indicator_count,
            "validConnectionCount": diagnostics.valid_connection_count,
            "rootCount": diagnostics.root_count,
            "droppedEdgeCount": diagnostics.dropped_edge_count,
        },
    }


def serialize_group(group: ParentChildGroup) -> dict[str, Any]:
    """Serialize a ParentChildGroup and all nested groups."""
    result: dict[str, Any] = {"parent": serialize_record(group.parent), "children": []}
    stack = [(group, result["children"])]
    while stack:
        current, children = stack.pop()
        for child in current.children:
            if isinstance(child, ParentChildGroup):
                nested = {"parent": serialize_record(child.parent), "children": []}
                children.append(nested)
                stack.append((child, nested["children"]))
            else:
                children.append(serialize_record(child))
    return result


def serialize_hierarchy(result: HierarchyResult) -> dict[str, Any]:
    """Serialize a HierarchyResult to a JSON-compatible dict."""
    return {
        "groups": [serialize_group(group) for group in result.groups],
        "directionalErrors": [serialize_record(r) for r in result.directional_errors],
        "orphanedChains": [serialize_record(r) for r in result.orphaned_chains],
    }


def _format_ts(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def serialize_timeline(timeline: TimeTimeline) -> dict[str, Any]:
    """Serialize a TimeTimeline to a JSON-compatible dict."""
    return {
        "entries": [serialize_record(r) for r in timeline.entries],
        "undated": [serialize_record(r) for r in timeline.undated],
        "start": _format_ts(timeline.start),
        "end": _format_ts(timeline.end),
    }


def _describe(record: IndicatorRecord) -> str:
    role = "C" if record.is_child else "P"
    parts = [f"[{role}] {record.type}"]
    if record.value:
        parts.append(record.value)
    if record.time:
        parts.append(f"@ {record.time}")
    return f"{' '.join(parts)} ({record.id})"


def layers_to_text(graph: LayeredGraph) -> str:
    """Render a LayeredGraph as a plain-text listing."""
    if not graph.graph_found:
        return "No graph found"

    d = graph.diagnostics
    lines = [
        f"Indicators: {d.indicator_count} of {d.total_nodes} nodes | "
        f"Connections: {d.valid_connection_count} of {d.total_edges} edges | "
        f"Roots: {d.root_count}",
    ]
    for depth, layer in enumerate(graph.layers):
        lines.append(f"Layer {depth}:")
        if not layer:
            lines.append("  (empty)")
        for node in layer:
            lines.append(f"  {_describe(node.record)}")

    if graph.edges:
        lines.append("Edges:")
        for edge in graph.edges:
            label = f" [{edge.label}]" if edge.label else ""
            lines.append(f"  {edge.from_id} -> {edge.to_id}{label}")

    if graph.isolated_nodes:
        lines.append("Isolated:")
        for record in graph.isolated_nodes:
            lines.append(f"  {_describe(record)}")

    return "\n".join(lines)


def hierarchy_to_text(result: HierarchyResult) -> str:
    """Render a HierarchyResult as an indented outline."""
    lines: list[str] = []
    if not result.groups:
        lines.append("No parent-child relationships found")

    stack: list[tuple[IndicatorRecord | ParentChildGroup, int]] = [
        (group, 0) for group in reversed(result.groups)
    ]
    while stack:
        entry, indent = stack.pop()
        if isinstance(entry, ParentChildGroup):
            lines.append("  " * indent + _describe(entry.parent))
            stack.extend((child, indent + 1) for child in reversed(entry.children))
        else:
            lines.append("  " * indent + _describe(entry))

    if result.directional_errors:
        lines.append("")
        lines.append(f"Child-to-parent arrows ({len(result.directional_errors)}):")
        for record in result.directional_errors:
            lines.append(f"  {_describe(record)}")

    if result.orphaned_chains:
        lines.append("")
        lines.append(f"Child chains without a parent ({len(result.orphaned_chains)}):")
        for record in result.orphaned_chains:
            lines.append(f"  {_describe(record)}")

    return "\n".join(lines)


def timeline_to_text(timeline: TimeTimeline) -> str:
    """Render a TimeTimeline as one line per record."""
    lines = [_describe(record) for record in timeline.entries]
    if not lines:
        lines.append("No indicators with valid timestamps found")
    if timeline.undated:
        lines.append(f"Undated ({len(timeline.undated)}):")
        lines.extend(f"  {_describe(record)}" for record in timeline.undated)
    return "\n".join(lines)
