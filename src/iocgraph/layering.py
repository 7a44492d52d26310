"""Layered placement of an indicator graph.

Builds incoming/outgoing adjacency from raw edges, finds roots, and
assigns every edge-bearing indicator a depth equal to its longest
distance from a root. Indicators are then grouped into dense layers
``0..max_depth``; indicators with no edges at all are returned
separately as isolated nodes.

Example:
    graph = build_layered_graph(records, canvas["edges"], total_nodes=len(canvas["nodes"]))
    for depth, layer in enumerate(graph.layers):
        print(depth, [node.id for node in layer])
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Any

from iocgraph.edges import EdgeResolver
from iocgraph.models import (
    GraphDiagnostics,
    IndicatorRecord,
    LayeredGraph,
    LayeredNode,
    require_collection,
    require_records,
)

logger = logging.getLogger(__name__)


def build_layered_graph(
    records: Iterable[IndicatorRecord],
    raw_edges: Iterable[Any],
    *,
    total_nodes: int | None = None,
    resolver: EdgeResolver | None = None,
) -> LayeredGraph:
    """Place indicators into depth layers.

    Args:
        records: Parsed indicator records (one per indicator node)
        raw_edges: Raw edge descriptors in any encoding the resolver knows
        total_nodes: Raw node count before extraction, for diagnostics
            (defaults to the number of records)
        resolver: Edge endpoint resolver (defaults to the built-in chain)

    Returns:
        LayeredGraph with layers, display edges, isolated nodes and counters

    Raises:
        TypeError: If ``records`` or ``raw_edges`` is not a collection.
    """
    record_list = require_records(records)
    edge_list = require_collection(raw_edges, "raw_edges")
    resolver = resolver or EdgeResolver()
    if total_nodes is None:
        total_nodes = len(record_list)

    diagnostics = GraphDiagnostics(total_nodes=total_nodes, total_edges=len(edge_list))
    if total_nodes == 0 and not record_list:
        logger.debug("No nodes in snapshot")
        return LayeredGraph(diagnostics=diagnostics, graph_found=False)

    # Step 1: index records
    index: dict[str, IndicatorRecord] = {}
    for record in record_list:
        index[record.id] = record
    outgoing: dict[str, list[str]] = {node_id: [] for node_id in index}
    incoming: dict[str, list[str]] = {node_id: [] for node_id in index}
    diagnostics.indicator_count = len(index)

    if not index:
        diagnostics.dropped_edge_count = len(edge_list)
        return LayeredGraph(diagnostics=diagnostics)

    # Step 2: resolve edges, multiplicity preserved
    resolution = resolver.resolve_all(edge_list, index)
    for edge in resolution.edges:
        outgoing[edge.from_id].append(edge.to_id)
        incoming[edge.to_id].append(edge.from_id)
    diagnostics.valid_connection_count = len(resolution.edges)
    diagnostics.dropped_edge_count = resolution.dropped

    # Step 3: roots
    roots = [node_id for node_id in index if outgoing[node_id] and not incoming[node_id]]
    diagnostics.root_count = len(roots)
    logger.debug("Found %d root(s) among %d indicators", len(roots), len(index))

    # Steps 4-5: depths
    depths = assign_max_depths(roots, outgoing)
    for node_id in index:
        if node_id in depths or not (outgoing[node_id] or incoming[node_id]):
            continue
        logger.debug("Recovering orphaned component from %s", node_id)
        for reached_id, depth in _bfs_depths(node_id, outgoing).items():
            depths.setdefault(reached_id, depth)

    # Steps 6-7: layers and isolated nodes
    layers = assemble_layers(index, depths)
    isolated = [
        record
        for node_id, record in index.items()
        if not outgoing[node_id] and not incoming[node_id]
    ]

    return LayeredGraph(
        layers=layers,
        edges=list(resolution.edges),
        isolated_nodes=isolated,
        diagnostics=diagnostics,
    )


def assign_max_depths(roots: list[str], outgoing: dict[str, list[str]]) -> dict[str, int]:
    """Assign each node reachable from ``roots`` its longest distance from a root.

    FIFO traversal over a mutable depth table. A node seen again at a
    greater depth has its depth raised and is expanded again so that its
    descendants are raised as well. Nodes on a directed cycle are expanded
    once only, which keeps the traversal finite; outside cycles the result
    is the exact longest-path depth.

    Args:
        roots: Identifiers with no incoming edges
        outgoing: Adjacency list (node id -> successor ids)

    Returns:
        Mapping of node id to depth
    """
    cyclic = find_cyclic_nodes(outgoing)
    depths: dict[str, int] = {}
    queue: deque[tuple[str, int]] = deque((root, 0) for root in roots)

    while queue:
        node_id, depth = queue.popleft()
        known = depths.get(node_id)
        if known is not None:
            if depth <= known:
                continue
            depths[node_id] = depth
            if node_id in cyclic:
                continue
        else:
            depths[node_id] = depth

        for successor in outgoing.get(node_id, ()):
            queue.append((successor, depth + 1))

    return depths


def _bfs_depths(start_id: str, outgoing: dict[str, list[str]]) -> dict[str, int]:
    """Plain first-arrival BFS from one seed with its own visited set."""
    depths = {start_id: 0}
    queue: deque[str] = deque([start_id])
    while queue:
        node_id = queue.popleft()
        for successor in outgoing.get(node_id, ()):
            if successor not in depths:
                depths[successor] = depths[node_id] + 1
                queue.append(successor)
    return depths


def find_cyclic_nodes(outgoing: dict[str, list[str]]) -> set[str]:
    """Return the nodes that lie on at least one directed cycle.

    A node is cyclic when its strongly connected component has more than
    one member or it has a self-loop. Uses Tarjan's algorithm with an
    explicit stack.
    """
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    cyclic: set[str] = set()
    counter = 0

    for start in outgoing:
        if start in index_of:
            continue
        work: list[tuple[str, int]] = [(start, 0)]
        while work:
            node_id, position = work.pop()
            if position == 0:
                index_of[node_id] = lowlink[node_id] = counter
                counter += 1
                stack.append(node_id)
                on_stack.add(node_id)

            successors = outgoing.get(node_id, [])
            descended = False
            while position < len(successors):
                successor = successors[position]
                position += 1
                if successor not in index_of:
                    work.append((node_id, position))
                    work.append((successor, 0))
                    descended = True
                    break
                if successor in on_stack:
                    lowlink[node_id] = min(lowlink[node_id], index_of[successor])
            if descended:
                continue

            if lowlink[node_id] == index_of[node_id]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node_id:
                        break
                if len(component) > 1 or node_id in successors:
                    cyclic.update(component)

            if work:
                parent_id = work[-1][0]
                lowlink[parent_id] = min(lowlink[parent_id], lowlink[node_id])

    return cyclic


def assemble_layers(
    index: dict[str, IndicatorRecord],
    depths: dict[str, int],
) -> list[list[LayeredNode]]:
    """Group depth-assigned nodes into a dense list of layers.

    Every depth from 0 to the maximum has a layer, empty or not. Nodes
    within a layer keep the input order of their records.
    """
    if not depths:
        return []
    layers: list[list[LayeredNode]] = [[] for _ in range(max(depths.values()) + 1)]
    for node_id, record in index.items():
        depth = depths.get(node_id)
        if depth is not None:
            layers[depth].append(LayeredNode(record=record, id=node_id, depth=depth))
    return layers
