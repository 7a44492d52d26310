"""
Parent/child hierarchy building.

Groups indicator records into rooted parent/child trees using the edge
direction (from = parent, to = child) and the role tag on each record:
- Root discovery
- Cycle-safe recursive descent
- Chronological ordering of groups and children
- Detection of edges pointing the wrong way
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from iocgraph.edges import EdgeResolver
from iocgraph.models import (
    HierarchyResult,
    IndicatorRecord,
    ParentChildGroup,
    require_collection,
    require_records,
)
from iocgraph.timeline import sort_chronologically

logger = logging.getLogger(__name__)


def _entry_time(entry: IndicatorRecord | ParentChildGroup) -> str:
    if isinstance(entry, ParentChildGroup):
        return entry.parent.time
    return entry.time


class HierarchyBuilder:
    """Builds parent/child groups from one snapshot of records and edges.

    Adjacency is built once in the constructor; ``build()`` may be called
    any number of times and always returns fresh structures.

    Example:
        builder = HierarchyBuilder(records, edges)
        result = builder.build()
    """

    def __init__(
        self,
        records: Iterable[IndicatorRecord],
        edges: Iterable[Any],
        resolver: EdgeResolver | None = None,
        time_formats: Sequence[str] = (),
    ) -> None:
        """Index records and build the edge maps.

        Args:
            records: Indicator records with their role flags
            edges: Normalized edges (``Edge`` instances or raw descriptors)
            resolver: Edge endpoint resolver (defaults to the built-in chain)
            time_formats: Extra ``strptime`` formats for ordering

        Raises:
            TypeError: If ``records`` or ``edges`` is not a collection.
        """
        record_list = require_records(records)
        edge_list = require_collection(edges, "edges")
        self.time_formats = tuple(time_formats)

        self._records: dict[str, IndicatorRecord] = {}
        for record in record_list:
            self._records[record.id] = record

        # Ordered sets (dict keys) keep iteration deterministic
        self._outgoing: dict[str, dict[str, None]] = {}
        self._has_incoming: set[str] = set()
        self._incoming_from: dict[str, dict[str, None]] = {}

        resolution = (resolver or EdgeResolver()).resolve_all(edge_list, self._records)
        for edge in resolution.edges:
            self._outgoing.setdefault(edge.from_id, {})[edge.to_id] = None
            self._has_incoming.add(edge.to_id)
            self._incoming_from.setdefault(edge.to_id, {})[edge.from_id] = None

    def is_root(self, node_id: str) -> bool:
        """Check whether a record heads its own top-level group.

        A root has outgoing edges and is either parent-role or has no
        incoming edge. Parent-role records are never nested under anything.
        """
        record = self._records.get(node_id)
        if record is None or not self._outgoing.get(node_id):
            return False
        return not record.is_child or node_id not in self._has_incoming

    def build(self) -> HierarchyResult:
        """Build groups and run the direction checks."""
        groups: list[ParentChildGroup] = []
        for node_id in self._outgoing:
            if not self.is_root(node_id):
                continue
            children = self._build_children(node_id)
            groups.append(ParentChildGroup(parent=self._records[node_id], children=children))

        logger.debug("Built %d root group(s)", len(groups))
        return HierarchyResult(
            groups=sort_chronologically(groups, _entry_time, self.time_formats),
            directional_errors=self.find_directional_errors(),
            orphaned_chains=self.find_orphaned_chains(),
        )

    def _build_children(self, parent_id: str) -> list[IndicatorRecord | ParentChildGroup]:
        """Collect the children of ``parent_id``, nesting child-role branches.

        Depth-first over an explicit stack of frames, each holding a node's
        successor iterator and its children list. ``on_path`` holds the
        identifiers on the current branch only, so sibling branches may
        share nodes while a cycle stops at the first repeat. Each level is
        sorted once its frame is finished.
        """
        top_level: list[IndicatorRecord | ParentChildGroup] = []
        on_path = {parent_id}
        stack = [(parent_id, iter(self._outgoing.get(parent_id, {})), top_level)]

        while stack:
            node_id, successors, children = stack[-1]
            for child_id in successors:
                if child_id in on_path:
                    continue
                child = self._records[child_id]
                # Parent-role records only ever head their own group
                if not child.is_child:
                    continue
                if self._outgoing.get(child_id):
                    nested: list[IndicatorRecord | ParentChildGroup] = []
                    children.append(ParentChildGroup(parent=child, children=nested))
                    on_path.add(child_id)
                    stack.append((child_id, iter(self._outgoing[child_id]), nested))
                    break
                children.append(child)
            else:
                stack.pop()
                on_path.discard(node_id)
                children[:] = sort_chronologically(children, _entry_time, self.time_formats)

        return top_level

    def find_directional_errors(self) -> list[IndicatorRecord]:
        """Find parent-role records with an incoming edge from a child-role record."""
        flagged = []
        for node_id, record in self._records.items():
            if record.is_child:
                continue
            sources = self._incoming_from.get(node_id, {})
            if any(self._records[source_id].is_child for source_id in sources):
                logger.debug("Child-to-parent edge into %s", node_id)
                flagged.append(record)
        return sort_chronologically(flagged, lambda r: r.time, self.time_formats)

    def find_orphaned_chains(self) -> list[IndicatorRecord]:
        """Find child-role records on child-to-child edges with no parent upstream.

        Both ends of such an edge are reported. This is a separate check
        from ``find_directional_errors`` and never affects its result.

        A child's self-loop alone is not a chain and is not reported, which
        differs from the original tool where ``C -> C`` with no parent above
        it is flagged.
        """
        under_parent = self._reachable_from_parents()
        flagged: dict[str, None] = {}
        for target_id, sources in self._incoming_from.items():
            if not self._records[target_id].is_child or target_id in under_parent:
                continue
            for source_id in sources:
                if source_id == target_id or not self._records[source_id].is_child:
                    continue
                flagged[source_id] = None
                flagged[target_id] = None

        records = [self._records[node_id] for node_id in flagged]
        return sort_chronologically(records, lambda r: r.time, self.time_formats)

    def _reachable_from_parents(self) -> set[str]:
        """Identifiers reachable along edges from any parent-role record."""
        reached: set[str] = set()
        stack = [node_id for node_id, record in self._records.items() if not record.is_child]
        while stack:
            current = stack.pop()
            for successor in self._outgoing.get(current, {}):
                if successor not in reached:
                    reached.add(successor)
                    stack.append(successor)
        return reached


def build_parent_child_groups(
    records: Iterable[IndicatorRecord],
    edges: Iterable[Any],
    *,
    resolver: EdgeResolver | None = None,
    time_formats: Sequence[str] = (),
) -> HierarchyResult:
    """Build parent/child groups and direction diagnostics for one snapshot.

    Args:
        records: Indicator records with their role flags
        edges: Normalized edges (``Edge`` instances or raw descriptors)
        resolver: Edge endpoint resolver (defaults to the built-in chain)
        time_formats: Extra ``strptime`` formats for ordering

    Returns:
        HierarchyResult with groups, directional errors and orphaned chains
    """
    return HierarchyBuilder(records, edges, resolver=resolver, time_formats=time_formats).build()
