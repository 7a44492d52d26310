"""
iocgraph.models - Core data models for indicator graphs.

Provides dataclasses for indicator records, edges between them, and the
result structures returned by the layering and hierarchy passes.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(Enum):
    """Advisory role tag attached to an indicator by the extraction layer."""

    PARENT = "parent"
    CHILD = "child"


@dataclass(frozen=True)
class IndicatorRecord:
    """
    One parsed indicator (IOC) record.

    Only ``id``, ``time`` and ``is_child`` are interpreted by the graph
    passes; every other field is carried through untouched for the
    presentation layer.

    Attributes:
        id: Identifier of the source node (unique per graph build)
        type: Indicator type name (e.g., "IP Address", "File Hash")
        value: Primary value of the indicator
        time: Time of event as free text
        splunk_query: Associated search query
        tactic: MITRE ATT&CK tactic annotation
        technique: MITRE ATT&CK technique annotation
        icon: Presentation hint (icon markup or name)
        color: Presentation hint (hex color)
        card_id: Optional human-facing card identifier
        is_child: True for "child" role, False for "parent" role
    """

    id: str
    type: str
    value: str = ""
    time: str = ""
    splunk_query: str = ""
    tactic: str = ""
    technique: str = ""
    icon: str = ""
    color: str = ""
    card_id: str | None = None
    is_child: bool = False

    @property
    def role(self) -> Role:
        """Role derived from the ``is_child`` flag."""
        return Role.CHILD if self.is_child else Role.PARENT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IndicatorRecord:
        """Build a record from an extraction-layer mapping.

        Accepts camelCase keys (``isChild``, ``cardId``, ``splunkQuery``)
        as well as snake_case ones. An explicit ``role`` key wins over
        ``isChild``.

        Raises:
            TypeError: If ``data`` is not a mapping.
            ValueError: If ``id`` is missing or ``role`` is unknown.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Indicator record must be a mapping, got {type(data).__name__}")

        record_id = data.get("id")
        if record_id is None or record_id == "":
            raise ValueError("Indicator record is missing an 'id'")

        is_child = bool(data.get("isChild", data.get("is_child", False)))
        role = data.get("role")
        if role is not None:
            try:
                is_child = Role(str(role).lower()) is Role.CHILD
            except ValueError:
                raise ValueError(f"Unknown role '{role}' on record {record_id}") from None

        return cls(
            id=str(record_id),
            type=str(data.get("type") or ""),
            value=str(data.get("value") or ""),
            time=str(data.get("time") or ""),
            splunk_query=str(data.get("splunkQuery", data.get("splunk_query")) or ""),
            tactic=str(data.get("tactic") or ""),
            technique=str(data.get("technique") or ""),
            icon=str(data.get("icon") or ""),
            color=str(data.get("color") or ""),
            card_id=data.get("cardId", data.get("card_id")),
            is_child=is_child,
        )


@dataclass(frozen=True)
class Edge:
    """A directed relation between two indicator identifiers."""

    from_id: str
    to_id: str
    label: str = ""


@dataclass(frozen=True)
class LayeredNode:
    """An indicator placed at a depth layer."""

    record: IndicatorRecord
    id: str
    depth: int


@dataclass
class ParentChildGroup:
    """
    A parent record and its ordered children.

    Each child is either a leaf ``IndicatorRecord`` or a nested group whose
    ``parent`` is a child-role record with children of its own.
    """

    parent: IndicatorRecord
    children: list[IndicatorRecord | ParentChildGroup] = field(default_factory=list)

    def iter_records(self) -> Iterator[IndicatorRecord]:
        """Walk every record of the group in pre-order."""
        yield self.parent
        yield from self.child_records()

    def child_records(self) -> Iterator[IndicatorRecord]:
        """Walk the records that appear in a child position, at any depth."""
        stack: list[IndicatorRecord | ParentChildGroup] = list(reversed(self.children))
        while stack:
            child = stack.pop()
            if isinstance(child, ParentChildGroup):
                yield child.parent
                stack.extend(reversed(child.children))
            else:
                yield child


@dataclass
class GraphDiagnostics:
    """
    Counters describing one layering pass.

    Attributes:
        total_nodes: Raw nodes seen by the extraction layer
        total_edges: Raw edges handed to the pass
        indicator_count: Nodes that parsed into indicator records
        valid_connection_count: Edges with both endpoints resolved
        root_count: Indicators with outgoing but no incoming edges
        dropped_edge_count: Edges discarded during endpoint resolution
    """

    total_nodes: int = 0
    total_edges: int = 0
    indicator_count: int = 0
    valid_connection_count: int = 0
    root_count: int = 0
    dropped_edge_count: int = 0


@dataclass
class LayeredGraph:
    """Result of the layering pass."""

    layers: list[list[LayeredNode]] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    isolated_nodes: list[IndicatorRecord] = field(default_factory=list)
    diagnostics: GraphDiagnostics = field(default_factory=GraphDiagnostics)
    graph_found: bool = True

    @property
    def max_depth(self) -> int:
        """Deepest layer index, or -1 when there are no layers."""
        return len(self.layers) - 1

    def layered_ids(self) -> list[str]:
        """Identifiers of every layered node, layer by layer."""
        return [node.id for layer in self.layers for node in layer]

    def depth_of(self, node_id: str) -> int | None:
        """Return the depth assigned to ``node_id``, or None if not layered."""
        for layer in self.layers:
            for node in layer:
                if node.id == node_id:
                    return node.depth
        return None


@dataclass
class HierarchyResult:
    """
    Result of the hierarchy pass.

    Attributes:
        groups: Top-level parent/child groups, oldest root first
        directional_errors: Parent-role records with an incoming edge
            from a child-role record
        orphaned_chains: Child-role records on child-to-child edges with
            no parent-role record upstream
    """

    groups: list[ParentChildGroup] = field(default_factory=list)
    directional_errors: list[IndicatorRecord] = field(default_factory=list)
    orphaned_chains: list[IndicatorRecord] = field(default_factory=list)


def require_collection(value: Any, name: str) -> list[Any]:
    """Materialize a caller-supplied collection, rejecting non-collections.

    Raises:
        TypeError: If ``value`` is None, a string, or not iterable.
    """
    if value is None:
        raise TypeError(f"{name} must be a collection, got None")
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise TypeError(f"{name} must be a collection, got {type(value).__name__}")
    return list(value)


def require_records(value: Any) -> list[IndicatorRecord]:
    """Materialize the record collection, checking every element's type.

    Raises:
        TypeError: If the collection or any element has the wrong shape.
    """
    records = require_collection(value, "records")
    for index, record in enumerate(records):
        if not isinstance(record, IndicatorRecord):
            raise TypeError(
                f"records[{index}] must be an IndicatorRecord, got {type(record).__name__}"
            )
    return records
