"""
iocgraph - Layered and hierarchical views of indicator graphs

iocgraph takes indicator (IOC) records and the arrows drawn between them
and derives two views: depth layers measured from the graph's roots, and
parent/child groups that honor each record's role, with detection of
arrows pointing the wrong way.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("iocgraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from iocgraph.edges import EdgeResolver
from iocgraph.hierarchy import HierarchyBuilder, build_parent_child_groups
from iocgraph.layering import build_layered_graph
from iocgraph.models import (
    Edge,
    GraphDiagnostics,
    HierarchyResult,
    IndicatorRecord,
    LayeredGraph,
    LayeredNode,
    ParentChildGroup,
    Role,
)
from iocgraph.timeline import TimeTimeline, build_time_timeline

__all__ = [
    "__version__",
    "Edge",
    "EdgeResolver",
    "GraphDiagnostics",
    "HierarchyBuilder",
    "HierarchyResult",
    "IndicatorRecord",
    "LayeredGraph",
    "LayeredNode",
    "ParentChildGroup",
    "Role",
    "TimeTimeline",
    "build_layered_graph",
    "build_parent_child_groups",
    "build_time_timeline",
]
