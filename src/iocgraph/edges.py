"""Edge endpoint resolution.

Raw edges arrive in several upstream encodings: canvas JSON uses
``fromNode``/``toNode``, the live canvas API nests ids under
``from.node.id``, other exporters use ``source``/``target``, and edges
that were already normalized carry ``from_id``/``to_id``. Each known
field path compiles into a small extractor; resolution walks the
extractor chain in priority order and keeps the first non-empty result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Container, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from iocgraph.models import Edge

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], "str | None"]

DEFAULT_FROM_FIELDS: tuple[str, ...] = (
    "fromNode",
    "from.node.id",
    "from",
    "source",
    "sourceId",
    "fromId",
    "fromNodeId",
    "from_id",
)
DEFAULT_TO_FIELDS: tuple[str, ...] = (
    "toNode",
    "to.node.id",
    "to",
    "target",
    "targetId",
    "toId",
    "toNodeId",
    "to_id",
)
DEFAULT_LABEL_FIELDS: tuple[str, ...] = ("label", "text")


def _lookup(obj: Any, key: str) -> Any:
    """Read ``key`` from a mapping or, failing that, an attribute."""
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def field_extractor(path: str) -> Extractor:
    """Compile a dotted field path into an extractor function.

    The extractor follows each path segment through mappings or object
    attributes and returns the final value when it is a non-empty string.
    Integer identifiers are returned as strings, matching how
    ``IndicatorRecord.from_dict`` stores them.

    Args:
        path: Dotted path such as ``"fromNode"`` or ``"from.node.id"``

    Returns:
        Callable taking a raw edge and returning the string or None
    """
    parts = tuple(part for part in path.split(".") if part)
    if not parts:
        raise ValueError(f"Empty edge field path: {path!r}")

    def extract(raw: Any) -> str | None:
        value = raw
        for part in parts:
            if value is None:
                return None
            value = _lookup(value, part)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return None

    extract.__name__ = f"extract_{'_'.join(parts)}"
    return extract


def first_match(extractors: Sequence[Extractor], raw: Any) -> str | None:
    """Return the first non-None result of the extractor chain."""
    for extractor in extractors:
        value = extractor(raw)
        if value is not None:
            return value
    return None


@dataclass
class EdgeResolution:
    """Outcome of resolving a batch of raw edges.

    Attributes:
        edges: Edges whose endpoints both resolved to known identifiers
        dropped: Number of raw edges discarded
    """

    edges: list[Edge] = field(default_factory=list)
    dropped: int = 0


class EdgeResolver:
    """Resolves raw edge descriptors into ``Edge`` triples.

    Example:
        resolver = EdgeResolver()
        edge = resolver.resolve({"fromNode": "a", "toNode": "b", "label": "spawned"})
    """

    def __init__(
        self,
        from_fields: Iterable[str] = DEFAULT_FROM_FIELDS,
        to_fields: Iterable[str] = DEFAULT_TO_FIELDS,
        label_fields: Iterable[str] = DEFAULT_LABEL_FIELDS,
    ) -> None:
        self.from_fields = tuple(from_fields)
        self.to_fields = tuple(to_fields)
        self.label_fields = tuple(label_fields)
        if not self.from_fields or not self.to_fields:
            raise ValueError("Edge resolver needs at least one source and one target field")

        self._from_chain = [field_extractor(path) for path in self.from_fields]
        self._to_chain = [field_extractor(path) for path in self.to_fields]
        self._label_chain = [field_extractor(path) for path in self.label_fields]

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> EdgeResolver:
        """Create a resolver from the ``[edges]`` table of a loaded config."""
        edges_config = config.get("edges", {})
        return cls(
            from_fields=edges_config.get("from_fields", DEFAULT_FROM_FIELDS),
            to_fields=edges_config.get("to_fields", DEFAULT_TO_FIELDS),
            label_fields=edges_config.get("label_fields", DEFAULT_LABEL_FIELDS),
        )

    def resolve_endpoints(self, raw: Any) -> tuple[str | None, str | None]:
        """Resolve the (from, to) identifiers of one raw edge."""
        return first_match(self._from_chain, raw), first_match(self._to_chain, raw)

    def resolve(self, raw: Any) -> Edge | None:
        """Resolve one raw edge, or None if either endpoint is missing."""
        if raw is None:
            return None
        from_id, to_id = self.resolve_endpoints(raw)
        if from_id is None or to_id is None:
            return None
        label = first_match(self._label_chain, raw) or ""
        return Edge(from_id=from_id, to_id=to_id, label=label)

    def resolve_all(self, raw_edges: Iterable[Any], known_ids: Container[str]) -> EdgeResolution:
        """Resolve raw edges, keeping only those between known identifiers.

        Edges are kept in input order and duplicates are preserved.

        Args:
            raw_edges: Raw edge descriptors in any supported encoding
            known_ids: Identifiers of indexed indicator records

        Returns:
            EdgeResolution with the valid edges and the dropped count
        """
        result = EdgeResolution()
        for index, raw in enumerate(raw_edges):
            edge = self.resolve(raw)
            if edge is None:
                logger.debug("Dropping edge %d: unresolved endpoint", index)
                result.dropped += 1
                continue
            if edge.from_id not in known_ids or edge.to_id not in known_ids:
                logger.debug(
                    "Dropping edge %d: %s -> %s references an unknown indicator",
                    index,
                    edge.from_id,
                    edge.to_id,
                )
                result.dropped += 1
                continue
            result.edges.append(edge)
        return result
