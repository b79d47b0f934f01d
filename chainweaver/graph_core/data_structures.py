#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Graph Data Structures — node ids, segments, oriented links and the
immutable GraphState value every mutation consumes and produces.

Nodes and edges are frozen dataclasses and GraphState stores them in
tuples, so a state handed out by a mutation is an independent snapshot
that can be retained for undo without copying.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import dataclasses
import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .errors import (
    DanglingReferenceError,
    DuplicateNodeIdError,
    GraphInvariantError,
    NodeNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_NODE_LENGTH = 1000
DEFAULT_NODE_DEPTH = 1.0
UNKNOWN_SEQUENCE = '*'
DEFAULT_OVERLAP = '*'


# ============================================================================
# Part 1: Identifiers and Enumerations
# ============================================================================

@functools.total_ordering
@dataclass(frozen=True)
class NodeId:
    """
    Opaque, hashable, totally ordered node identifier.

    Parsers hand over ids as numbers or strings; ``NodeId.of`` normalizes
    them exactly once at ingestion. Ids whose text is a decimal integer
    sort numerically ahead of all other ids, which sort lexically.
    """
    value: str

    @classmethod
    def of(cls, raw: Union['NodeId', str, int, float]) -> 'NodeId':
        """Normalize a raw parser id into a NodeId."""
        if isinstance(raw, NodeId):
            return raw
        if raw is None or isinstance(raw, bool):
            raise TypeError(f"Invalid node id: {raw!r}")
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        text = str(raw).strip()
        if not text:
            raise ValueError("Node id must not be empty")
        return cls(text)

    def _sort_key(self) -> Tuple[int, int, str]:
        if self.value.isascii() and self.value.isdigit():
            return (0, int(self.value), self.value)
        return (1, 0, self.value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NodeId):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.value


class Orientation(str, Enum):
    """Edge-endpoint orientation selecting a segment terminal."""
    FORWARD = '+'
    REVERSE = '-'

    @classmethod
    def parse(cls, raw: Optional[Union['Orientation', str]]) -> 'Orientation':
        """Parse '+'/'-'; a missing orientation defaults to '+'."""
        if raw is None:
            return cls.FORWARD
        if isinstance(raw, Orientation):
            return raw
        text = str(raw).strip()
        if text in ('', '+'):
            return cls.FORWARD
        if text == '-':
            return cls.REVERSE
        raise ValueError(f"Invalid orientation: {raw!r} (expected '+' or '-')")

    def __str__(self) -> str:
        return self.value


class NodeKind(Enum):
    """Kind of graph node."""
    SEGMENT = 'segment'
    MERGED = 'merged_segment'


class EdgeProvenance(Enum):
    """Where an edge came from."""
    PARSED = 'link'
    MERGED = 'merged_connection'
    RESOLVED = 'resolved_connection'


class GraphFormat(Enum):
    """Source format a graph was ingested from."""
    GFA = 'gfa'
    DOT = 'dot'

    @classmethod
    def parse(cls, raw: Union['GraphFormat', str]) -> 'GraphFormat':
        if isinstance(raw, GraphFormat):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown graph format: {raw!r} (expected 'gfa' or 'dot')")


# ============================================================================
# Part 2: Nodes and Edges
# ============================================================================

@dataclass(frozen=True)
class GraphEdge:
    """
    Oriented link between two nodes.

    Endpoints are always plain NodeIds. Use ``GraphState.resolve_edge`` for
    the node-object view.
    """
    source: NodeId
    target: NodeId
    src_orientation: Orientation = Orientation.FORWARD
    tgt_orientation: Orientation = Orientation.FORWARD
    overlap: str = DEFAULT_OVERLAP
    provenance: EdgeProvenance = EdgeProvenance.PARSED
    origin_node: Optional[NodeId] = None  # Chain node a merged connection replaced

    def __post_init__(self):
        if not isinstance(self.source, NodeId) or not isinstance(self.target, NodeId):
            raise TypeError(
                f"Edge endpoints must be NodeId values, got "
                f"{type(self.source).__name__} -> {type(self.target).__name__}"
            )
        object.__setattr__(self, 'src_orientation', Orientation.parse(self.src_orientation))
        object.__setattr__(self, 'tgt_orientation', Orientation.parse(self.tgt_orientation))

    @property
    def key(self) -> Tuple[NodeId, NodeId]:
        """Deduplication key (source, target)."""
        return (self.source, self.target)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def touches(self, node_id: NodeId) -> bool:
        """True if either endpoint is ``node_id``."""
        return self.source == node_id or self.target == node_id

    def with_changes(self, **changes: Any) -> 'GraphEdge':
        return dataclasses.replace(self, **changes)

    def describe(self) -> str:
        return f"{self.source}{self.src_orientation.value} -> {self.target}{self.tgt_orientation.value}"


@dataclass(frozen=True)
class GraphNode:
    """
    Segment or merged node.

    Attributes:
        id: Node identifier
        length: Sequence length in bases (1000 when unknown)
        depth: Read depth (1.0 when unknown)
        position: Layout coordinates (x, y)
        orientation_angle: Rendering angle in radians
        flipped: Whether the segment is drawn reverse-complemented
        kind: SEGMENT or MERGED
        sequence: Segment sequence or '*'
        merged_from: Original chain ids, in chain order (MERGED only)
        original_nodes: Snapshot of chain members (MERGED only)
        original_links: Snapshot of internal chain edges (MERGED only)
        path_name: Display name of the merged chain (MERGED only)
        original_id: Vertex this node is a resolved copy of
        path_description: Combination a resolved copy carries
        resolution_type: 'logical' or 'physical' for resolved copies
    """
    id: NodeId
    length: int = DEFAULT_NODE_LENGTH
    depth: float = DEFAULT_NODE_DEPTH
    position: Tuple[float, float] = (0.0, 0.0)
    orientation_angle: float = 0.0
    flipped: bool = False
    kind: NodeKind = NodeKind.SEGMENT
    sequence: str = UNKNOWN_SEQUENCE
    merged_from: Tuple[NodeId, ...] = ()
    original_nodes: Tuple['GraphNode', ...] = ()
    original_links: Tuple[GraphEdge, ...] = ()
    path_name: str = ''
    original_id: Optional[NodeId] = None
    path_description: str = ''
    resolution_type: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.id, NodeId):
            raise TypeError(f"Node id must be a NodeId, got {type(self.id).__name__}")
        if self.kind is NodeKind.MERGED:
            if len(self.merged_from) < 2:
                raise GraphInvariantError(
                    "Merged node must be built from at least two nodes",
                    {'node': str(self.id), 'merged_from': [str(n) for n in self.merged_from]},
                )
            if len(set(self.merged_from)) != len(self.merged_from):
                raise GraphInvariantError(
                    "Merged node lists a member more than once",
                    {'node': str(self.id), 'merged_from': [str(n) for n in self.merged_from]},
                )

    @property
    def is_merged(self) -> bool:
        return self.kind is NodeKind.MERGED

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    def with_changes(self, **changes: Any) -> 'GraphNode':
        return dataclasses.replace(self, **changes)


# ============================================================================
# Part 3: Graph State
# ============================================================================

@dataclass(frozen=True)
class GraphState:
    """
    Immutable node/edge collection with id lookup.

    Construction enforces unique node ids and rejects edges whose endpoints
    are missing. Mutations never edit a state; they build a new one with
    ``replace_collections``.
    """
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    graph_format: GraphFormat = GraphFormat.GFA
    id_serial: int = 1  # Next value of the synthetic-id creation counter
    _index: Dict[NodeId, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'nodes', tuple(self.nodes))
        object.__setattr__(self, 'edges', tuple(self.edges))
        object.__setattr__(self, 'graph_format', GraphFormat.parse(self.graph_format))

        index: Dict[NodeId, int] = {}
        for position, node in enumerate(self.nodes):
            if node.id in index:
                raise DuplicateNodeIdError(
                    f"Duplicate node id {node.id}",
                    {'first_index': index[node.id], 'second_index': position},
                )
            index[node.id] = position

        for edge_index, edge in enumerate(self.edges):
            missing = [str(n) for n in (edge.source, edge.target) if n not in index]
            if missing:
                raise DanglingReferenceError(
                    f"Edge {edge.describe()} references missing node(s) {', '.join(missing)}",
                    {'edge_index': edge_index},
                )

        object.__setattr__(self, '_index', index)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self.nodes)

    def has_node(self, node_id: NodeId) -> bool:
        return node_id in self._index

    def get_node(self, node_id: NodeId) -> Optional[GraphNode]:
        position = self._index.get(node_id)
        return None if position is None else self.nodes[position]

    def node(self, node_id: NodeId) -> GraphNode:
        """Return the node with ``node_id`` or raise NodeNotFoundError."""
        position = self._index.get(node_id)
        if position is None:
            raise NodeNotFoundError(f"Node {node_id} not found", {'node_count': len(self.nodes)})
        return self.nodes[position]

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return tuple(node.id for node in self.nodes)

    def edges_incident_to(self, node_id: NodeId) -> List[Tuple[int, GraphEdge]]:
        """All (edge_index, edge) pairs touching ``node_id``."""
        return [(i, edge) for i, edge in enumerate(self.edges) if edge.touches(node_id)]

    def resolve_edge(self, edge: Union[int, GraphEdge]) -> Tuple[GraphNode, GraphNode]:
        """Node-object view of an edge's endpoints. Computed, never stored."""
        if isinstance(edge, int):
            edge = self.edges[edge]
        return self.node(edge.source), self.node(edge.target)

    # ------------------------------------------------------------------
    # Copy-on-write
    # ------------------------------------------------------------------

    def replace_collections(
        self,
        nodes: Iterable[GraphNode],
        edges: Iterable[GraphEdge],
        id_serial: Optional[int] = None,
    ) -> 'GraphState':
        """Build a new state with the same format and a new node/edge set."""
        return GraphState(
            nodes=tuple(nodes),
            edges=tuple(edges),
            graph_format=self.graph_format,
            id_serial=self.id_serial if id_serial is None else id_serial,
        )

    def allocate_id(self, base: str) -> Tuple[NodeId, int]:
        """
        Derive a fresh id ``{base}_{serial}`` from the creation counter.

        The counter is bumped past any id already present, so the result is
        distinct from every node in this state.

        Returns:
            (new_id, next_serial) where next_serial belongs in the new state
        """
        serial = self.id_serial
        candidate = NodeId(f"{base}_{serial}")
        while candidate in self._index:
            serial += 1
            candidate = NodeId(f"{base}_{serial}")
        return candidate, serial + 1

    def summary(self) -> Dict[str, Any]:
        return {
            'format': self.graph_format.value,
            'nodes': len(self.nodes),
            'edges': len(self.edges),
            'merged_nodes': sum(1 for n in self.nodes if n.is_merged),
        }


# ============================================================================
# Part 4: Mutation Summary
# ============================================================================

@dataclass(frozen=True)
class MutationSummary:
    """
    Outcome of one merge or resolution, for logging and confirmation dialogs.

    ``chain_length`` is set for merges, ``resolved_copy_count`` for
    resolutions.
    """
    operation: str
    new_node_ids: Tuple[NodeId, ...]
    consumed_ids: Tuple[NodeId, ...]
    external_connections_preserved: int
    chain_length: Optional[int] = None
    resolved_copy_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'operation': self.operation,
            'new_node_ids': [str(n) for n in self.new_node_ids],
            'consumed_ids': [str(n) for n in self.consumed_ids],
            'external_connections_preserved': self.external_connections_preserved,
        }
        if self.chain_length is not None:
            data['chain_length'] = self.chain_length
        if self.resolved_copy_count is not None:
            data['resolved_copy_count'] = self.resolved_copy_count
        return data

    def describe(self) -> str:
        consumed = ', '.join(str(n) for n in self.consumed_ids)
        created = ', '.join(str(n) for n in self.new_node_ids)
        return (
            f"{self.operation}: {consumed} -> {created} "
            f"({self.external_connections_preserved} external connections preserved)"
        )


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
