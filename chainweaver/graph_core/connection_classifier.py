#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Connection Classifier — per-node adjacency under the logical
(source -> target) or physical (red/green terminal) model.

Physical model
--------------
Every GFA segment has two terminals:

    red   = incoming end of the segment
    green = outgoing end of the segment

For a link (s, t, srcOri, tgtOri):

    srcOri '+' -> s uses its green terminal (outgoing), '-' -> red (incoming)
    tgtOri '+' -> t uses its red terminal (incoming),   '-' -> green (outgoing)

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Sequence

from .data_structures import GraphEdge, GraphFormat, GraphNode, GraphState, NodeId, Orientation
from .errors import GraphInvariantError

logger = logging.getLogger(__name__)


class AdjacencyMode(Enum):
    """Adjacency model used to classify edges."""
    LOGICAL = 'logical'
    PHYSICAL = 'physical'

    @classmethod
    def for_format(cls, graph_format: GraphFormat) -> 'AdjacencyMode':
        """GFA graphs are walked physically, DOT graphs logically."""
        return cls.PHYSICAL if graph_format is GraphFormat.GFA else cls.LOGICAL

    @classmethod
    def parse(cls, raw) -> 'AdjacencyMode':
        if isinstance(raw, AdjacencyMode):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown adjacency mode: {raw!r} (expected 'logical' or 'physical')")


@dataclass(frozen=True)
class TerminalLink:
    """
    One edge as seen from one of its endpoints.

    Attributes:
        neighbor: Node at the other end of the edge
        edge_index: Index of the edge in the classified edge collection
        vertex_is_source: True if the classified node is the edge's source
    """
    neighbor: NodeId
    edge_index: int
    vertex_is_source: bool


@dataclass
class NodeConnections:
    """Incoming (red) and outgoing (green) links of one node."""
    incoming: List[TerminalLink] = field(default_factory=list)
    outgoing: List[TerminalLink] = field(default_factory=list)

    @property
    def incoming_ids(self) -> List[NodeId]:
        return [link.neighbor for link in self.incoming]

    @property
    def outgoing_ids(self) -> List[NodeId]:
        return [link.neighbor for link in self.outgoing]

    @property
    def degree(self) -> int:
        return len(self.incoming) + len(self.outgoing)


class Adjacency(Mapping):
    """
    Read-only mapping NodeId -> NodeConnections for one classification.

    Every node of the classified collection has an entry, even when it has
    no edges. Asking for a node without an entry is an invariant violation.
    """

    def __init__(
        self,
        connections: Dict[NodeId, NodeConnections],
        mode: AdjacencyMode,
        edges: Sequence[GraphEdge],
        skipped_edges: int = 0,
    ):
        self._connections = connections
        self.mode = mode
        self.edges = tuple(edges)
        self.skipped_edges = skipped_edges

    def __getitem__(self, node_id: NodeId) -> NodeConnections:
        return self._connections[node_id]

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self._connections)

    def __len__(self) -> int:
        return len(self._connections)

    def connections(self, node_id: NodeId) -> NodeConnections:
        """Connections of ``node_id``; aborts if the node was never classified."""
        try:
            return self._connections[node_id]
        except KeyError:
            raise GraphInvariantError(
                f"No adjacency entry for node {node_id}",
                {'mode': self.mode.value, 'classified_nodes': len(self._connections)},
            ) from None

    def degree(self, node_id: NodeId) -> int:
        return self.connections(node_id).degree

    def __repr__(self) -> str:
        return (
            f"Adjacency(mode={self.mode.value}, nodes={len(self._connections)}, "
            f"edges={len(self.edges)}, skipped={self.skipped_edges})"
        )


class ConnectionClassifier:
    """
    Build per-node adjacency for a node/edge collection.

    Edges with an endpoint outside the node collection are skipped and
    counted; they never produce a half-edge.
    """

    def __init__(self, mode: AdjacencyMode = AdjacencyMode.LOGICAL):
        self.mode = AdjacencyMode.parse(mode)
        self.logger = logging.getLogger(f"{__name__}.ConnectionClassifier")

    def classify(self, nodes: Iterable[GraphNode], edges: Sequence[GraphEdge]) -> Adjacency:
        """
        Classify every edge into incoming/outgoing lists of its endpoints.

        Args:
            nodes: Node collection
            edges: Edge collection (indices are preserved in TerminalLinks)

        Returns:
            Adjacency covering every node in ``nodes``
        """
        connections: Dict[NodeId, NodeConnections] = {node.id: NodeConnections() for node in nodes}
        skipped = 0

        for edge_index, edge in enumerate(edges):
            if edge.source not in connections or edge.target not in connections:
                skipped += 1
                self.logger.debug(f"Skipping edge {edge_index} ({edge.describe()}): endpoint not in node set")
                continue

            source_conn = connections[edge.source]
            target_conn = connections[edge.target]
            from_source = TerminalLink(edge.target, edge_index, vertex_is_source=True)
            from_target = TerminalLink(edge.source, edge_index, vertex_is_source=False)

            if self.mode is AdjacencyMode.LOGICAL:
                source_conn.outgoing.append(from_source)
                target_conn.incoming.append(from_target)
                continue

            # Physical: orientation picks the terminal on each endpoint
            if edge.src_orientation is Orientation.FORWARD:
                source_conn.outgoing.append(from_source)
            else:
                source_conn.incoming.append(from_source)

            if edge.tgt_orientation is Orientation.FORWARD:
                target_conn.incoming.append(from_target)
            else:
                target_conn.outgoing.append(from_target)

        if skipped:
            self.logger.debug(f"Skipped {skipped} edge(s) with endpoints outside the node set")

        return Adjacency(connections, self.mode, edges, skipped_edges=skipped)

    def classify_state(self, state: GraphState) -> Adjacency:
        return self.classify(state.nodes, state.edges)


def classify_connections(
    nodes: Iterable[GraphNode],
    edges: Sequence[GraphEdge],
    mode: AdjacencyMode = AdjacencyMode.LOGICAL,
) -> Adjacency:
    """Convenience wrapper around ConnectionClassifier.classify."""
    return ConnectionClassifier(mode).classify(nodes, edges)


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
