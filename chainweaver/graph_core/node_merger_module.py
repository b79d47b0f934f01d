#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Node Merger — collapses a linear chain into one merged node.

Steps:
1. Validate the chain (>= 2 distinct nodes present in the graph)
2. Split edges into internal (both ends in chain) and external (one end)
3. Build the merged node (summed length, mean depth, centroid position)
   keeping snapshots of the original nodes and internal links
4. Re-attach every external connection to the merged node, preserving
   orientation, overlap and direction
5. Return a new graph state; the input state is never modified

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .chain_detector import ChainDetector
from .connection_classifier import AdjacencyMode
from .data_structures import (
    DEFAULT_NODE_DEPTH,
    DEFAULT_NODE_LENGTH,
    EdgeProvenance,
    GraphEdge,
    GraphNode,
    GraphState,
    MutationSummary,
    NodeId,
    NodeKind,
    Orientation,
)
from .errors import GraphInvariantError, NotAChainError

logger = logging.getLogger(__name__)

DEFAULT_MERGED_ID_PREFIX = 'MERGED'


@dataclass(frozen=True)
class ExternalConnection:
    """
    Edge with exactly one endpoint inside the merged chain.

    Attributes:
        direction: 'incoming' (external -> chain) or 'outgoing' (chain -> external)
        external_id: Endpoint outside the chain
        boundary_id: Chain node the edge attached to
        edge: The original edge
        terminal: Terminal of the boundary node used ('red' or 'green')
        chain_end: 'start', 'end' or 'interior'
    """
    direction: str
    external_id: NodeId
    boundary_id: NodeId
    edge: GraphEdge
    terminal: str
    chain_end: str

    @property
    def src_orientation(self) -> Orientation:
        return self.edge.src_orientation

    @property
    def tgt_orientation(self) -> Orientation:
        return self.edge.tgt_orientation

    @property
    def overlap(self) -> str:
        return self.edge.overlap


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a chain merge."""
    merged_node: GraphNode
    new_nodes: Tuple[GraphNode, ...]
    new_edges: Tuple[GraphEdge, ...]
    external_connections: Tuple[ExternalConnection, ...]
    consumed_ids: Tuple[NodeId, ...]
    new_state: GraphState

    @property
    def external_connection_count(self) -> int:
        return len(self.external_connections)

    @property
    def merged_node_id(self) -> NodeId:
        return self.merged_node.id

    @property
    def summary(self) -> MutationSummary:
        return MutationSummary(
            operation='merge',
            new_node_ids=(self.merged_node.id,),
            consumed_ids=self.consumed_ids,
            external_connections_preserved=self.external_connection_count,
            chain_length=len(self.consumed_ids),
        )


def _terminal_of(edge: GraphEdge, chain_node_is_source: bool, physical: bool) -> str:
    """Which terminal of the chain-side endpoint an edge attaches to."""
    if not physical:
        return 'green' if chain_node_is_source else 'red'
    if chain_node_is_source:
        return 'green' if edge.src_orientation is Orientation.FORWARD else 'red'
    return 'red' if edge.tgt_orientation is Orientation.FORWARD else 'green'


def merged_node_info(node: GraphNode) -> Optional[Dict[str, Any]]:
    """Display information for a merged node, or None for other nodes."""
    if not node.is_merged:
        return None
    return {
        'id': str(node.id),
        'type': 'Merged Node',
        'original_nodes': [str(n) for n in node.merged_from],
        'node_count': len(node.merged_from),
        'total_length': node.length,
        'average_depth': node.depth,
        'path_name': node.path_name,
        'internal_links': len(node.original_links),
    }


class NodeMerger:
    """
    Merge linear chains into synthetic MERGED nodes.

    Merged ids are ``{prefix}_{member ids joined by '_'}_{serial}`` where
    serial comes from the graph state's creation counter.
    """

    def __init__(self, id_prefix: str = DEFAULT_MERGED_ID_PREFIX):
        self.id_prefix = id_prefix
        self.logger = logging.getLogger(f"{__name__}.NodeMerger")

    def merge(self, state: GraphState, chain: Sequence[NodeId]) -> MergeResult:
        """
        Merge ``chain`` (in chain order) into a single node.

        Args:
            state: Current graph state
            chain: Ordered chain node ids, at least two

        Returns:
            MergeResult holding the new state

        Raises:
            NotAChainError: fewer than two chain nodes
            NodeNotFoundError: a chain id is not in the graph
            GraphInvariantError: the chain lists a node twice
        """
        chain = list(chain)
        if len(chain) < 2:
            raise NotAChainError(
                f"Node {chain[0] if chain else '?'} is not part of a linear chain (found {len(chain)} nodes)",
                {'chain_length': len(chain)},
            )
        if len(set(chain)) != len(chain):
            raise GraphInvariantError(
                "Chain lists a node more than once",
                {'chain': [str(n) for n in chain]},
            )

        chain_nodes = [state.node(node_id) for node_id in chain]
        chain_ids = set(chain)
        physical = AdjacencyMode.for_format(state.graph_format) is AdjacencyMode.PHYSICAL

        self.logger.info(f"Merging chain of {len(chain)} nodes: {' -> '.join(str(n) for n in chain)}")

        internal_edges, external, surviving_edges = self._collect_edges(state, chain, chain_ids, physical)

        merged_id, next_serial = state.allocate_id(
            f"{self.id_prefix}_{'_'.join(str(n) for n in chain)}"
        )
        merged_node = self._build_merged_node(merged_id, chain_nodes, internal_edges)

        replacement_edges = [self._reattach(conn, merged_id) for conn in external]
        for edge in replacement_edges:
            self.logger.debug(f"Reconnected external edge {edge.describe()}")

        new_nodes = tuple(n for n in state.nodes if n.id not in chain_ids) + (merged_node,)
        new_edges = tuple(surviving_edges) + tuple(replacement_edges)
        new_state = state.replace_collections(new_nodes, new_edges, id_serial=next_serial)

        self.logger.info(
            f"Merged {len(chain)} nodes into {merged_id} "
            f"({len(internal_edges)} internal links, {len(external)} external connections)"
        )

        return MergeResult(
            merged_node=merged_node,
            new_nodes=new_nodes,
            new_edges=new_edges,
            external_connections=tuple(external),
            consumed_ids=tuple(chain),
            new_state=new_state,
        )

    def merge_from_seed(self, state: GraphState, seed: NodeId) -> MergeResult:
        """Detect the chain through ``seed`` and merge it."""
        chain = ChainDetector().detect(state, seed)
        if len(chain) < 2:
            raise NotAChainError(
                f"Node {seed} is not part of a linear chain (found {len(chain)} nodes)",
                {'seed': str(seed)},
            )
        return self.merge(state, chain)

    def _collect_edges(
        self,
        state: GraphState,
        chain: List[NodeId],
        chain_ids: set,
        physical: bool,
    ) -> Tuple[List[GraphEdge], List[ExternalConnection], List[GraphEdge]]:
        """Split edges into internal, external and untouched."""
        internal: List[GraphEdge] = []
        external: List[ExternalConnection] = []
        untouched: List[GraphEdge] = []
        first_id, last_id = chain[0], chain[-1]

        for edge in state.edges:
            source_in = edge.source in chain_ids
            target_in = edge.target in chain_ids

            if source_in and target_in:
                internal.append(edge)
                continue
            if not source_in and not target_in:
                untouched.append(edge)
                continue

            boundary_id = edge.source if source_in else edge.target
            terminal = _terminal_of(edge, source_in, physical)

            if boundary_id == first_id and terminal == 'red':
                chain_end = 'start'
            elif boundary_id == last_id and terminal == 'green':
                chain_end = 'end'
            else:
                chain_end = 'interior'
                self.logger.warning(
                    f"External edge {edge.describe()} attaches to the {terminal} terminal "
                    f"of {boundary_id}, not a chain end"
                )

            external.append(ExternalConnection(
                direction='outgoing' if source_in else 'incoming',
                external_id=edge.target if source_in else edge.source,
                boundary_id=boundary_id,
                edge=edge,
                terminal=terminal,
                chain_end=chain_end,
            ))

        return internal, external, untouched

    def _build_merged_node(
        self,
        merged_id: NodeId,
        chain_nodes: List[GraphNode],
        internal_edges: List[GraphEdge],
    ) -> GraphNode:
        # Zero is a measured value; only missing ones take the default
        lengths = [DEFAULT_NODE_LENGTH if n.length is None else n.length for n in chain_nodes]
        depths = [DEFAULT_NODE_DEPTH if n.depth is None else n.depth for n in chain_nodes]
        centroid = np.mean(np.array([n.position for n in chain_nodes], dtype=float), axis=0)

        return GraphNode(
            id=merged_id,
            length=int(sum(lengths)),
            depth=float(np.mean(depths)),
            position=(float(centroid[0]), float(centroid[1])),
            kind=NodeKind.MERGED,
            merged_from=tuple(n.id for n in chain_nodes),
            original_nodes=tuple(chain_nodes),
            original_links=tuple(internal_edges),
            path_name=f"Linear Chain: {chain_nodes[0].id} → {chain_nodes[-1].id}",
        )

    @staticmethod
    def _reattach(connection: ExternalConnection, merged_id: NodeId) -> GraphEdge:
        if connection.direction == 'outgoing':
            endpoint = {'source': merged_id}
        else:
            endpoint = {'target': merged_id}
        return connection.edge.with_changes(
            provenance=EdgeProvenance.MERGED,
            origin_node=connection.boundary_id,
            **endpoint,
        )


def merge_chain(
    state: GraphState,
    chain: Sequence[NodeId],
    id_prefix: str = DEFAULT_MERGED_ID_PREFIX,
) -> MergeResult:
    """Functional form of NodeMerger.merge."""
    return NodeMerger(id_prefix=id_prefix).merge(state, chain)


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
