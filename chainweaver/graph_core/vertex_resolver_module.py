#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Vertex Resolver — splits an ambiguous vertex into one copy per kept
incoming/outgoing combination.

Logical resolution pairs source->target neighbors; physical resolution pairs
red-terminal with green-terminal links of a GFA segment. With both sides
present every pairing is offered (n * m combinations); with one side empty
each link stands alone (max(n, m) combinations).

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .connection_classifier import AdjacencyMode, ConnectionClassifier, NodeConnections, TerminalLink
from .data_structures import (
    EdgeProvenance,
    GraphEdge,
    GraphNode,
    GraphState,
    MutationSummary,
    NodeId,
)
from .errors import (
    InvalidSelectionError,
    NoCombinationsSelectedError,
    VertexNotAmbiguousError,
)

logger = logging.getLogger(__name__)

DEFAULT_COPY_RADIUS = 60.0

# Copy id suffixes keep logical and physical splits of one vertex apart
COPY_SUFFIX = {
    AdjacencyMode.LOGICAL: '_',
    AdjacencyMode.PHYSICAL: '_p',
}


@dataclass(frozen=True)
class ResolutionCombination:
    """
    One way through a vertex: an optional incoming link and an optional
    outgoing link (red and green terminal links in physical mode).
    """
    index: int
    incoming: Optional[TerminalLink]
    outgoing: Optional[TerminalLink]
    combo_id: str
    description: str

    @property
    def incoming_neighbor(self) -> Optional[NodeId]:
        return None if self.incoming is None else self.incoming.neighbor

    @property
    def outgoing_neighbor(self) -> Optional[NodeId]:
        return None if self.outgoing is None else self.outgoing.neighbor

    @property
    def links(self) -> Tuple[TerminalLink, ...]:
        return tuple(link for link in (self.incoming, self.outgoing) if link is not None)


def generate_combinations(
    connections: NodeConnections,
    mode: AdjacencyMode = AdjacencyMode.LOGICAL,
) -> List[ResolutionCombination]:
    """
    Enumerate resolution combinations for one vertex.

    Args:
        connections: Classified links of the vertex
        mode: Adjacency mode the links were classified under

    Returns:
        Combinations in deterministic order (incoming-major)
    """
    physical = mode is AdjacencyMode.PHYSICAL
    in_tag = ' (red)' if physical else ''
    out_tag = ' (green)' if physical else ''
    combos: List[ResolutionCombination] = []

    if not connections.incoming:
        for out in connections.outgoing:
            combos.append(ResolutionCombination(
                index=len(combos),
                incoming=None,
                outgoing=out,
                combo_id=f"start_{out.neighbor}",
                description=f"Start → {out.neighbor}{out_tag}",
            ))
    elif not connections.outgoing:
        for inc in connections.incoming:
            combos.append(ResolutionCombination(
                index=len(combos),
                incoming=inc,
                outgoing=None,
                combo_id=f"{inc.neighbor}_end",
                description=f"{inc.neighbor}{in_tag} → End",
            ))
    else:
        arrow = '↔' if physical else '→'
        for inc in connections.incoming:
            for out in connections.outgoing:
                combos.append(ResolutionCombination(
                    index=len(combos),
                    incoming=inc,
                    outgoing=out,
                    combo_id=f"{inc.neighbor}_{out.neighbor}",
                    description=f"{inc.neighbor}{in_tag} {arrow} {out.neighbor}{out_tag}",
                ))

    logger.debug(f"Generated {len(combos)} {mode.value} combinations")
    return combos


@dataclass(frozen=True)
class ResolutionResult:
    """
    Outcome of a vertex resolution.

    ``copies[i]`` is the node created for ``kept[i]``.
    """
    consumed_id: NodeId
    mode: AdjacencyMode
    combinations: Tuple[ResolutionCombination, ...]
    kept: Tuple[ResolutionCombination, ...]
    copies: Tuple[GraphNode, ...]
    new_nodes: Tuple[GraphNode, ...]
    new_edges: Tuple[GraphEdge, ...]
    synthesized_edges: Tuple[GraphEdge, ...]
    new_state: GraphState

    @property
    def copy_ids(self) -> Tuple[NodeId, ...]:
        return tuple(copy.id for copy in self.copies)

    def copy_for(self, combination: ResolutionCombination) -> GraphNode:
        for combo, copy in zip(self.kept, self.copies):
            if combo.index == combination.index:
                return copy
        raise KeyError(f"Combination {combination.combo_id} was not kept")

    @property
    def summary(self) -> MutationSummary:
        return MutationSummary(
            operation=f"{self.mode.value}_resolution",
            new_node_ids=self.copy_ids,
            consumed_ids=(self.consumed_id,),
            external_connections_preserved=len(self.synthesized_edges),
            resolved_copy_count=len(self.copies),
        )


class VertexResolver:
    """
    Resolve ambiguous vertices under one adjacency mode.

    Usage:
        resolver = VertexResolver(AdjacencyMode.LOGICAL)
        combos = resolver.combinations(state, vertex_id)
        result = resolver.resolve(state, vertex_id, kept=[0, 1])
    """

    def __init__(
        self,
        mode: Union[AdjacencyMode, str] = AdjacencyMode.LOGICAL,
        copy_radius: float = DEFAULT_COPY_RADIUS,
    ):
        self.mode = AdjacencyMode.parse(mode)
        self.copy_radius = float(copy_radius)
        self.logger = logging.getLogger(f"{__name__}.VertexResolver")

    def connections(self, state: GraphState, vertex_id: NodeId) -> NodeConnections:
        state.node(vertex_id)
        adjacency = ConnectionClassifier(self.mode).classify_state(state)
        return adjacency.connections(vertex_id)

    def combinations(self, state: GraphState, vertex_id: NodeId) -> List[ResolutionCombination]:
        """
        Combinations offered for ``vertex_id``.

        Raises:
            NodeNotFoundError: vertex not in graph
            VertexNotAmbiguousError: vertex degree <= 1
        """
        connections = self.connections(state, vertex_id)
        if connections.degree <= 1:
            raise VertexNotAmbiguousError(
                f"Vertex {vertex_id} has degree {connections.degree}; nothing to resolve",
                {'mode': self.mode.value},
            )
        self.logger.info(
            f"Vertex {vertex_id}: {len(connections.incoming)} incoming, "
            f"{len(connections.outgoing)} outgoing ({self.mode.value})"
        )
        return generate_combinations(connections, self.mode)

    def resolve(
        self,
        state: GraphState,
        vertex_id: NodeId,
        kept: Iterable[Union[int, ResolutionCombination]],
    ) -> ResolutionResult:
        """
        Split ``vertex_id`` into one copy per kept combination.

        Args:
            state: Current graph state
            vertex_id: Ambiguous vertex
            kept: Combination indices or combination objects to keep

        Returns:
            ResolutionResult holding the new state

        Raises:
            NoCombinationsSelectedError: ``kept`` is empty
            InvalidSelectionError: unknown or repeated combination
        """
        combos = self.combinations(state, vertex_id)
        kept_combos = self._select(combos, kept)
        vertex = state.node(vertex_id)
        k = len(kept_combos)

        self.logger.info(f"Resolving vertex {vertex_id} into {k} {self.mode.value} cop{'y' if k == 1 else 'ies'}")

        copy_ids, next_serial = self._copy_ids(state, vertex_id, k)
        positions = self._copy_positions(vertex.position, k)

        copies = tuple(
            vertex.with_changes(
                id=copy_id,
                position=position,
                original_id=vertex_id,
                path_description=combo.description,
                resolution_type=self.mode.value,
            )
            for copy_id, position, combo in zip(copy_ids, positions, kept_combos)
        )

        synthesized: List[GraphEdge] = []
        seen_keys = set()
        for combo, copy in zip(kept_combos, copies):
            for link in combo.links:
                edge = self._reconnect(state.edges[link.edge_index], link, copy.id)
                if edge.key in seen_keys:
                    self.logger.debug(f"Dropping duplicate synthesized edge {edge.describe()}")
                    continue
                seen_keys.add(edge.key)
                synthesized.append(edge)

        new_nodes = tuple(n for n in state.nodes if n.id != vertex_id) + copies
        new_edges = tuple(e for e in state.edges if not e.touches(vertex_id)) + tuple(synthesized)
        new_state = state.replace_collections(new_nodes, new_edges, id_serial=next_serial)

        self.logger.info(
            f"{self.mode.value.capitalize()} resolution of {vertex_id} complete: "
            f"{k} vertices, {len(synthesized)} edges"
        )

        return ResolutionResult(
            consumed_id=vertex_id,
            mode=self.mode,
            combinations=tuple(combos),
            kept=tuple(kept_combos),
            copies=copies,
            new_nodes=new_nodes,
            new_edges=new_edges,
            synthesized_edges=tuple(synthesized),
            new_state=new_state,
        )

    @staticmethod
    def _select(
        combos: Sequence[ResolutionCombination],
        kept: Iterable[Union[int, ResolutionCombination]],
    ) -> List[ResolutionCombination]:
        chosen: Dict[int, ResolutionCombination] = {}
        for entry in kept:
            if isinstance(entry, ResolutionCombination):
                index = entry.index
                if index >= len(combos) or combos[index] != entry:
                    raise InvalidSelectionError(
                        f"Combination {entry.combo_id} does not belong to this vertex",
                        {'index': index},
                    )
            elif isinstance(entry, int) and not isinstance(entry, bool):
                index = entry
                if not 0 <= index < len(combos):
                    raise InvalidSelectionError(
                        f"Combination index {index} out of range",
                        {'available': len(combos)},
                    )
            else:
                raise InvalidSelectionError(f"Invalid combination selection: {entry!r}")

            if index in chosen:
                raise InvalidSelectionError(f"Combination {index} selected more than once")
            chosen[index] = combos[index]

        if not chosen:
            raise NoCombinationsSelectedError(
                "Please select at least one combination to keep",
                {'available': len(combos)},
            )
        return [chosen[i] for i in sorted(chosen)]

    def _copy_ids(self, state: GraphState, vertex_id: NodeId, k: int) -> Tuple[List[NodeId], int]:
        """Copy ids; k == 1 reuses the vertex id."""
        serial = state.id_serial
        if k == 1:
            return [vertex_id], serial

        suffix = COPY_SUFFIX[self.mode]
        ids: List[NodeId] = []
        for ordinal in range(1, k + 1):
            base = f"{vertex_id}{suffix}{ordinal}"
            candidate = NodeId(base)
            while candidate in state or candidate in ids:
                candidate = NodeId(f"{base}_{serial}")
                serial += 1
            ids.append(candidate)
        return ids, serial

    def _copy_positions(self, origin: Tuple[float, float], k: int) -> List[Tuple[float, float]]:
        """Spread k > 1 copies evenly on a circle around the vertex."""
        if k == 1:
            return [origin]
        angles = 2 * np.pi * np.arange(k) / k
        xs = origin[0] + self.copy_radius * np.cos(angles)
        ys = origin[1] + self.copy_radius * np.sin(angles)
        return [(float(x), float(y)) for x, y in zip(xs, ys)]

    @staticmethod
    def _reconnect(edge: GraphEdge, link: TerminalLink, copy_id: NodeId) -> GraphEdge:
        """Substitute the copy for the vertex-side endpoint only."""
        if edge.is_self_loop:
            endpoints = {'source': copy_id, 'target': copy_id}
        elif link.vertex_is_source:
            endpoints = {'source': copy_id}
        else:
            endpoints = {'target': copy_id}
        return edge.with_changes(provenance=EdgeProvenance.RESOLVED, **endpoints)


def resolve_vertex(
    state: GraphState,
    vertex_id: NodeId,
    kept: Iterable[Union[int, ResolutionCombination]],
    mode: Union[AdjacencyMode, str] = AdjacencyMode.LOGICAL,
    copy_radius: float = DEFAULT_COPY_RADIUS,
) -> ResolutionResult:
    """Functional form of VertexResolver.resolve."""
    return VertexResolver(mode, copy_radius=copy_radius).resolve(state, vertex_id, kept)


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
