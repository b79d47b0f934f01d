#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Chain Detector — finds the maximal simple unbranched path through a seed
node.

A node is chain-eligible when its total degree (incoming + outgoing under
the active classification) is at most 2. The walk extends backward over
single incoming neighbors and forward over single outgoing neighbors,
stopping at branch points, ineligible neighbors and already-visited nodes.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import List, Optional, Set

from .connection_classifier import Adjacency, AdjacencyMode, ConnectionClassifier, NodeConnections
from .data_structures import GraphState, NodeId

logger = logging.getLogger(__name__)

MAX_CHAIN_DEGREE = 2


def is_chain_eligible(node_id: NodeId, adjacency: Adjacency) -> bool:
    """True if ``node_id`` has total degree <= 2."""
    return adjacency.connections(node_id).degree <= MAX_CHAIN_DEGREE


def _single_neighbor(
    links_of: NodeConnections,
    forward: bool,
    adjacency: Adjacency,
    visited: Set[NodeId],
) -> Optional[NodeId]:
    """Next node of the walk, or None at a chain boundary."""
    links = links_of.outgoing if forward else links_of.incoming
    if len(links) != 1:
        return None

    neighbor = links[0].neighbor
    if neighbor in visited:
        return None  # Cycle
    if not is_chain_eligible(neighbor, adjacency):
        return None  # Branching neighbor
    return neighbor


def find_linear_chain(seed: NodeId, adjacency: Adjacency) -> List[NodeId]:
    """
    Find the maximal linear chain containing ``seed``.

    Args:
        seed: Node to grow the chain from
        adjacency: Classified adjacency of the whole graph

    Returns:
        Chain node ids in walk order. A single-element list means the seed
        is not part of a mergeable chain.
    """
    if not is_chain_eligible(seed, adjacency):
        logger.debug(f"Seed {seed} is branching (degree {adjacency.degree(seed)}); no chain")
        return [seed]

    chain = [seed]
    visited = {seed}

    # Trace backwards
    current = seed
    while True:
        previous = _single_neighbor(adjacency.connections(current), False, adjacency, visited)
        if previous is None:
            break
        chain.insert(0, previous)
        visited.add(previous)
        current = previous

    # Trace forwards
    current = seed
    while True:
        following = _single_neighbor(adjacency.connections(current), True, adjacency, visited)
        if following is None:
            break
        chain.append(following)
        visited.add(following)
        current = following

    logger.debug(f"Chain through {seed}: {' -> '.join(str(n) for n in chain)}")
    return chain


class ChainDetector:
    """
    Chain detection bound to a graph state.

    The adjacency mode follows the graph's format (physical for GFA,
    logical for DOT) unless given explicitly.
    """

    def __init__(self, mode: Optional[AdjacencyMode] = None):
        self.mode = None if mode is None else AdjacencyMode.parse(mode)
        self.logger = logging.getLogger(f"{__name__}.ChainDetector")

    def classify(self, state: GraphState) -> Adjacency:
        mode = self.mode or AdjacencyMode.for_format(state.graph_format)
        return ConnectionClassifier(mode).classify_state(state)

    def detect(self, state: GraphState, seed: NodeId) -> List[NodeId]:
        """Find the chain through ``seed`` in ``state``."""
        state.node(seed)
        adjacency = self.classify(state)
        chain = find_linear_chain(seed, adjacency)
        self.logger.info(f"Detected chain of {len(chain)} node(s) from {seed} ({adjacency.mode.value} adjacency)")
        return chain


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
