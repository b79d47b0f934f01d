#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Tests for logical and physical connection classification.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest

from chainweaver.graph_core import (
    AdjacencyMode,
    ConnectionClassifier,
    GraphEdge,
    GraphFormat,
    GraphInvariantError,
    GraphNode,
    NodeId,
    classify_connections,
)
from conftest import ids, make_state


class TestAdjacencyMode:
    """Test mode selection."""

    def test_mode_for_format(self):
        assert AdjacencyMode.for_format(GraphFormat.GFA) is AdjacencyMode.PHYSICAL
        assert AdjacencyMode.for_format(GraphFormat.DOT) is AdjacencyMode.LOGICAL

    def test_parse(self):
        assert AdjacencyMode.parse('Physical') is AdjacencyMode.PHYSICAL
        with pytest.raises(ValueError):
            AdjacencyMode.parse('sideways')


class TestLogicalClassification:
    """Test source -> target classification."""

    def test_source_gets_outgoing_target_gets_incoming(self, linear_state):
        adjacency = ConnectionClassifier(AdjacencyMode.LOGICAL).classify_state(linear_state)

        assert adjacency.connections(NodeId('A')).outgoing_ids == ids('B')
        assert adjacency.connections(NodeId('A')).incoming_ids == []
        assert adjacency.connections(NodeId('B')).incoming_ids == ids('A')
        assert adjacency.connections(NodeId('B')).outgoing_ids == ids('C')
        assert adjacency.degree(NodeId('B')) == 2

    def test_orientation_ignored(self):
        state = make_state(['A', 'B'], [('A', 'B', '-', '-')], graph_format=GraphFormat.GFA)
        adjacency = ConnectionClassifier(AdjacencyMode.LOGICAL).classify_state(state)
        assert adjacency.connections(NodeId('A')).outgoing_ids == ids('B')
        assert adjacency.connections(NodeId('B')).incoming_ids == ids('A')

    def test_terminal_link_records_edge(self, ambiguous_state):
        adjacency = classify_connections(ambiguous_state.nodes, ambiguous_state.edges)
        incoming = adjacency.connections(NodeId('V')).incoming
        assert [link.edge_index for link in incoming] == [0, 1]
        assert not any(link.vertex_is_source for link in incoming)
        assert adjacency.connections(NodeId('V')).outgoing[0].vertex_is_source

    def test_isolated_node_has_entry(self):
        state = make_state(['A', 'B', 'lonely'], [('A', 'B')])
        adjacency = ConnectionClassifier().classify_state(state)
        assert adjacency.degree(NodeId('lonely')) == 0
        assert len(adjacency) == 3


class TestPhysicalClassification:
    """Test terminal selection from GFA orientations."""

    def _classify(self, edge_spec):
        state = make_state(['A', 'B'], [edge_spec], graph_format=GraphFormat.GFA)
        return ConnectionClassifier(AdjacencyMode.PHYSICAL).classify_state(state)

    def test_forward_forward(self):
        adjacency = self._classify(('A', 'B', '+', '+'))
        assert adjacency.connections(NodeId('A')).outgoing_ids == ids('B')
        assert adjacency.connections(NodeId('B')).incoming_ids == ids('A')

    def test_reverse_source_uses_red_terminal(self):
        adjacency = self._classify(('A', 'B', '-', '+'))
        assert adjacency.connections(NodeId('A')).incoming_ids == ids('B')
        assert adjacency.connections(NodeId('A')).outgoing_ids == []
        assert adjacency.connections(NodeId('B')).incoming_ids == ids('A')

    def test_reverse_target_uses_green_terminal(self):
        adjacency = self._classify(('A', 'B', '+', '-'))
        assert adjacency.connections(NodeId('A')).outgoing_ids == ids('B')
        assert adjacency.connections(NodeId('B')).outgoing_ids == ids('A')
        assert adjacency.connections(NodeId('B')).incoming_ids == []

    def test_missing_orientation_defaults_forward(self):
        adjacency = self._classify(('A', 'B'))
        assert adjacency.connections(NodeId('A')).outgoing_ids == ids('B')


class TestSkippedEdges:
    """Test edges with endpoints outside the node set."""

    def test_dangling_edge_skipped_and_counted(self):
        nodes = [GraphNode(id=NodeId('A'))]
        edges = [GraphEdge(NodeId('A'), NodeId('ghost'))]

        adjacency = classify_connections(nodes, edges)

        assert adjacency.skipped_edges == 1
        assert adjacency.degree(NodeId('A')) == 0
        assert NodeId('ghost') not in adjacency

    def test_unclassified_node_is_invariant_violation(self, linear_state):
        adjacency = ConnectionClassifier().classify_state(linear_state)
        with pytest.raises(GraphInvariantError):
            adjacency.connections(NodeId('nowhere'))
