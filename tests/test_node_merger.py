#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Tests for chain merging.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging

import pytest

from chainweaver.graph_core import (
    EdgeProvenance,
    GraphFormat,
    GraphInvariantError,
    NodeId,
    NodeKind,
    NodeMerger,
    NodeNotFoundError,
    NotAChainError,
    Orientation,
    merge_chain,
    merged_node_info,
)
from conftest import ids, make_state


class TestMergeLinearChain:
    """Test merging A -> B -> C."""

    def test_merge_from_middle(self, linear_state):
        result = NodeMerger().merge_from_seed(linear_state, NodeId('B'))
        merged = result.merged_node

        assert merged.id == NodeId('MERGED_A_B_C_1')
        assert merged.kind is NodeKind.MERGED
        assert merged.merged_from == tuple(ids('A', 'B', 'C'))
        assert merged.length == 600
        assert merged.depth == pytest.approx(4.0)
        assert merged.position == pytest.approx((10.0, 10.0))
        assert merged.path_name == 'Linear Chain: A → C'

        assert result.new_state.node_ids == (merged.id,)
        assert result.new_state.edges == ()
        assert result.external_connection_count == 0

    def test_zero_length_and_depth_are_kept(self):
        state = make_state(
            [{'id': 'A', 'length': 0, 'depth': 0.0}, {'id': 'B', 'length': 200, 'depth': 4.0}],
            [('A', 'B')],
        )

        merged = merge_chain(state, ids('A', 'B')).merged_node

        assert merged.length == 200
        assert merged.depth == pytest.approx(2.0)

    def test_original_nodes_round_trip(self, linear_state):
        result = merge_chain(linear_state, ids('A', 'B', 'C'))
        originals = result.merged_node.original_nodes

        assert [n.id for n in originals] == ids('A', 'B', 'C')
        assert originals == linear_state.nodes
        assert result.merged_node.original_links == linear_state.edges

    def test_input_state_untouched(self, linear_state):
        before = (linear_state.nodes, linear_state.edges, linear_state.id_serial)
        merge_chain(linear_state, ids('A', 'B', 'C'))
        assert (linear_state.nodes, linear_state.edges, linear_state.id_serial) == before

    def test_serial_advances(self, linear_state):
        result = merge_chain(linear_state, ids('A', 'B'))
        assert result.merged_node.id == NodeId('MERGED_A_B_1')
        assert result.new_state.id_serial == 2

    def test_custom_prefix(self, linear_state):
        result = merge_chain(linear_state, ids('B', 'C'), id_prefix='CHAIN')
        assert str(result.merged_node.id) == 'CHAIN_B_C_1'

    def test_id_collision_bumps_serial(self):
        state = make_state(['A', 'B', 'MERGED_A_B_1'], [('A', 'B')])
        result = merge_chain(state, ids('A', 'B'))
        assert result.merged_node.id == NodeId('MERGED_A_B_2')
        assert result.new_state.id_serial == 3

    def test_summary(self, linear_state):
        summary = merge_chain(linear_state, ids('A', 'B', 'C')).summary
        assert summary.operation == 'merge'
        assert summary.chain_length == 3
        assert summary.consumed_ids == tuple(ids('A', 'B', 'C'))


class TestExternalConnections:
    """Test that connectivity outside the chain is conserved."""

    def test_external_edges_rewired(self, framed_chain_state):
        result = NodeMerger().merge_from_seed(framed_chain_state, NodeId('B'))
        merged_id = result.merged_node.id
        keys = {edge.key for edge in result.new_state.edges}

        assert (NodeId('P'), merged_id) in keys
        assert (merged_id, NodeId('Q')) in keys
        assert len(result.new_state.edges) == 6
        assert not any(edge.touches(n) for edge in result.new_state.edges for n in ids('A', 'B', 'C'))

    def test_connectivity_conservation(self, framed_chain_state):
        chain = ids('A', 'B', 'C')
        result = merge_chain(framed_chain_state, chain)
        merged_id = result.merged_node.id

        expected = set()
        for edge in framed_chain_state.edges:
            source_in, target_in = edge.source in chain, edge.target in chain
            if source_in != target_in:
                expected.add((
                    merged_id if source_in else edge.source,
                    merged_id if target_in else edge.target,
                ))
        replacements = {e.key for e in result.new_state.edges if e.touches(merged_id)}
        assert replacements == expected

    def test_connection_classification(self, framed_chain_state):
        result = merge_chain(framed_chain_state, ids('A', 'B', 'C'))
        by_direction = {c.direction: c for c in result.external_connections}

        incoming = by_direction['incoming']
        assert incoming.external_id == NodeId('P')
        assert incoming.boundary_id == NodeId('A')
        assert incoming.terminal == 'red'
        assert incoming.chain_end == 'start'

        outgoing = by_direction['outgoing']
        assert outgoing.external_id == NodeId('Q')
        assert outgoing.boundary_id == NodeId('C')
        assert outgoing.terminal == 'green'
        assert outgoing.chain_end == 'end'

    def test_replacement_provenance(self, framed_chain_state):
        result = merge_chain(framed_chain_state, ids('A', 'B', 'C'))
        replaced = [e for e in result.new_state.edges if e.touches(result.merged_node.id)]
        assert all(e.provenance is EdgeProvenance.MERGED for e in replaced)
        assert {e.origin_node for e in replaced} == set(ids('A', 'C'))

    def test_gfa_orientation_and_overlap_preserved(self):
        state = make_state(
            ['1', '2', '3', '4'],
            [('1', '2', '+', '+', '5M'), ('2', '3', '+', '+', '6M'), ('3', '4', '+', '-', '7M')],
            graph_format=GraphFormat.GFA,
        )
        result = merge_chain(state, ids('2', '3'))
        merged_id = result.merged_node.id
        edges = {e.key: e for e in result.new_state.edges}

        into = edges[(NodeId('1'), merged_id)]
        assert (into.src_orientation, into.tgt_orientation, into.overlap) == (
            Orientation.FORWARD, Orientation.FORWARD, '5M')

        out = edges[(merged_id, NodeId('4'))]
        assert (out.src_orientation, out.tgt_orientation, out.overlap) == (
            Orientation.FORWARD, Orientation.REVERSE, '7M')

    def test_interior_attachment_warns(self, caplog):
        state = make_state(['A', 'B', 'C', 'Z'], [('A', 'B'), ('B', 'C'), ('B', 'Z')])

        with caplog.at_level(logging.WARNING):
            result = merge_chain(state, ids('A', 'B', 'C'))

        interior = [c for c in result.external_connections if c.chain_end == 'interior']
        assert len(interior) == 1
        assert interior[0].external_id == NodeId('Z')
        assert 'not a chain end' in caplog.text

    def test_cycle_merge_keeps_closing_edge(self):
        state = make_state(['A', 'B', 'C'], [('A', 'B'), ('B', 'C'), ('C', 'A')])
        result = NodeMerger().merge_from_seed(state, NodeId('A'))
        assert len(result.merged_node.original_links) == 3
        assert result.new_state.edges == ()


class TestMergeErrors:
    """Test merge validation."""

    def test_single_node_is_not_a_chain(self, linear_state):
        with pytest.raises(NotAChainError):
            merge_chain(linear_state, ids('A'))

    def test_branching_seed_is_not_a_chain(self, ambiguous_state):
        with pytest.raises(NotAChainError):
            NodeMerger().merge_from_seed(ambiguous_state, NodeId('V'))

    def test_duplicate_member(self, linear_state):
        with pytest.raises(GraphInvariantError):
            merge_chain(linear_state, ids('A', 'B', 'A'))

    def test_unknown_member(self, linear_state):
        with pytest.raises(NodeNotFoundError):
            merge_chain(linear_state, ids('A', 'ghost'))


class TestMergedNodeInfo:
    """Test merged-node display information."""

    def test_info_for_merged_node(self, linear_state):
        merged = merge_chain(linear_state, ids('A', 'B', 'C')).merged_node
        info = merged_node_info(merged)

        assert info['original_nodes'] == ['A', 'B', 'C']
        assert info['node_count'] == 3
        assert info['total_length'] == 600
        assert info['internal_links'] == 2

    def test_info_for_plain_node(self, linear_state):
        assert merged_node_info(linear_state.node(NodeId('A'))) is None
