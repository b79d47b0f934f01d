#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Tests for record ingestion and graph documents.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import json

import pytest
import yaml

from chainweaver.graph_core import GraphFormat, NodeId, PathFlag, PathIndex, merge_chain
from chainweaver.io_utils import (
    build_graph_state,
    detect_format,
    load_graph_document,
    save_graph_document,
    state_to_records,
)
from conftest import ids


NODE_RECORDS = [
    {'id': 1, 'length': 250, 'depth': 3.5, 'x': 4, 'y': 8},
    {'id': '2', 'length': '*'},
    {'id': ' 3 ', 'seq': 'ACGT', 'LN': 4},
]


class TestBuildGraphState:
    """Test parser record normalization."""

    def test_ids_normalized_once(self):
        state, _ = build_graph_state(NODE_RECORDS, [{'source': 1, 'target': '2'}])
        assert state.node_ids == tuple(ids('1', '2', '3'))
        assert state.edges[0].key == (NodeId('1'), NodeId('2'))

    def test_defaults_and_aliases(self):
        state, _ = build_graph_state(NODE_RECORDS, [])
        assert state.node(NodeId('1')).position == (4.0, 8.0)
        assert state.node(NodeId('2')).length == 1000
        assert state.node(NodeId('2')).depth == 1.0
        assert state.node(NodeId('3')).sequence == 'ACGT'
        assert state.node(NodeId('3')).length == 4

    def test_configured_defaults(self):
        state, _ = build_graph_state([{'id': 'a'}], [], default_length=50, default_depth=2.0)
        assert state.node(NodeId('a')).length == 50
        assert state.node(NodeId('a')).depth == 2.0

    def test_dangling_edges_filtered_and_reported(self):
        state, report = build_graph_state(
            NODE_RECORDS,
            [{'source': 1, 'target': 2}, {'source': 2, 'target': 99}],
        )
        assert len(state.edges) == 1
        assert report.dangling_edges == [('2', '99')]
        assert report.dropped_edges == 1

    def test_duplicate_edges_keep_first(self):
        state, report = build_graph_state(
            NODE_RECORDS,
            [
                {'source': 1, 'target': 2, 'srcOrientation': '+', 'tgtOrientation': '+', 'overlap': '5M'},
                {'source': 1, 'target': 2, 'srcOrientation': '-', 'tgtOrientation': '+', 'overlap': '9M'},
            ],
        )
        assert len(state.edges) == 1
        assert state.edges[0].overlap == '5M'
        assert report.duplicate_edges == 1

    def test_snake_case_orientation_keys(self):
        state, _ = build_graph_state(
            NODE_RECORDS, [{'source': 1, 'target': 3, 'src_orientation': '-', 'tgt_orientation': '-'}]
        )
        assert state.edges[0].src_orientation.value == '-'
        assert state.graph_format is GraphFormat.GFA

    def test_format_detection(self):
        assert detect_format([{'source': 1, 'target': 2}]) is GraphFormat.DOT
        assert detect_format([{'source': 1, 'target': 2, 'srcOrientation': '+'}]) is GraphFormat.GFA

    def test_explicit_format_wins(self):
        state, _ = build_graph_state(
            NODE_RECORDS, [{'source': 1, 'target': 2, 'srcOrientation': '+'}], graph_format='dot'
        )
        assert state.graph_format is GraphFormat.DOT


class TestRecordExport:
    """Test state to record conversion."""

    def test_merged_node_survives_records(self, linear_state):
        merged_state = merge_chain(linear_state, ids('A', 'B', 'C')).new_state
        records = state_to_records(merged_state)

        rebuilt, _ = build_graph_state(
            records['nodes'], records['edges'],
            graph_format=records['format'], id_serial=records['id_serial'],
        )

        assert rebuilt.nodes == merged_state.nodes
        assert rebuilt.id_serial == 2
        assert records['nodes'][0]['merged_from'] == ['A', 'B', 'C']


class TestGraphDocuments:
    """Test YAML/JSON graph documents."""

    def test_yaml_document_round_trip(self, framed_chain_state, tmp_path):
        paths, _ = PathIndex().add_path('route', ids('P', 'A', 'B'), framed_chain_state)
        target = save_graph_document(tmp_path / 'graph.yaml', framed_chain_state, paths)

        state, loaded_paths, report = load_graph_document(target)

        assert state.node_ids == framed_chain_state.node_ids
        assert state.graph_format is GraphFormat.DOT
        assert [p.sequence for p in loaded_paths] == [tuple(ids('P', 'A', 'B'))]
        assert report.dropped_edges == 0

    def test_json_document(self, ambiguous_state, tmp_path):
        target = save_graph_document(tmp_path / 'graph.json', ambiguous_state)
        with open(target) as f:
            document = json.load(f)

        assert document['format'] == 'dot'
        assert len(document['edges']) == 3

        state, _, _ = load_graph_document(target)
        assert len(state.edges) == 3

    def test_hand_written_document(self, tmp_path):
        document = {
            'nodes': [{'id': 1}, {'id': 2}, {'id': 3}],
            'edges': [
                {'source': 1, 'target': 2, 'srcOrientation': '+', 'tgtOrientation': '-'},
                {'source': 3, 'target': 4},
            ],
            'paths': [
                {'name': 'p', 'sequence': '1,2'},
                {'name': 'old', 'sequence': [1, 9], 'flag': 'unresolved-after-split'},
            ],
        }
        target = tmp_path / 'hand.yaml'
        target.write_text(yaml.safe_dump(document))

        state, paths, report = load_graph_document(target)

        assert state.graph_format is GraphFormat.GFA
        assert report.dangling_edges == [('3', '4')]
        assert paths.get(1).sequence == tuple(ids('1', '2'))
        assert paths.get(2).flag is PathFlag.UNRESOLVED_AFTER_SPLIT

    def test_missing_document(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_graph_document(tmp_path / 'absent.yaml')

    def test_document_without_nodes(self, tmp_path):
        target = tmp_path / 'bad.yaml'
        target.write_text('- just\n- a list\n')
        with pytest.raises(ValueError):
            load_graph_document(target)
