#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest

from chainweaver.graph_core import GraphEdge, GraphFormat, GraphNode, GraphState, NodeId


def make_state(node_specs, edge_specs, graph_format=GraphFormat.DOT, id_serial=1):
    """
    Build a GraphState from compact specs.

    node_specs: ids, or dicts with 'id' plus GraphNode fields
    edge_specs: (source, target[, src_orientation, tgt_orientation[, overlap]])
    """
    nodes = []
    for spec in node_specs:
        if isinstance(spec, dict):
            fields = dict(spec)
            nodes.append(GraphNode(id=NodeId.of(fields.pop('id')), **fields))
        else:
            nodes.append(GraphNode(id=NodeId.of(spec)))

    edges = []
    for spec in edge_specs:
        source, target, *rest = spec
        kwargs = {}
        if len(rest) >= 2:
            kwargs['src_orientation'] = rest[0]
            kwargs['tgt_orientation'] = rest[1]
        if len(rest) >= 3:
            kwargs['overlap'] = rest[2]
        edges.append(GraphEdge(NodeId.of(source), NodeId.of(target), **kwargs))

    return GraphState(nodes=tuple(nodes), edges=tuple(edges), graph_format=graph_format, id_serial=id_serial)


def ids(*raw):
    """Shorthand for a list of NodeIds."""
    return [NodeId.of(r) for r in raw]


@pytest.fixture
def state_factory():
    """Factory building states from compact node/edge specs."""
    return make_state


@pytest.fixture
def linear_state():
    """DOT chain A -> B -> C with distinct lengths, depths and positions."""
    return make_state(
        [
            {'id': 'A', 'length': 100, 'depth': 2.0, 'position': (0.0, 0.0)},
            {'id': 'B', 'length': 200, 'depth': 4.0, 'position': (10.0, 0.0)},
            {'id': 'C', 'length': 300, 'depth': 6.0, 'position': (20.0, 30.0)},
        ],
        [('A', 'B'), ('B', 'C')],
    )


@pytest.fixture
def framed_chain_state():
    """
    DOT chain A -> B -> C between two branching nodes:

        U1, U2 -> P -> A -> B -> C -> Q -> R1, R2
    """
    return make_state(
        ['U1', 'U2', 'P', 'A', 'B', 'C', 'Q', 'R1', 'R2'],
        [
            ('U1', 'P'), ('U2', 'P'),
            ('P', 'A'), ('A', 'B'), ('B', 'C'), ('C', 'Q'),
            ('Q', 'R1'), ('Q', 'R2'),
        ],
    )


@pytest.fixture
def ambiguous_state():
    """DOT vertex V with incoming {X, Y} and outgoing {Z}."""
    return make_state(
        ['X', 'Y', {'id': 'V', 'position': (0.0, 0.0), 'length': 500}, 'Z'],
        [('X', 'V'), ('Y', 'V'), ('V', 'Z')],
    )


@pytest.fixture
def gfa_ambiguous_state():
    """GFA vertex V with X+ -> V+, Y+ -> V+ and V+ -> Z+ (overlaps kept)."""
    return make_state(
        ['X', 'Y', 'V', 'Z'],
        [
            ('X', 'V', '+', '+', '10M'),
            ('Y', 'V', '+', '+', '12M'),
            ('V', 'Z', '+', '+', '8M'),
        ],
        graph_format=GraphFormat.GFA,
    )
