#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Graph Records — ingestion of parser node/edge records into a GraphState,
and YAML/JSON graph documents for the command line.

Record shapes (as produced by the GFA/DOT parser collaborator):

    node: {id, length?, depth?, sequence?, x?, y?, angle?, flipped?}
    edge: {source, target, srcOrientation?, tgtOrientation?, overlap?}

Ids are normalized here, once. Edges referencing unknown nodes are
filtered and reported before the GraphState is built; duplicate
(source, target) links keep their first occurrence.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from ..graph_core.data_structures import (
    DEFAULT_NODE_DEPTH,
    DEFAULT_NODE_LENGTH,
    DEFAULT_OVERLAP,
    UNKNOWN_SEQUENCE,
    EdgeProvenance,
    GraphEdge,
    GraphFormat,
    GraphNode,
    GraphState,
    NodeId,
    NodeKind,
    Orientation,
)
from ..graph_core.path_index import PATH_COLOR_PALETTE, PathIndex

logger = logging.getLogger(__name__)

_ORIENTATION_KEYS = ('srcOrientation', 'src_orientation', 'tgtOrientation', 'tgt_orientation')


@dataclass
class IngestionReport:
    """What ingestion filtered out."""
    graph_format: GraphFormat
    dangling_edges: List[Tuple[str, str]] = field(default_factory=list)
    duplicate_edges: int = 0

    @property
    def dropped_edges(self) -> int:
        return len(self.dangling_edges) + self.duplicate_edges


def _first(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _parse_length(raw: Any, default: int) -> int:
    if raw is None or str(raw).strip() in ('', '*'):
        return default
    return int(float(raw))


def _parse_depth(raw: Any, default: float) -> float:
    if raw is None or str(raw).strip() in ('', '*'):
        return default
    return float(raw)


def edge_from_record(record: Mapping[str, Any]) -> GraphEdge:
    """Build a GraphEdge from a parser edge record."""
    origin = record.get('origin_node')
    provenance = record.get('provenance')
    return GraphEdge(
        source=NodeId.of(record['source']),
        target=NodeId.of(record['target']),
        src_orientation=Orientation.parse(_first(record, 'srcOrientation', 'src_orientation')),
        tgt_orientation=Orientation.parse(_first(record, 'tgtOrientation', 'tgt_orientation')),
        overlap=str(_first(record, 'overlap', default=DEFAULT_OVERLAP)),
        provenance=EdgeProvenance(provenance) if provenance else EdgeProvenance.PARSED,
        origin_node=NodeId.of(origin) if origin is not None else None,
    )


def node_from_record(
    record: Mapping[str, Any],
    default_length: int = DEFAULT_NODE_LENGTH,
    default_depth: float = DEFAULT_NODE_DEPTH,
) -> GraphNode:
    """Build a GraphNode from a parser node record (merged nodes included)."""
    kind = NodeKind(record.get('kind', NodeKind.SEGMENT.value))
    original_id = record.get('original_id')
    node = GraphNode(
        id=NodeId.of(record['id']),
        length=_parse_length(_first(record, 'length', 'LN'), default_length),
        depth=_parse_depth(_first(record, 'depth', 'DP'), default_depth),
        position=(float(record.get('x', 0.0)), float(record.get('y', 0.0))),
        orientation_angle=float(_first(record, 'angle', 'orientation_angle', default=0.0)),
        flipped=bool(record.get('flipped', False)),
        kind=kind,
        sequence=str(_first(record, 'sequence', 'seq', default=UNKNOWN_SEQUENCE)),
        merged_from=tuple(NodeId.of(n) for n in record.get('merged_from', ())),
        original_nodes=tuple(
            node_from_record(n, default_length, default_depth) for n in record.get('original_nodes', ())
        ),
        original_links=tuple(edge_from_record(e) for e in record.get('original_links', ())),
        path_name=str(record.get('path_name', '')),
        original_id=NodeId.of(original_id) if original_id is not None else None,
        path_description=str(record.get('path_description', '')),
        resolution_type=record.get('resolution_type'),
    )
    return node


def detect_format(edge_records: Iterable[Mapping[str, Any]]) -> GraphFormat:
    """GFA if any edge carries an orientation, DOT otherwise."""
    for record in edge_records:
        if any(key in record for key in _ORIENTATION_KEYS):
            return GraphFormat.GFA
    return GraphFormat.DOT


def build_graph_state(
    node_records: Iterable[Mapping[str, Any]],
    edge_records: Iterable[Mapping[str, Any]],
    graph_format: Optional[Union[GraphFormat, str]] = None,
    default_length: int = DEFAULT_NODE_LENGTH,
    default_depth: float = DEFAULT_NODE_DEPTH,
    id_serial: int = 1,
) -> Tuple[GraphState, IngestionReport]:
    """
    Normalize parser records into a GraphState.

    Args:
        node_records: Node records
        edge_records: Edge records
        graph_format: 'gfa', 'dot' or None to detect from orientations
        default_length: Length for nodes without one (or '*')
        default_depth: Depth for nodes without one
        id_serial: Initial creation counter

    Returns:
        (state, report)
    """
    edge_records = list(edge_records)
    if graph_format is None or str(getattr(graph_format, 'value', graph_format)).lower() == 'auto':
        fmt = detect_format(edge_records)
    else:
        fmt = GraphFormat.parse(graph_format)

    nodes = [node_from_record(r, default_length, default_depth) for r in node_records]
    known = {node.id for node in nodes}
    report = IngestionReport(graph_format=fmt)

    edges: List[GraphEdge] = []
    seen = set()
    for record in edge_records:
        edge = edge_from_record(record)
        if edge.source not in known or edge.target not in known:
            report.dangling_edges.append((str(edge.source), str(edge.target)))
            continue
        if edge.key in seen:
            report.duplicate_edges += 1
            continue
        seen.add(edge.key)
        edges.append(edge)

    if report.dangling_edges:
        logger.warning(
            f"Filtered {len(report.dangling_edges)} edge(s) referencing unknown nodes: "
            + ', '.join(f"{s}->{t}" for s, t in report.dangling_edges[:5])
        )
    if report.duplicate_edges:
        logger.warning(f"Dropped {report.duplicate_edges} duplicate edge(s)")

    state = GraphState(nodes=tuple(nodes), edges=tuple(edges), graph_format=fmt, id_serial=id_serial)
    logger.info(f"Ingested {fmt.value.upper()} graph: {len(nodes)} nodes, {len(edges)} edges")
    return state, report


# ============================================================================
#                       RECORD EXPORT
# ============================================================================

def edge_to_record(edge: GraphEdge) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        'source': str(edge.source),
        'target': str(edge.target),
        'srcOrientation': edge.src_orientation.value,
        'tgtOrientation': edge.tgt_orientation.value,
        'overlap': edge.overlap,
    }
    if edge.provenance is not EdgeProvenance.PARSED:
        record['provenance'] = edge.provenance.value
    if edge.origin_node is not None:
        record['origin_node'] = str(edge.origin_node)
    return record


def node_to_record(node: GraphNode) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        'id': str(node.id),
        'length': node.length,
        'depth': node.depth,
        'sequence': node.sequence,
        'x': node.x,
        'y': node.y,
    }
    if node.orientation_angle:
        record['angle'] = node.orientation_angle
    if node.flipped:
        record['flipped'] = True
    if node.is_merged:
        record.update({
            'kind': node.kind.value,
            'merged_from': [str(n) for n in node.merged_from],
            'original_nodes': [node_to_record(n) for n in node.original_nodes],
            'original_links': [edge_to_record(e) for e in node.original_links],
            'path_name': node.path_name,
        })
    if node.original_id is not None:
        record.update({
            'original_id': str(node.original_id),
            'path_description': node.path_description,
            'resolution_type': node.resolution_type,
        })
    return record


def state_to_records(state: GraphState) -> Dict[str, Any]:
    """Full node/edge record collections for the rendering collaborator."""
    return {
        'format': state.graph_format.value,
        'id_serial': state.id_serial,
        'nodes': [node_to_record(n) for n in state.nodes],
        'edges': [edge_to_record(e) for e in state.edges],
    }


# ============================================================================
#                       GRAPH DOCUMENTS
# ============================================================================

def load_graph_document(
    path: Union[str, Path],
    graph_format: Optional[str] = None,
    default_length: int = DEFAULT_NODE_LENGTH,
    default_depth: float = DEFAULT_NODE_DEPTH,
    palette: Optional[Sequence[str]] = None,
) -> Tuple[GraphState, PathIndex, IngestionReport]:
    """
    Load a YAML or JSON document {format?, nodes, edges, paths?}.

    Raises:
        FileNotFoundError: If the document does not exist.
        ValueError: If the document is not a mapping with nodes.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Graph document not found: {path}")

    logger.info(f"Loading graph document: {path}")
    with open(path, 'r') as f:
        if path.suffix.lower() == '.json':
            document = json.load(f)
        else:
            document = yaml.safe_load(f)

    if not isinstance(document, dict) or 'nodes' not in document:
        raise ValueError(f"Graph document {path} must be a mapping with a 'nodes' list")

    fmt = graph_format if graph_format and graph_format != 'auto' else document.get('format')
    state, report = build_graph_state(
        document.get('nodes') or [],
        document.get('edges') or [],
        graph_format=fmt,
        default_length=default_length,
        default_depth=default_depth,
        id_serial=int(document.get('id_serial', 1)),
    )

    paths = PathIndex.from_records(
        document.get('paths') or [], state, palette=palette or PATH_COLOR_PALETTE
    )
    return state, paths, report


def save_graph_document(
    path: Union[str, Path],
    state: GraphState,
    paths: Optional[PathIndex] = None,
    output_format: Optional[str] = None,
) -> Path:
    """Write state and paths as YAML (default) or JSON."""
    path = Path(path)
    document = state_to_records(state)
    document['paths'] = paths.to_records() if paths is not None else []

    fmt = output_format or ('json' if path.suffix.lower() == '.json' else 'yaml')
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        if fmt == 'json':
            json.dump(document, f, indent=2)
        else:
            yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    logger.info(f"Wrote graph document: {path}")
    return path


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
