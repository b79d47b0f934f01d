"""
I/O utilities for ChainWeaver.

This module handles graph record ingestion and graph documents:
- Parser node/edge records to GraphState (id normalization, dangling-edge filtering)
- GraphState to renderer records
- YAML/JSON graph documents with saved paths
"""

from .graph_records import (
    IngestionReport,
    build_graph_state,
    detect_format,
    node_from_record,
    edge_from_record,
    node_to_record,
    edge_to_record,
    state_to_records,
    load_graph_document,
    save_graph_document,
)

__all__ = [
    # Ingestion
    "IngestionReport",
    "build_graph_state",
    "detect_format",
    "node_from_record",
    "edge_from_record",
    # Export
    "node_to_record",
    "edge_to_record",
    "state_to_records",
    # Documents
    "load_graph_document",
    "save_graph_document",
]
