"""
Graph Core module for ChainWeaver.

This module provides the graph mutation engine:
- Immutable graph state (nodes, oriented links, node ids)
- Logical and physical (red/green terminal) connection classification
- Linear chain detection and merging
- Logical and physical vertex resolution
- Saved-path maintenance across mutations
"""

from .errors import (
    GraphEditError,
    InvalidSelectionError,
    NodeNotFoundError,
    NotAChainError,
    NoCombinationsSelectedError,
    VertexNotAmbiguousError,
    DanglingReferenceError,
    DuplicateNodeIdError,
    GraphInvariantError,
)

from .data_structures import (
    NodeId,
    Orientation,
    NodeKind,
    EdgeProvenance,
    GraphFormat,
    GraphNode,
    GraphEdge,
    GraphState,
    MutationSummary,
    DEFAULT_NODE_LENGTH,
    DEFAULT_NODE_DEPTH,
)

from .connection_classifier import (
    AdjacencyMode,
    TerminalLink,
    NodeConnections,
    Adjacency,
    ConnectionClassifier,
    classify_connections,
)

from .chain_detector import (
    ChainDetector,
    find_linear_chain,
    is_chain_eligible,
)

from .node_merger_module import (
    ExternalConnection,
    MergeResult,
    NodeMerger,
    merge_chain,
    merged_node_info,
)

from .vertex_resolver_module import (
    ResolutionCombination,
    ResolutionResult,
    VertexResolver,
    generate_combinations,
    resolve_vertex,
)

from .path_index import (
    PathFlag,
    SavedPath,
    AmbiguousPathRewrite,
    PathUpdateReport,
    PathIndex,
    derive_edges,
)

__all__ = [
    # Errors
    "GraphEditError",
    "InvalidSelectionError",
    "NodeNotFoundError",
    "NotAChainError",
    "NoCombinationsSelectedError",
    "VertexNotAmbiguousError",
    "DanglingReferenceError",
    "DuplicateNodeIdError",
    "GraphInvariantError",
    # Data structures
    "NodeId",
    "Orientation",
    "NodeKind",
    "EdgeProvenance",
    "GraphFormat",
    "GraphNode",
    "GraphEdge",
    "GraphState",
    "MutationSummary",
    "DEFAULT_NODE_LENGTH",
    "DEFAULT_NODE_DEPTH",
    # Classification
    "AdjacencyMode",
    "TerminalLink",
    "NodeConnections",
    "Adjacency",
    "ConnectionClassifier",
    "classify_connections",
    # Chains
    "ChainDetector",
    "find_linear_chain",
    "is_chain_eligible",
    "ExternalConnection",
    "MergeResult",
    "NodeMerger",
    "merge_chain",
    "merged_node_info",
    # Resolution
    "ResolutionCombination",
    "ResolutionResult",
    "VertexResolver",
    "generate_combinations",
    "resolve_vertex",
    # Paths
    "PathFlag",
    "SavedPath",
    "AmbiguousPathRewrite",
    "PathUpdateReport",
    "PathIndex",
    "derive_edges",
]
