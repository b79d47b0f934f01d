#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Graph Editor — single-writer editing session over a GraphState.

Each edit runs the pure mutation, rewrites saved paths against the result,
then swaps both in and records the previous snapshot for undo. Any error
is raised before the swap, leaving state and history untouched.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..config.schema import DEFAULT_CONFIG, get_setting
from ..graph_core.chain_detector import ChainDetector
from ..graph_core.connection_classifier import AdjacencyMode
from ..graph_core.data_structures import GraphState, MutationSummary, NodeId
from ..graph_core.errors import NotAChainError
from ..graph_core.node_merger_module import MergeResult, NodeMerger, merged_node_info
from ..graph_core.path_index import PathIndex, PathUpdateReport, SavedPath
from ..graph_core.vertex_resolver_module import (
    ResolutionCombination,
    ResolutionResult,
    VertexResolver,
)
from .history import EditorSnapshot, SnapshotHistory
from .selection import Selection


@dataclass(frozen=True)
class EditOutcome:
    """What an applied edit produced."""
    summary: MutationSummary
    path_report: PathUpdateReport
    result: Union[MergeResult, ResolutionResult]


class GraphEditor:
    """
    Editing session: current state, saved paths and undo history.

    Usage:
        editor = GraphEditor(state, paths, config)
        outcome = editor.merge_selected(Selection.of('B'))
        editor.undo()
    """

    def __init__(
        self,
        state: GraphState,
        paths: Optional[PathIndex] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.config = config if config is not None else copy.deepcopy(DEFAULT_CONFIG)
        self._state = state
        self._paths = paths if paths is not None else PathIndex(
            palette=get_setting(self.config, 'paths.palette', ())
        )
        self.history = SnapshotHistory(get_setting(self.config, 'history.max_depth', 20))
        self.merger = NodeMerger(id_prefix=get_setting(self.config, 'merge.id_prefix', 'MERGED'))
        self.logger = logging.getLogger(f"{__name__}.GraphEditor")

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def paths(self) -> PathIndex:
        return self._paths

    def _snapshot(self, label: str = '') -> EditorSnapshot:
        return EditorSnapshot(state=self._state, paths=self._paths, label=label)

    def _apply(self, new_state: GraphState, new_paths: PathIndex, label: str):
        self.history.push(self._snapshot(label))
        self._state = new_state
        self._paths = new_paths

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    def resolution_mode(self, mode: Optional[Union[AdjacencyMode, str]] = None) -> AdjacencyMode:
        """Explicit mode, else the configured one; 'auto' follows the graph format."""
        mode = mode or get_setting(self.config, 'resolution.mode', 'auto')
        if isinstance(mode, str) and mode.lower() == 'auto':
            return AdjacencyMode.for_format(self._state.graph_format)
        return AdjacencyMode.parse(mode)

    def _resolver(self, mode: Optional[Union[AdjacencyMode, str]]) -> VertexResolver:
        return VertexResolver(
            self.resolution_mode(mode),
            copy_radius=get_setting(self.config, 'resolution.copy_radius', 60.0),
        )

    # ------------------------------------------------------------------
    # Chains
    # ------------------------------------------------------------------

    def detect_chain(self, selection: Selection) -> List[NodeId]:
        return ChainDetector().detect(self._state, selection.require_single())

    def merge_selected(self, selection: Selection) -> EditOutcome:
        """
        Merge the linear chain through the single selected node.

        Raises:
            InvalidSelectionError: selection is not exactly one node
            NodeNotFoundError: selected node not in graph
            NotAChainError: chain has fewer than two nodes
        """
        seed = selection.require_single()
        chain = ChainDetector().detect(self._state, seed)
        if len(chain) < 2:
            raise NotAChainError(
                f"Node {seed} is not part of a linear chain (found {len(chain)} nodes)",
                {'seed': str(seed)},
            )

        result = self.merger.merge(self._state, chain)
        new_paths, report = self._paths.apply_merge(result)

        self._apply(result.new_state, new_paths, f"merge {seed}")
        self.logger.info(result.summary.describe())
        return EditOutcome(summary=result.summary, path_report=report, result=result)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def combinations(
        self,
        selection: Selection,
        mode: Optional[Union[AdjacencyMode, str]] = None,
    ) -> List[ResolutionCombination]:
        return self._resolver(mode).combinations(self._state, selection.require_single())

    def resolve_selected(
        self,
        selection: Selection,
        kept: Optional[Iterable[Union[int, ResolutionCombination]]] = None,
        mode: Optional[Union[AdjacencyMode, str]] = None,
    ) -> EditOutcome:
        """
        Resolve the single selected vertex, keeping ``kept`` combinations
        (all of them when None).
        """
        vertex_id = selection.require_single()
        resolver = self._resolver(mode)
        if kept is None:
            kept = [c.index for c in resolver.combinations(self._state, vertex_id)]

        result = resolver.resolve(self._state, vertex_id, kept)
        new_paths, report = self._paths.apply_resolution(result)

        self._apply(result.new_state, new_paths, f"resolve {vertex_id}")
        self.logger.info(result.summary.describe())
        if report.flagged:
            self.logger.warning(f"{len(report.flagged)} saved path(s) need manual review after resolution")
        return EditOutcome(summary=result.summary, path_report=report, result=result)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def add_path(self, name: Optional[str], sequence: Sequence[Union[NodeId, str, int]]) -> SavedPath:
        """Save a path; recorded in history like any other edit."""
        new_paths, path = self._paths.add_path(name, [NodeId.of(n) for n in sequence], self._state)
        self._apply(self._state, new_paths, f"add path {path.name}")
        return path

    def remove_path(self, path_id: int):
        self._apply(self._state, self._paths.remove_path(path_id), f"remove path {path_id}")

    def node_info(self, node_id: Union[NodeId, str, int]) -> Optional[Dict[str, Any]]:
        return merged_node_info(self._state.node(NodeId.of(node_id)))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        snapshot = self.history.undo(self._snapshot())
        if snapshot is None:
            return False
        self._state, self._paths = snapshot.state, snapshot.paths
        self.logger.info(f"Undid {snapshot.label or 'edit'}")
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo(self._snapshot())
        if snapshot is None:
            return False
        self._state, self._paths = snapshot.state, snapshot.paths
        self.logger.info("Redid edit")
        return True


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
