#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Snapshot History — bounded undo/redo over whole editor snapshots.

Graph states and path indexes are immutable, so a snapshot is just the
pair of references; nothing is copied.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from ..graph_core.data_structures import GraphState
from ..graph_core.path_index import PathIndex

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DEPTH = 20


@dataclass(frozen=True)
class EditorSnapshot:
    """Graph state and saved paths at one point in the edit history."""
    state: GraphState
    paths: PathIndex
    label: str = ''


class SnapshotHistory:
    """
    Undo stack capped at ``max_depth`` (oldest evicted first) plus a redo
    stack that every new push clears.
    """

    def __init__(self, max_depth: int = DEFAULT_HISTORY_DEPTH):
        if max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {max_depth}")
        self.max_depth = max_depth
        self._undo: Deque[EditorSnapshot] = deque(maxlen=max_depth)
        self._redo: List[EditorSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def __len__(self) -> int:
        return len(self._undo)

    def push(self, snapshot: EditorSnapshot):
        """Record the state before an edit."""
        if len(self._undo) == self.max_depth:
            logger.debug(f"History full ({self.max_depth}); evicting oldest snapshot")
        self._undo.append(snapshot)
        self._redo.clear()

    def undo(self, current: EditorSnapshot) -> Optional[EditorSnapshot]:
        """
        Step back one edit.

        Args:
            current: Snapshot of the state being undone (moved to redo)

        Returns:
            Snapshot to restore, or None if there is nothing to undo
        """
        if not self._undo:
            return None
        self._redo.append(current)
        return self._undo.pop()

    def redo(self, current: EditorSnapshot) -> Optional[EditorSnapshot]:
        """Re-apply the last undone edit, or return None."""
        if not self._redo:
            return None
        self._undo.append(current)
        return self._redo.pop()

    def clear(self):
        self._undo.clear()
        self._redo.clear()


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
