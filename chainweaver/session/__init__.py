"""
Editing session for ChainWeaver.

This module wraps the mutation engine for interactive callers:
- Node selection with single-node validation
- Bounded undo/redo over whole graph/path snapshots
- Mutation followed by saved-path rewrite, applied all-or-nothing
"""

from .selection import Selection
from .history import EditorSnapshot, SnapshotHistory
from .editor import EditOutcome, GraphEditor

__all__ = [
    "Selection",
    "EditorSnapshot",
    "SnapshotHistory",
    "EditOutcome",
    "GraphEditor",
]
