#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Graph editing errors — exception hierarchy raised by the mutation engine.

Every mutation validates its inputs and raises before a new graph state is
produced, so a caught error never leaves a half-applied edit behind.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from typing import Any, Dict, Optional


class GraphEditError(Exception):
    """Base class for all graph editing errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        message = str(self.args[0]) if self.args else ''
        if not self.context:
            return message
        details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
        return f"{message} ({details})"


class InvalidSelectionError(GraphEditError):
    """Raised when an operation requires exactly one selected node."""
    pass


class NodeNotFoundError(InvalidSelectionError, KeyError):
    """Raised when a node id is not present in the graph."""
    pass


class NotAChainError(GraphEditError):
    """Raised when a merge is requested for fewer than two chain nodes."""
    pass


class NoCombinationsSelectedError(GraphEditError):
    """Raised when a vertex resolution is confirmed with nothing kept."""
    pass


class VertexNotAmbiguousError(GraphEditError):
    """Raised when resolution is requested for a vertex of degree <= 1."""
    pass


class DanglingReferenceError(GraphEditError):
    """Raised when an edge references a node absent from the graph."""
    pass


class DuplicateNodeIdError(GraphEditError):
    """Raised when two nodes in one graph share an id."""
    pass


class GraphInvariantError(GraphEditError, RuntimeError):
    """Internal invariant violation. Never caught inside the engine."""
    pass


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
