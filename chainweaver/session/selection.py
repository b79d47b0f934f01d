#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Selection — the node ids a user has picked for an editing operation.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from ..graph_core.data_structures import NodeId
from ..graph_core.errors import InvalidSelectionError


@dataclass(frozen=True)
class Selection:
    """Ordered, duplicate-free set of selected node ids."""
    node_ids: Tuple[NodeId, ...] = ()

    @classmethod
    def of(cls, *raw_ids: Union[NodeId, str, int]) -> 'Selection':
        return cls.from_iterable(raw_ids)

    @classmethod
    def from_iterable(cls, raw_ids: Iterable[Union[NodeId, str, int]]) -> 'Selection':
        ids = []
        for raw in raw_ids:
            node_id = NodeId.of(raw)
            if node_id not in ids:
                ids.append(node_id)
        return cls(tuple(ids))

    def __len__(self) -> int:
        return len(self.node_ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.node_ids

    @property
    def is_empty(self) -> bool:
        return not self.node_ids

    def require_single(self) -> NodeId:
        """
        The one selected node id.

        Raises:
            InvalidSelectionError: zero or more than one node selected
        """
        if len(self.node_ids) != 1:
            raise InvalidSelectionError(
                f"Exactly one node must be selected ({len(self.node_ids)} selected)",
                {'selected': [str(n) for n in self.node_ids]},
            )
        return self.node_ids[0]


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
