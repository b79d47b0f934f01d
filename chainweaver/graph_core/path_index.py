#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ChainWeaver v0.1.0

Path Index — user-saved node-id sequences kept consistent across merges
and vertex resolutions.

Paths are never dropped. A path whose ids no longer all exist is flagged
STALE; a path that cannot be remapped deterministically after a vertex
split is flagged UNRESOLVED_AFTER_SPLIT and keeps its old sequence.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .data_structures import GraphState, NodeId
from .node_merger_module import MergeResult
from .vertex_resolver_module import ResolutionCombination, ResolutionResult

logger = logging.getLogger(__name__)

# Color palette for paths (10 colors)
PATH_COLOR_PALETTE = (
    '#FF6B6B',  # red
    '#4ECDC4',  # teal
    '#45B7D1',  # blue
    '#96CEB4',  # green
    '#FFEAA7',  # yellow
    '#DFE6E9',  # light gray
    '#74B9FF',  # light blue
    '#A29BFE',  # purple
    '#00CEC9',  # cyan
    '#FDCB6E',  # orange
)


class PathFlag(Enum):
    """Consistency status of a saved path."""
    OK = 'ok'
    STALE = 'stale'
    UNRESOLVED_AFTER_SPLIT = 'unresolved-after-split'


@dataclass(frozen=True)
class SavedPath:
    """
    User-curated ordered node sequence.

    ``derived_edges`` is None until edges are recomputed for display.
    """
    id: int
    name: str
    sequence: Tuple[NodeId, ...]
    derived_edges: Optional[FrozenSet[int]] = None
    color: str = PATH_COLOR_PALETTE[0]
    flag: PathFlag = PathFlag.OK
    update_reason: str = ''

    @property
    def node_set(self) -> FrozenSet[NodeId]:
        return frozenset(self.sequence)

    @property
    def is_stale(self) -> bool:
        return self.flag is PathFlag.STALE

    @property
    def is_flagged(self) -> bool:
        return self.flag is not PathFlag.OK

    def with_changes(self, **changes: Any) -> 'SavedPath':
        return dataclasses.replace(self, **changes)

    def sequence_string(self) -> str:
        return ','.join(str(n) for n in self.sequence)


@dataclass(frozen=True)
class AmbiguousPathRewrite:
    """
    A path occurrence of a resolved vertex that could not be remapped.

    ``candidates`` lists the copies that matched; empty means none did.
    """
    path_id: int
    path_name: str
    position: int
    vertex_id: NodeId
    candidates: Tuple[NodeId, ...]

    @property
    def reason(self) -> str:
        if not self.candidates:
            return 'no kept combination matches the path neighbors'
        return f"{len(self.candidates)} kept combinations match the path neighbors"


@dataclass
class PathUpdateReport:
    """Which paths a mutation touched and how."""
    modified: List[int] = field(default_factory=list)
    flagged: List[int] = field(default_factory=list)
    stale: List[int] = field(default_factory=list)
    unaffected: List[int] = field(default_factory=list)
    ambiguous: List[AmbiguousPathRewrite] = field(default_factory=list)

    def describe(self) -> str:
        affected = len(self.modified) + len(self.flagged)
        lines = [
            "Path Update Summary:",
            f"• {affected} paths affected",
            f"• {len(self.modified)} paths successfully updated",
        ]
        if self.flagged:
            lines.append(f"• {len(self.flagged)} paths flagged (no unambiguous replacement)")
        if self.stale:
            lines.append(f"• {len(self.stale)} paths reference missing nodes")
        lines.append(f"• {len(self.unaffected)} paths unaffected")
        return '\n'.join(lines)


def collapse_consecutive(sequence: Iterable[NodeId]) -> Tuple[NodeId, ...]:
    """Drop ids equal to their predecessor."""
    collapsed: List[NodeId] = []
    for node_id in sequence:
        if not collapsed or collapsed[-1] != node_id:
            collapsed.append(node_id)
    return tuple(collapsed)


def derive_edges(sequence: Sequence[NodeId], state: GraphState) -> FrozenSet[int]:
    """Indices of edges joining consecutive path ids, in either direction."""
    wanted = set()
    for a, b in zip(sequence, sequence[1:]):
        wanted.add((a, b))
        wanted.add((b, a))
    return frozenset(i for i, edge in enumerate(state.edges) if edge.key in wanted)


def _side_matches(path_neighbor: Optional[NodeId], link_neighbor: Optional[NodeId]) -> bool:
    # A path boundary places no constraint on that side
    return path_neighbor is None or path_neighbor == link_neighbor


def matching_combinations(
    kept: Sequence[ResolutionCombination],
    previous: Optional[NodeId],
    following: Optional[NodeId],
) -> List[ResolutionCombination]:
    """
    Kept combinations consistent with a path's neighbors of the vertex.

    Forward traversal (previous = incoming source, following = outgoing
    target) is preferred; reverse traversal is considered only when no
    combination matches forward.
    """
    forward = [
        c for c in kept
        if _side_matches(previous, c.incoming_neighbor) and _side_matches(following, c.outgoing_neighbor)
    ]
    if forward:
        return forward
    return [
        c for c in kept
        if _side_matches(previous, c.outgoing_neighbor) and _side_matches(following, c.incoming_neighbor)
    ]


class PathIndex:
    """
    Ordered collection of saved paths.

    Every update returns a new PathIndex; the receiver is left untouched so
    it can be retained in undo history.
    """

    def __init__(
        self,
        paths: Iterable[SavedPath] = (),
        palette: Sequence[str] = PATH_COLOR_PALETTE,
        next_color_index: int = 0,
    ):
        self._paths: Tuple[SavedPath, ...] = tuple(paths)
        self.palette = tuple(palette) or PATH_COLOR_PALETTE
        self.next_color_index = next_color_index
        self.logger = logging.getLogger(f"{__name__}.PathIndex")

    def __iter__(self) -> Iterator[SavedPath]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    @property
    def paths(self) -> Tuple[SavedPath, ...]:
        return self._paths

    def get(self, path_id: int) -> Optional[SavedPath]:
        for path in self._paths:
            if path.id == path_id:
                return path
        return None

    def _derive(self, paths: Iterable[SavedPath]) -> 'PathIndex':
        return PathIndex(paths, palette=self.palette, next_color_index=self.next_color_index)

    # ------------------------------------------------------------------
    # Path management
    # ------------------------------------------------------------------

    def add_path(
        self,
        name: Optional[str],
        sequence: Sequence[NodeId],
        state: Optional[GraphState] = None,
    ) -> Tuple['PathIndex', SavedPath]:
        """
        Add a path with the next id and palette color.

        Returns:
            (new_index, new_path)
        """
        next_id = max((p.id for p in self._paths), default=0) + 1
        path = SavedPath(
            id=next_id,
            name=name or f"Path {len(self._paths) + 1}",
            sequence=tuple(sequence),
            color=self.palette[self.next_color_index % len(self.palette)],
        )
        if state is not None:
            path = self._with_staleness(path, state)

        index = PathIndex(
            self._paths + (path,),
            palette=self.palette,
            next_color_index=self.next_color_index + 1,
        )
        return index, path

    def remove_path(self, path_id: int) -> 'PathIndex':
        return self._derive(p for p in self._paths if p.id != path_id)

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    @staticmethod
    def _with_staleness(path: SavedPath, state: GraphState) -> SavedPath:
        missing = [n for n in path.sequence if n not in state]
        if path.flag is PathFlag.UNRESOLVED_AFTER_SPLIT:
            return path
        if missing or not path.sequence:
            return path if path.flag is PathFlag.STALE else path.with_changes(flag=PathFlag.STALE)
        return path if path.flag is PathFlag.OK else path.with_changes(flag=PathFlag.OK)

    def refresh(self, state: GraphState) -> 'PathIndex':
        """Re-evaluate STALE flags against ``state``."""
        return self._derive(self._with_staleness(p, state) for p in self._paths)

    def with_derived_edges(self, state: GraphState) -> 'PathIndex':
        """Fill in ``derived_edges`` for paths that need recomputation."""
        return self._derive(
            p if p.derived_edges is not None
            else p.with_changes(derived_edges=derive_edges(p.sequence, state))
            for p in self._paths
        )

    # ------------------------------------------------------------------
    # Mutation updates
    # ------------------------------------------------------------------

    def apply_merge(self, result: MergeResult) -> Tuple['PathIndex', PathUpdateReport]:
        """
        Replace merged chain members with the merged node id.

        Consecutive duplicates produced by the replacement are collapsed.
        """
        consumed = set(result.consumed_ids)
        merged_id = result.merged_node.id
        reason = f"Nodes merged: {', '.join(str(n) for n in result.consumed_ids)} → {merged_id}"
        report = PathUpdateReport()
        updated: List[SavedPath] = []

        for path in self._paths:
            if not consumed.intersection(path.sequence):
                updated.append(path)
                continue

            sequence = collapse_consecutive(merged_id if n in consumed else n for n in path.sequence)
            updated.append(path.with_changes(sequence=sequence, derived_edges=None, update_reason=reason))
            report.modified.append(path.id)
            self.logger.debug(f"Path '{path.name}' updated to {','.join(str(n) for n in sequence)}")

        return self._finish(updated, result.new_state, report)

    def apply_resolution(self, result: ResolutionResult) -> Tuple['PathIndex', PathUpdateReport]:
        """
        Replace each occurrence of the resolved vertex with the copy of the
        unique kept combination matching the path's neighbors.

        Paths with an unmatched or ambiguous occurrence are flagged, not
        rewritten.
        """
        vertex_id = result.consumed_id
        report = PathUpdateReport()
        updated: List[SavedPath] = []

        for path in self._paths:
            positions = [i for i, n in enumerate(path.sequence) if n == vertex_id]
            if not positions:
                updated.append(path)
                continue

            sequence = list(path.sequence)
            failures: List[AmbiguousPathRewrite] = []
            for position in positions:
                previous = path.sequence[position - 1] if position > 0 else None
                following = path.sequence[position + 1] if position + 1 < len(path.sequence) else None
                matches = matching_combinations(result.kept, previous, following)
                if len(matches) == 1:
                    sequence[position] = result.copy_for(matches[0]).id
                else:
                    failures.append(AmbiguousPathRewrite(
                        path_id=path.id,
                        path_name=path.name,
                        position=position,
                        vertex_id=vertex_id,
                        candidates=tuple(result.copy_for(c).id for c in matches),
                    ))

            if failures:
                self.logger.warning(
                    f"Path '{path.name}' cannot be remapped after splitting {vertex_id}: {failures[0].reason}"
                )
                updated.append(path.with_changes(
                    flag=PathFlag.UNRESOLVED_AFTER_SPLIT,
                    update_reason=f"{vertex_id} split: {failures[0].reason}",
                ))
                report.flagged.append(path.id)
                report.ambiguous.extend(failures)
                continue

            new_ids = sorted({str(sequence[p]) for p in positions})
            updated.append(path.with_changes(
                sequence=tuple(sequence),
                derived_edges=None,
                update_reason=f"{vertex_id} → {', '.join(new_ids)}",
            ))
            report.modified.append(path.id)

        return self._finish(updated, result.new_state, report)

    def _finish(
        self,
        updated: List[SavedPath],
        state: GraphState,
        report: PathUpdateReport,
    ) -> Tuple['PathIndex', PathUpdateReport]:
        touched = set(report.modified) | set(report.flagged)
        refreshed = [self._with_staleness(p, state) for p in updated]
        for path in refreshed:
            if path.id not in touched:
                report.unaffected.append(path.id)
            if path.is_stale:
                report.stale.append(path.id)

        if report.modified or report.flagged:
            self.logger.info(
                f"Updated {len(report.modified)} path(s), flagged {len(report.flagged)}, "
                f"{len(report.unaffected)} unaffected"
            )
        return self._derive(refreshed), report

    @classmethod
    def from_records(
        cls,
        records: Iterable[Dict[str, Any]],
        state: Optional[GraphState] = None,
        palette: Sequence[str] = PATH_COLOR_PALETTE,
    ) -> 'PathIndex':
        """
        Rebuild an index from ``to_records`` output (or bare name/sequence records).

        Saved ids are kept; records without one get the next free id.
        """
        index = cls(palette=palette)
        for record in records:
            raw = record.get('sequence') or ()
            if isinstance(raw, str):
                raw = [part for part in raw.split(',') if part.strip()]
            index, path = index.add_path(record.get('name'), [NodeId.of(n) for n in raw], state)

            changes: Dict[str, Any] = {}
            if record.get('id') is not None and int(record['id']) != path.id:
                changes['id'] = int(record['id'])
            if record.get('color'):
                changes['color'] = record['color']
            if record.get('update_reason'):
                changes['update_reason'] = record['update_reason']
            if record.get('flag') == PathFlag.UNRESOLVED_AFTER_SPLIT.value:
                changes['flag'] = PathFlag.UNRESOLVED_AFTER_SPLIT
            if changes:
                index = index._derive(
                    path.with_changes(**changes) if p.id == path.id else p for p in index.paths
                )
        return index

    def to_records(self) -> List[Dict[str, Any]]:
        return [
            {
                'id': p.id,
                'name': p.name,
                'sequence': [str(n) for n in p.sequence],
                'color': p.color,
                'flag': p.flag.value,
                'update_reason': p.update_reason,
            }
            for p in self._paths
        ]


# ChainWeaver v0.1.0
# Any usage is subject to this software's license.
