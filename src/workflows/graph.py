from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from src.schemas.messages import Message
from src.utils.errors import GuardEvaluationWarning, UnknownParticipantError

logger = logging.getLogger(__name__)

START = "start"

Roster = Mapping[str, str]
Guard = Callable[[Sequence[Message], Roster], bool]


@dataclass(frozen=True)
class Edge:
    """Directed transition; ``guard`` of None means always eligible."""

    source: str
    target: str
    guard: Optional[Guard] = None


@dataclass(frozen=True)
class WorkflowGraph:
    """Ordered, guarded transitions between named participants.

    Edge order is the priority order: when several edges leaving the same
    participant pass, callers needing one speaker take the earliest.
    """

    participants: FrozenSet[str]
    edges: Tuple[Edge, ...]
    roster: Mapping[str, str] = field(default_factory=dict)

    def outgoing(self, source: str) -> List[Edge]:
        return [edge for edge in self.edges if edge.source == source]

    def eligible_targets(self, current_speaker: str, transcript: Iterable[Message]) -> List[str]:
        snapshot = tuple(transcript)
        targets: List[str] = []
        for edge in self.outgoing(current_speaker):
            if edge.target in targets:
                continue
            if self._passes(edge, snapshot):
                targets.append(edge.target)
        return targets

    def _passes(self, edge: Edge, snapshot: Tuple[Message, ...]) -> bool:
        if edge.guard is None:
            return True
        try:
            return bool(edge.guard(snapshot, self.roster))
        except Exception as exc:
            detail = f"guard on {edge.source} -> {edge.target} raised {type(exc).__name__}: {exc}"
            logger.warning("Treating edge as not matching: %s", detail)
            warnings.warn(detail, GuardEvaluationWarning, stacklevel=3)
            return False


def build_graph(
    participants: Iterable[str],
    edges: Iterable[Edge],
    roster: Mapping[str, str] | None = None,
) -> WorkflowGraph:
    """Validate names and freeze the workflow.

    ``roster`` maps role keys used by guards to participant names; by default
    every participant is its own role.
    """
    declared = frozenset(participants)
    ordered = tuple(edges)
    for edge in ordered:
        if edge.source != START and edge.source not in declared:
            raise UnknownParticipantError(f"Edge source '{edge.source}' is not a declared participant")
        if edge.target not in declared:
            raise UnknownParticipantError(f"Edge target '{edge.target}' is not a declared participant")

    lookup: Dict[str, str] = {name: name for name in declared}
    if roster:
        for role, name in roster.items():
            if name not in declared:
                raise UnknownParticipantError(f"Role '{role}' maps to undeclared participant '{name}'")
        lookup.update(roster)
    return WorkflowGraph(participants=declared, edges=ordered, roster=lookup)


def eligible_targets(
    graph: WorkflowGraph,
    current_speaker: str,
    transcript: Iterable[Message],
) -> List[str]:
    return graph.eligible_targets(current_speaker, transcript)
