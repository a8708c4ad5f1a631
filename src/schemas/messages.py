from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Message:
    """Single turn exchanged between agents, tools, or user."""

    speaker: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass
class Task:
    """Top-level request the orchestrator must satisfy."""

    id: str
    description: str
    context: Optional[Dict[str, Any]] = None


@dataclass
class AgentState:
    """Shared view passed into each agent step."""

    task: Task
    memory: Tuple[Message, ...]
    round_idx: int = 0
    max_rounds: int = 0

    def last_from(self, speaker: str) -> Message | None:
        for message in reversed(self.memory):
            if message.speaker == speaker:
                return message
        return None
