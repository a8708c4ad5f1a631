from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List

from src.schemas.messages import AgentState, Message
from src.tools.base import Tool


class Agent(ABC):
    """Base contract for every participant in the group chat."""

    name: str

    def __init__(self, name: str, tools: Iterable[Tool] | None = None) -> None:
        self.name = name
        self.tools: List[Tool] = list(tools or [])

    @abstractmethod
    def step(self, state: AgentState) -> Message:
        """Produce the next message based on shared state.

        Raises ``GenerationError`` when no reply can be produced for this turn.
        """
