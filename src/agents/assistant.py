from __future__ import annotations

from pathlib import Path

from src.agents.base import Agent
from src.schemas.messages import AgentState, Message
from src.utils.errors import GenerationError
from src.utils.llm_clients import LLMClient


class AssistantAgent(Agent):
    """Model-backed participant driven by a role prompt."""

    def __init__(
        self,
        name: str,
        prompt_path: str | Path,
        llm_client: LLMClient,
        temperature: float | None = None,
    ) -> None:
        super().__init__(name=name)
        self.prompt = Path(prompt_path).read_text(encoding="utf-8")
        self.llm_client = llm_client
        self.temperature = temperature

    def step(self, state: AgentState) -> Message:
        content = self.llm_client.complete(self.prompt, state.memory, self.name)
        if not content or not content.strip():
            raise GenerationError(f"{self.name} returned an empty reply")
        return Message(
            speaker=self.name,
            content=content.strip(),
            metadata={"round": state.round_idx, "temperature": self.temperature},
        )
