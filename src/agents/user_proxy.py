from __future__ import annotations

from typing import Callable

from src.agents.base import Agent
from src.schemas.messages import AgentState, Message

TERMINATE = "[GROUPCHAT_TERMINATE]"


class UserProxyAgent(Agent):
    """Stands in for the human; in ``never`` mode it always ends the chat."""

    def __init__(
        self,
        name: str = "user",
        default_reply: str = TERMINATE,
        human_input_mode: str = "never",
        input_fn: Callable[[str], str] = input,
    ) -> None:
        super().__init__(name=name)
        if human_input_mode not in ("never", "always"):
            raise ValueError(f"Unsupported human_input_mode '{human_input_mode}'")
        self.default_reply = default_reply
        self.human_input_mode = human_input_mode
        self.input_fn = input_fn

    def step(self, state: AgentState) -> Message:
        content = self.default_reply
        if self.human_input_mode == "always":
            last = state.memory[-1] if state.memory else None
            prompt = f"[{last.speaker}] {last.content}\n> " if last else "> "
            try:
                answer = self.input_fn(prompt).strip()
            except EOFError:
                answer = ""
            if answer:
                content = answer
        return Message(speaker=self.name, content=content, metadata={"round": state.round_idx})
