from __future__ import annotations

import logging
from typing import Callable, Sequence

from src.schemas.messages import Message
from src.utils.errors import GenerationError
from src.utils.llm_clients import LLMClient
from src.utils.parsing import has_block, parse_task_directive

logger = logging.getLogger(__name__)

SpeakerSelector = Callable[[Sequence[str], Sequence[Message]], str]


def first_eligible(candidates: Sequence[str], transcript: Sequence[Message]) -> str:
    return candidates[0]


class AddresseeSelector:
    """Follows the coordinator's own routing blocks when they name a candidate.

    A ```task``` block's ``to`` field picks that participant; ```ask``` and
    ```summary``` blocks go to the human proxy. Anything else falls back to
    declaration order.
    """

    def __init__(self, user_name: str = "user") -> None:
        self.user_name = user_name

    def __call__(self, candidates: Sequence[str], transcript: Sequence[Message]) -> str:
        if not transcript:
            return candidates[0]
        content = transcript[-1].content

        directive = parse_task_directive(content)
        if directive is not None and directive.to in candidates:
            return directive.to
        if self.user_name in candidates and (has_block(content, "ask") or has_block(content, "summary")):
            return self.user_name
        return candidates[0]


class GroupAdminSelector:
    """Lets a model pick among the eligible speakers."""

    def __init__(self, llm_client: LLMClient, prompt: str, name: str = "groupAdmin") -> None:
        self.llm_client = llm_client
        self.prompt = prompt
        self.name = name

    def __call__(self, candidates: Sequence[str], transcript: Sequence[Message]) -> str:
        if len(candidates) == 1:
            return candidates[0]
        instruction = (
            f"{self.prompt.strip()}\n\n"
            f"Choose who speaks next from: {', '.join(candidates)}.\n"
            "Reply with the name only."
        )
        try:
            answer = self.llm_client.complete(instruction, transcript, self.name)
        except GenerationError as exc:
            logger.warning("Speaker selection failed, using %s: %s", candidates[0], exc)
            return candidates[0]

        picked = answer.strip().strip("`'\".").strip()
        if picked in candidates:
            return picked
        logger.warning("Selector answered %r, not a candidate; using %s", picked, candidates[0])
        return candidates[0]
