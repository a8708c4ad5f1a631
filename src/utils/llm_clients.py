from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_deepseek import ChatDeepSeek
from langchain_openai import ChatOpenAI

from src.schemas.messages import Message
from src.utils.errors import ConfigurationError, GenerationError
from src.utils.settings import LLMConfig

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    """Lightweight interface so agents can swap between real and stub models."""

    @abstractmethod
    def complete(self, prompt: str, memory: Iterable[Message], speaker: str) -> str:
        """Return the next reply of ``speaker`` given its system prompt and the transcript."""


class EchoLLMClient(LLMClient):
    """Fallback implementation used for local tests without external APIs."""

    def complete(self, prompt: str, memory: Iterable[Message], speaker: str) -> str:
        transcript = "\n".join(f"{m.speaker}: {m.content}" for m in memory)
        return (
            f"{prompt.strip()}\n\n"
            f"Speaker: {speaker}\n"
            f"Transcript:\n{transcript.strip()}"
        )


class ScriptedLLMClient(LLMClient):
    """Replays canned replies in order; raises once they run out."""

    def __init__(self, replies: Iterable[str]) -> None:
        self._replies: List[str] = list(replies)
        self.calls = 0

    def complete(self, prompt: str, memory: Iterable[Message], speaker: str) -> str:
        if self.calls >= len(self._replies):
            raise GenerationError(f"no scripted reply left for {speaker}")
        reply = self._replies[self.calls]
        self.calls += 1
        return reply


class LangChainLLMClient(LLMClient):
    """Backs an agent with a LangChain chat model."""

    def __init__(self, chat_model: BaseChatModel) -> None:
        self.chat_model = chat_model

    def complete(self, prompt: str, memory: Iterable[Message], speaker: str) -> str:
        messages = to_chat_messages(prompt, memory, speaker)
        try:
            response = self.chat_model.invoke(messages)
        except Exception as exc:
            raise GenerationError(f"model call for {speaker} failed: {exc}") from exc
        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return content


def to_chat_messages(prompt: str, memory: Iterable[Message], speaker: str) -> List[BaseMessage]:
    """Own turns become assistant messages; everyone else's are user messages tagged with the sender."""
    messages: List[BaseMessage] = [SystemMessage(content=prompt)]
    for message in memory:
        if message.speaker == speaker:
            messages.append(AIMessage(content=message.content))
        else:
            messages.append(HumanMessage(content=f"{message.content}\nfrom: {message.speaker}"))
    return messages


def build_chat_model(config: LLMConfig, temperature: float | None = None) -> BaseChatModel:
    temp = config.temperature if temperature is None else temperature
    provider = config.provider.lower()
    if provider == "openai":
        kwargs = {}
        if config.base_url:
            kwargs["base_url"] = config.base_url
        return ChatOpenAI(
            model=config.model,
            temperature=temp,
            timeout=config.timeout,
            max_retries=config.max_retries,
            **kwargs,
        )
    if provider == "deepseek":
        return ChatDeepSeek(
            model=config.model,
            temperature=temp,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )
    raise ConfigurationError(f"Unsupported LLM provider '{config.provider}'")


def build_llm_client(config: LLMConfig, temperature: float | None = None) -> LLMClient:
    if config.provider.lower() == "echo":
        return EchoLLMClient()
    logger.debug("Building %s/%s client at temperature %s", config.provider, config.model, temperature)
    return LangChainLLMClient(build_chat_model(config, temperature))
