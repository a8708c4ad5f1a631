import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from src.schemas.messages import Message
from src.utils.errors import ConfigurationError, GenerationError
from src.utils.llm_clients import (
    EchoLLMClient,
    LangChainLLMClient,
    build_chat_model,
    build_llm_client,
    to_chat_messages,
)
from src.utils.settings import LLMConfig

MEMORY = [Message("user", "convert"), Message("admin", "plan"), Message("coder", "code")]


def test_chat_messages_split_by_speaker():
    messages = to_chat_messages("be helpful", MEMORY, "admin")
    assert isinstance(messages[0], SystemMessage)
    assert isinstance(messages[1], HumanMessage)
    assert messages[1].content == "convert\nfrom: user"
    assert isinstance(messages[2], AIMessage)
    assert messages[2].content == "plan"
    assert isinstance(messages[3], HumanMessage)


def test_langchain_client_returns_model_text():
    client = LangChainLLMClient(FakeListChatModel(responses=["```task\n{}\n```"]))
    assert client.complete("prompt", MEMORY, "admin") == "```task\n{}\n```"


def test_model_failure_becomes_generation_error():
    class Broken(FakeListChatModel):
        def _call(self, *args, **kwargs):
            raise ConnectionError("offline")

    client = LangChainLLMClient(Broken(responses=["unused"]))
    with pytest.raises(GenerationError, match="offline"):
        client.complete("prompt", MEMORY, "coder")


def test_openai_model_gets_role_temperature(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    model = build_chat_model(LLMConfig(provider="openai", model="gpt-4o"), temperature=0.4)
    assert model.temperature == 0.4
    assert model.model_name == "gpt-4o"


def test_unknown_provider_rejected():
    with pytest.raises(ConfigurationError):
        build_chat_model(LLMConfig(provider="carrier-pigeon", model="x"))


def test_echo_provider_needs_no_network():
    assert isinstance(build_llm_client(LLMConfig(provider="echo", model="none")), EchoLLMClient)
