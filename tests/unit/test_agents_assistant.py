import pytest

from src.agents.assistant import AssistantAgent
from src.schemas.messages import AgentState, Message, Task
from src.utils.errors import GenerationError
from src.utils.llm_clients import EchoLLMClient, ScriptedLLMClient


def build_state():
    return AgentState(task=Task(id="t1", description="d"), memory=(Message("user", "convert this"),), round_idx=2)


def test_reply_uses_prompt_and_transcript(tmp_path):
    prompt = tmp_path / "coder.md"
    prompt.write_text("Coder prompt", encoding="utf-8")
    agent = AssistantAgent(name="coder", prompt_path=prompt, llm_client=EchoLLMClient(), temperature=0.4)

    message = agent.step(build_state())

    assert message.speaker == "coder"
    assert "Coder prompt" in message.content
    assert "user: convert this" in message.content
    assert message.metadata == {"round": 2, "temperature": 0.4}


def test_empty_reply_is_generation_error(tmp_path):
    prompt = tmp_path / "admin.md"
    prompt.write_text("Admin prompt", encoding="utf-8")
    agent = AssistantAgent(name="admin", prompt_path=prompt, llm_client=ScriptedLLMClient(["   "]))

    with pytest.raises(GenerationError):
        agent.step(build_state())
