from src.agents.runner import NO_CODE_REPLY, RunnerAgent
from src.schemas.messages import AgentState, Message, Task
from src.tools.code_executor import CodeExecutorTool


def build_state(*messages):
    return AgentState(task=Task(id="t1", description="convert"), memory=tuple(messages), round_idx=3)


def test_runs_latest_coder_code(tmp_path):
    runner = RunnerAgent(CodeExecutorTool(work_dir=tmp_path))
    state = build_state(
        Message("coder", "```python\nprint('old')\n```"),
        Message("admin", "run it"),
        Message("coder", "```python\nprint('new')\n```"),
        Message("admin", "run it again"),
    )
    message = runner.step(state)

    assert message.speaker == "runner"
    assert "new" in message.content
    assert "old" not in message.content
    assert message.metadata["exit_status"] == 0


def test_reports_failed_execution(tmp_path):
    runner = RunnerAgent(CodeExecutorTool(work_dir=tmp_path))
    message = runner.step(build_state(Message("coder", "```python\nraise ValueError('nope')\n```")))
    assert "failed" in message.content
    assert "ValueError" in message.content
    assert message.metadata["exit_status"] == 1


def test_default_reply_without_coder_message(tmp_path):
    runner = RunnerAgent(CodeExecutorTool(work_dir=tmp_path))
    message = runner.step(build_state(Message("admin", "run")))
    assert message.content == NO_CODE_REPLY


def test_default_reply_without_code_block(tmp_path):
    runner = RunnerAgent(CodeExecutorTool(work_dir=tmp_path))
    message = runner.step(build_state(Message("coder", "I will write it soon")))
    assert message.content == NO_CODE_REPLY


def test_pip_block_blocked_when_installs_disabled(tmp_path):
    runner = RunnerAgent(CodeExecutorTool(work_dir=tmp_path))
    content = "```pip\nsomepkg\n```\n```python\nprint('x')\n```"
    message = runner.step(build_state(Message("coder", content)))
    assert "pip install failed" in message.content


def test_executor_os_failure_becomes_reply(tmp_path):
    runner = RunnerAgent(CodeExecutorTool(work_dir=tmp_path, python=str(tmp_path / "missing-python")))
    message = runner.step(build_state(Message("coder", "```python\nprint('x')\n```")))
    assert "execution failed" in message.content
    assert message.metadata["exit_status"] == 1
