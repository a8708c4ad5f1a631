from __future__ import annotations

from typing import Any, Dict, List

from src.agents.base import Agent
from src.schemas.messages import AgentState, Message
from src.tools.code_executor import CodeExecutorTool
from src.utils.parsing import extract_code_blocks

NO_CODE_REPLY = "No code available, coder, write code please"


class RunnerAgent(Agent):
    """Executes the code from the coder's most recent message."""

    def __init__(
        self,
        code_executor: CodeExecutorTool,
        name: str = "runner",
        coder_name: str = "coder",
        language: str = "python",
        default_reply: str = NO_CODE_REPLY,
    ) -> None:
        super().__init__(name=name, tools=[code_executor])
        self.code_executor = code_executor
        self.coder_name = coder_name
        self.language = language
        self.default_reply = default_reply

    def step(self, state: AgentState) -> Message:
        coder_message = state.last_from(self.coder_name)
        if coder_message is None:
            return self._reply(self.default_reply, state)

        blocks = extract_code_blocks(coder_message.content, self.language)
        if not blocks:
            return self._reply(self.default_reply, state)

        packages = [
            line
            for block in extract_code_blocks(coder_message.content, "pip")
            for line in block.splitlines()
        ]
        if packages:
            installed = self.code_executor.install(packages)
            if installed["exit_status"] != 0:
                return self._reply(self._format("pip install", installed), state, installed)

        result = self.code_executor.run({"code": "\n\n".join(blocks)})
        return self._reply(self._format("execution", result), state, result)

    def _reply(self, content: str, state: AgentState, result: Dict[str, Any] | None = None) -> Message:
        metadata: Dict[str, Any] = {"round": state.round_idx}
        if result is not None:
            metadata["exit_status"] = result["exit_status"]
        return Message(speaker=self.name, content=content, metadata=metadata)

    @staticmethod
    def _format(step: str, result: Dict[str, Any]) -> str:
        status = result["exit_status"]
        lines: List[str] = [f"{step} {'succeeded' if status == 0 else 'failed'} (exit status {status})"]
        if result["stdout"].strip():
            lines.extend(["stdout:", "```", result["stdout"].rstrip(), "```"])
        if result["stderr"].strip():
            lines.extend(["stderr:", "```", result["stderr"].rstrip(), "```"])
        return "\n".join(lines)
