from __future__ import annotations

import logging
import subprocess
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List

from src.tools.base import Tool

logger = logging.getLogger(__name__)


class CodeExecutorTool(Tool):
    """Runs Python source in a subprocess and captures its output."""

    def __init__(
        self,
        work_dir: str | Path,
        timeout_seconds: float = 60.0,
        allow_installs: bool = False,
        python: str | None = None,
    ) -> None:
        super().__init__(name="code_executor")
        self.work_dir = Path(work_dir)
        self.timeout_seconds = timeout_seconds
        self.allow_installs = allow_installs
        self.python = python or sys.executable

    def run(self, query: Dict[str, Any]) -> Dict[str, Any]:
        code = (query.get("code") or "").strip()
        if not code:
            return {"stdout": "", "stderr": "no code to run", "exit_status": 1}

        script = self.work_dir / f"snippet_{uuid.uuid4().hex[:8]}.py"
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
            script.write_text(code + "\n", encoding="utf-8")
        except OSError as exc:
            return {"stdout": "", "stderr": f"cannot prepare {script}: {exc}", "exit_status": 1}
        logger.debug("Running %s", script)
        try:
            return self._invoke([self.python, str(script)])
        finally:
            script.unlink(missing_ok=True)

    def install(self, packages: Iterable[str]) -> Dict[str, Any]:
        names: List[str] = [p.strip() for p in packages if p.strip()]
        if not names:
            return {"stdout": "", "stderr": "", "exit_status": 0}
        if not self.allow_installs:
            return {
                "stdout": "",
                "stderr": f"package installation is disabled: {', '.join(names)}",
                "exit_status": 1,
            }
        logger.info("Installing packages: %s", ", ".join(names))
        return self._invoke([self.python, "-m", "pip", "install", "--quiet", *names])

    def _invoke(self, command: List[str]) -> Dict[str, Any]:
        try:
            completed = subprocess.run(
                command,
                cwd=self.work_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            return {
                "stdout": _as_text(exc.stdout),
                "stderr": f"execution timed out after {self.timeout_seconds:g}s",
                "exit_status": -1,
            }
        except OSError as exc:
            return {"stdout": "", "stderr": f"cannot start {command[0]}: {exc}", "exit_status": 1}
        return {
            "stdout": completed.stdout,
            "stderr": completed.stderr,
            "exit_status": completed.returncode,
        }


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
