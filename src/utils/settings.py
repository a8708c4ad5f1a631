from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError

from src.utils.errors import ConfigurationError


class LLMConfig(BaseModel):
    provider: str
    model: str
    temperature: float = 0.0
    base_url: Optional[str] = None
    timeout: Optional[float] = None
    max_retries: int = 2


class AgentConfig(BaseModel):
    backend: Literal["llm", "runner", "user"] = "llm"
    prompt_path: Optional[str] = None
    temperature: Optional[float] = None
    default_reply: Optional[str] = None
    human_input_mode: Literal["never", "always"] = "never"


class WorkflowConfig(BaseModel):
    max_rounds: int = 30
    initiator: str = "user"
    speaker_selection: Literal["first", "addressee", "group_admin"] = "first"
    fallback_speaker: Optional[str] = None
    reply_timeout_seconds: Optional[float] = None
    max_retries: int = 1
    termination_signal: str = "[GROUPCHAT_TERMINATE]"
    request_template: str = "prompts/conversion_request.md"
    selector_prompt_path: Optional[str] = None


class ExecutorConfig(BaseModel):
    work_dir: str = ".workspace"
    timeout_seconds: float = 60.0
    allow_installs: bool = False


class FixturesConfig(BaseModel):
    directory: str = "fixtures"
    files: Dict[str, str] = {}


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None


class AppConfig(BaseModel):
    llm: LLMConfig
    agents: Dict[str, AgentConfig]
    workflow: WorkflowConfig
    executor: ExecutorConfig = ExecutorConfig()
    fixtures: FixturesConfig = FixturesConfig()
    logging: LoggingConfig = LoggingConfig()
    root: Path = Path(".")

    def resolve(self, path: str) -> Path:
        """Config paths are relative to the directory holding ``configs/``."""
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate


def load_config(env: str = "base", config_dir: str | Path = "configs") -> AppConfig:
    config_dir = Path(config_dir)
    base_path = config_dir / "base.yaml"
    if not base_path.exists():
        raise ConfigurationError(f"Missing base config: {base_path}")
    base = _read_yaml(base_path)
    if env != "base":
        override_path = config_dir / f"{env}.yaml"
        if override_path.exists():
            base = _merge_dicts(base, _read_yaml(override_path))
    try:
        return AppConfig(
            llm=LLMConfig(**base["llm"]),
            agents={k: AgentConfig(**(v or {})) for k, v in base.get("agents", {}).items()},
            workflow=WorkflowConfig(**base.get("workflow", {})),
            executor=ExecutorConfig(**base.get("executor", {})),
            fixtures=FixturesConfig(**base.get("fixtures", {})),
            logging=LoggingConfig(**base.get("logging", {"level": "INFO"})),
            root=config_dir.resolve().parent,
        )
    except (KeyError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid configuration in {config_dir}: {exc}") from exc


def _read_yaml(path: Path) -> Dict[str, Any]:
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge_dicts(base[key], value)
        else:
            merged[key] = value
    return merged
