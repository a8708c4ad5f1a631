from pathlib import Path

import pytest

from src.utils.errors import ConfigurationError
from src.utils.settings import load_config

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"


def test_base_config_loads():
    config = load_config("base", CONFIG_DIR)
    assert config.workflow.max_rounds == 30
    assert set(config.agents) == {"admin", "coder", "reviewer", "runner", "user"}
    assert config.agents["coder"].temperature == 0.4
    assert config.agents["runner"].backend == "runner"
    assert config.resolve("prompts/admin.md").is_file()


def test_env_override_is_merged():
    config = load_config("dev", CONFIG_DIR)
    assert config.llm.provider == "deepseek"
    assert config.llm.timeout == 120
    assert config.workflow.speaker_selection == "group_admin"
    assert config.workflow.fallback_speaker == "admin"


def test_missing_base_config(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config("base", tmp_path)


def test_invalid_section_is_configuration_error(tmp_path):
    (tmp_path / "base.yaml").write_text(
        "llm:\n  provider: openai\n  model: m\nagents: {}\nworkflow:\n  max_rounds: many\n",
        encoding="utf-8",
    )
    with pytest.raises(ConfigurationError):
        load_config("base", tmp_path)
