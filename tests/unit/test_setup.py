import os

from src.utils.setup import setup


def test_keys_exported_from_secrets_file(tmp_path, monkeypatch):
    env = {"DEEPSEEK_API_KEY": "already-set"}
    monkeypatch.setattr(os, "environ", env)
    secrets = tmp_path / "config.yml"
    secrets.write_text("openai_api: sk-from-file\ndeepseek_api: ds-from-file\n", encoding="utf-8")

    setup(secrets)

    assert env == {"DEEPSEEK_API_KEY": "already-set", "OPENAI_API_KEY": "sk-from-file"}


def test_missing_secrets_file_is_fine(tmp_path, monkeypatch):
    env = {}
    monkeypatch.setattr(os, "environ", env)
    setup(tmp_path / "absent.yml")
    assert env == {}
