from __future__ import annotations

import logging
import os
from pathlib import Path

from omegaconf import OmegaConf

logger = logging.getLogger(__name__)

# secrets file key -> environment variable read by the chat model clients
API_KEYS = {
    "openai_api": "OPENAI_API_KEY",
    "deepseek_api": "DEEPSEEK_API_KEY",
}


def setup(secrets_path: str | Path = "config.yml") -> None:
    """Export API keys from the local secrets file unless the environment already has them."""
    path = Path(secrets_path)
    if not path.exists():
        logger.debug("No secrets file at %s; relying on environment", path)
        return
    config = OmegaConf.load(path)
    for key, env_var in API_KEYS.items():
        value = config.get(key)
        if value and not os.environ.get(env_var):
            os.environ[env_var] = str(value)
