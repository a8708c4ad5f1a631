from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping

from src.utils.errors import FixtureNotFoundError

logger = logging.getLogger(__name__)


class FixtureLoader:
    """Reads the named seed files a conversation is built from."""

    def __init__(self, directory: str | Path, files: Mapping[str, str]) -> None:
        self.directory = Path(directory)
        self.files: Dict[str, str] = dict(files)

    def path_for(self, name: str) -> Path:
        if name not in self.files:
            raise FixtureNotFoundError(f"Unknown fixture '{name}'")
        return self.directory / self.files[name]

    def load(self, name: str) -> str:
        path = self.path_for(name)
        if not path.is_file():
            raise FixtureNotFoundError(f"Fixture '{name}' not found at {path}")
        logger.debug("Loading fixture %s from %s", name, path)
        return path.read_text(encoding="utf-8")

    def load_all(self) -> Dict[str, str]:
        return {name: self.load(name) for name in self.files}
