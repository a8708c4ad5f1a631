from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

FENCE_RE = re.compile(r"```([A-Za-z0-9_+-]*)[ \t]*\r?\n([\s\S]*?)```")


class TaskDirective(BaseModel):
    to: str
    task: str = ""
    context: Optional[str] = None


def extract_code_blocks(text: str, label: str | None = None) -> List[str]:
    """Return the bodies of fenced blocks, optionally only those tagged ``label``.

    Example:
        text = '''
        ```python
        print("hi")
        ```
        '''
        extract_code_blocks(text, "python")  # ['print("hi")']
    """
    blocks: List[str] = []
    for match in FENCE_RE.finditer(text or ""):
        tag = match.group(1).lower()
        if label is not None and tag != label.lower():
            continue
        blocks.append(match.group(2).strip())
    return blocks


def parse_fenced_json(text: str, label: str) -> Dict[str, Any] | None:
    """Parse the first ``label`` block holding a JSON object; None if absent or malformed."""
    for raw in extract_code_blocks(text, label):
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            return obj
    return None


def parse_task_directive(text: str) -> TaskDirective | None:
    payload = parse_fenced_json(text, "task")
    if payload is None:
        return None
    try:
        return TaskDirective(**payload)
    except ValidationError:
        return None


def has_block(text: str, label: str) -> bool:
    return bool(extract_code_blocks(text, label))
