from __future__ import annotations
from typing import Any, Dict, Optional
from pathlib import Path
import yaml
import os
from datetime import datetime, timezone


def ensure_dir(path: Path | str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def env_value(name: str) -> Optional[str]:
    """Trimmed env value, or None if unset/blank."""
    v = os.environ.get(name)
    if v is None:
        return None
    v = v.strip()
    return v or None


def env_flag(name: str, default: bool = False) -> bool:
    v = env_value(name)
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "on"}


def normalize_prefix(prefix: Optional[str]) -> str:
    """Strip whitespace and trailing slashes: 'images/old/' -> 'images/old'."""
    return (prefix or "").strip().rstrip("/")


class KeyMapper:
    """
    Map keys under `source/` to the same relative path under `target/`.
    Expects keys already filtered to start with `source/`.
    """

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        self._cut = len(source) + 1

    def relative(self, key: str) -> str:
        return key[self._cut:]

    def map(self, key: str) -> str:
        return f"{self.target}/{self.relative(key)}"
