from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from rebootlab.core.errors import InvalidTestbedError


def load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise InvalidTestbedError(f"Testbed file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise InvalidTestbedError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidTestbedError(f"YAML at {path} must be a mapping")
    return data
