from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from domain.errors import ConfigurationError


class JsonDataSource:
    """Per-user form data read from a JSON document.

    Instances are callable, so they plug straight in as the ``fetch(key)``
    data source of the linearizer. Keys are dotted paths (``"address.city"``,
    ``"employment.0.title"``); a missing path yields ``None``.
    """

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data

    @classmethod
    def from_file(cls, path: str | Path) -> "JsonDataSource":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ConfigurationError(f"Missing data file: {path}") from None
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"{path.name} must contain a JSON object")
        return cls(data)

    def __call__(self, key: str) -> Any:
        return self.fetch(key)

    def fetch(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if isinstance(current, Mapping):
                if part not in current:
                    return None
                current = current[part]
            elif isinstance(current, Sequence) and not isinstance(current, str) and part.lstrip("-").isdigit():
                index = int(part)
                if not -len(current) <= index < len(current):
                    return None
                current = current[index]
            else:
                return None
        return current
