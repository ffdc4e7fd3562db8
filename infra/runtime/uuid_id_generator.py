from __future__ import annotations

import uuid


class UuidIdGenerator:
    def __init__(self, prefix: str = "run") -> None:
        self._prefix = prefix

    def new_run_id(self) -> str:
        return f"{self._prefix}-{uuid.uuid4().hex[:12]}"
