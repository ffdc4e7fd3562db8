from __future__ import annotations

import re
from pathlib import Path

from domain.models import RunContext


class FileSystemDebugArtifactStore:
    """Stores error screenshots under logs/run_<id>/."""

    def __init__(self, base_dir: str = "logs") -> None:
        self._base_dir = Path(base_dir)

    def ensure_run_directory(self, run_context: RunContext) -> str:
        run_dir = self._run_dir(run_context)
        run_dir.mkdir(parents=True, exist_ok=True)
        return str(run_dir)

    def save_screenshot(
        self,
        run_context: RunContext,
        step_name: str,
        image_bytes: bytes,
    ) -> str:
        run_dir = self._run_dir(run_context)
        run_dir.mkdir(parents=True, exist_ok=True)
        stem = self._safe(step_name)
        path = run_dir / f"{stem}.png"
        count = 1
        # two failures of the same kind within a minute share a name
        while path.exists():
            count += 1
            path = run_dir / f"{stem}_{count}.png"
        path.write_bytes(image_bytes)
        return str(path)

    def _run_dir(self, run_context: RunContext) -> Path:
        if run_context.log_directory:
            return Path(run_context.log_directory)
        return self._base_dir / f"run_{run_context.run_id}"

    @staticmethod
    def _safe(step_name: str) -> str:
        cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", step_name).strip("_")
        return cleaned or "step"
