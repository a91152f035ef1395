from __future__ import annotations

import json
import re
from pathlib import Path

from domain.models import RunContext

_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9_-]+")


class FileSystemDebugArtifactStore:
    """
    Keeps one directory per debug run, ``<base_dir>/run_<id>/`` unless the
    run names its own ``log_directory``.

    Each wizard page becomes ``Snapshot_<n>_<step>.html`` with inline
    scripts removed so the file opens as a static page. ``run_meta.json``
    lists the snapshots next to the caller's metadata.
    """

    def __init__(self, base_dir: str = "logs") -> None:
        self._base_dir = Path(base_dir)
        self._snapshots: dict[str, list[str]] = {}

    def ensure_run_directory(self, run_context: RunContext) -> str:
        return str(self._prepare(run_context))

    def save_snapshot(self, run_context: RunContext, step_name: str, html: str) -> str:
        taken = self._snapshots.setdefault(run_context.run_id, [])
        name = f"Snapshot_{len(taken) + 1:03d}_{_file_safe(step_name)}.html"
        path = self._prepare(run_context) / name
        path.write_text(_SCRIPT_BLOCK.sub("", html), encoding="utf-8")
        taken.append(name)
        return str(path)

    def save_run_metadata(self, run_context: RunContext, metadata: dict[str, object]) -> str:
        payload = dict(metadata)
        payload.setdefault("snapshots", list(self._snapshots.get(run_context.run_id, [])))
        path = self._prepare(run_context) / "run_meta.json"
        path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        return str(path)

    def _prepare(self, run_context: RunContext) -> Path:
        if run_context.log_directory:
            run_dir = Path(run_context.log_directory)
        else:
            run_dir = self._base_dir / f"run_{run_context.run_id}"
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir


def _file_safe(step_name: str) -> str:
    return _UNSAFE_NAME.sub("_", step_name).strip("_") or "step"
