from __future__ import annotations

from domain.models import RunContext
from domain.ports import DebugArtifactStorePort, WizardPagePort


class DebugRunManager:
    """Coordinates per-page HTML snapshots for debug runs."""

    def __init__(self, artifact_store: DebugArtifactStorePort) -> None:
        self._artifact_store = artifact_store

    def start(self, run_context: RunContext) -> str:
        return self._artifact_store.ensure_run_directory(run_context)

    async def capture_step(
        self,
        run_context: RunContext,
        page: WizardPagePort,
        step_name: str,
    ) -> str | None:
        if not run_context.is_debug:
            return None
        html = await page.content()
        return self._artifact_store.save_snapshot(run_context, step_name, html)

    def finish(self, run_context: RunContext, metadata: dict[str, object]) -> str | None:
        if not run_context.is_debug:
            return None
        return self._artifact_store.save_run_metadata(run_context, metadata)
