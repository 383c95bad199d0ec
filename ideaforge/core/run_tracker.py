"""
Run Tracker for IdeaForge.

A run is one execution attempt of a stage. It is created RUNNING, may gain
progress log lines, and is completed exactly once with a terminal status.
"""

import logging
from typing import List, Optional, Sequence

from ..models import Run, RunStatus, StageName, utc_now_iso
from .errors import InvalidRequest, NotFound

logger = logging.getLogger("ideaforge.runs")


class RunTracker:
    """Records run lifecycles in the project store."""

    def __init__(self, store, recent_limit: int = 10):
        self.store = store
        self.recent_limit = recent_limit

    async def start(self, project_id: str, stage: StageName) -> str:
        """Create a RUNNING run and return its id."""
        stage = StageName(stage)
        run = Run(
            id="",
            stage=stage,
            status=RunStatus.RUNNING,
            started_at=utc_now_iso(),
            logs=[f"Started {stage.value} execution..."],
        )
        stored = await self.store.create_run(project_id, run)
        logger.info(f"[start] project={project_id} run={stored.id} stage={stage.value}")
        return stored.id

    async def get(self, project_id: str, run_id: str) -> Run:
        run = await self.store.get_run(project_id, run_id)
        if run is None:
            raise NotFound(f"Run {run_id} not found in project {project_id}")
        return run

    async def log(self, project_id: str, run_id: str, line: str) -> None:
        """Append a progress line without changing status."""
        run = await self.get(project_id, run_id)
        if run.status.is_terminal:
            raise InvalidRequest(f"Run {run_id} is already {run.status.value}")
        await self.store.update_run(project_id, run_id, {"logs": run.logs + [line]})

    async def complete(
        self,
        project_id: str,
        run_id: str,
        outcome: RunStatus,
        log_lines: Sequence[str] = (),
    ) -> Run:
        """Move a RUNNING run to COMPLETED or FAILED. Allowed once per run."""
        outcome = RunStatus(outcome)
        if not outcome.is_terminal:
            raise InvalidRequest(f"Cannot complete a run with status {outcome.value}")

        run = await self.get(project_id, run_id)
        if run.status.is_terminal:
            raise InvalidRequest(f"Run {run_id} is already {run.status.value}")

        finished_at = max(utc_now_iso(), run.started_at)
        logs: List[str] = run.logs + list(log_lines)
        await self.store.update_run(project_id, run_id, {
            "status": outcome.value,
            "finishedAt": finished_at,
            "logs": logs,
        })
        logger.info(f"[complete] project={project_id} run={run_id} status={outcome.value}")
        return run.model_copy(update={"status": outcome, "finished_at": finished_at, "logs": logs})

    async def list_recent(self, project_id: str, limit: Optional[int] = None) -> List[Run]:
        """Newest first by start time."""
        return await self.store.list_runs(project_id, limit or self.recent_limit)
