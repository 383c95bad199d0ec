"""
Pipeline Orchestrator for IdeaForge.

Owns the two flows that touch the model:

- chat: one interview turn, followed by a synchronous idea-brief summary once
  the transcript is long enough;
- stage runs: a RUNNING run is created and returned immediately, the stage
  executes in a background task, and the run ends COMPLETED or FAILED.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from ..agents import (
    BrandingAgent,
    IdeaArchitectAgent,
    IdeationSummarizerAgent,
    LLMClient,
    ResearchAgent,
)
from ..agents.base import BaseAgent
from ..config import PipelineConfig
from ..models import ChatRole, ChatTurn, Project, Run, RunStatus, StageName
from .errors import InvalidRequest, NotFound, PrerequisiteMissing
from .run_tracker import RunTracker
from .schema_registry import StageDefinition, current_stage_for, get_stage

logger = logging.getLogger("ideaforge.pipeline")


@dataclass
class ChatResult:
    """Outcome of one interview turn."""
    ai_response: str
    history: List[ChatTurn]
    brief_updated: bool = False


class PipelineOrchestrator:
    """Coordinates agents, the run tracker and the project store."""

    def __init__(
        self,
        store,
        llm_client: LLMClient,
        config: Optional[PipelineConfig] = None,
    ):
        self.store = store
        self.config = config or PipelineConfig()
        self.runs = RunTracker(store, recent_limit=self.config.recent_runs_limit)

        self.architect = IdeaArchitectAgent(llm_client)
        self.summarizer = IdeationSummarizerAgent(llm_client)
        self.stage_agents: Dict[StageName, BaseAgent] = {
            StageName.RESEARCH_REPORT: ResearchAgent(llm_client),
            StageName.BRAND_KIT: BrandingAgent(llm_client),
        }

        self._active_runs: Dict[str, asyncio.Task] = {}
        # entries disappear once no run holds or waits on the lock
        self._project_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    # ========================================================================
    # Projects
    # ========================================================================

    async def create_project(self, name: Optional[str]) -> Project:
        project = await self.store.create_project((name or "").strip() or "Untitled Venture")
        logger.info(f"[create_project] project={project.id} name='{project.name}'")
        return project

    async def get_project(self, project_id: str) -> Project:
        project = await self.store.get_project(project_id)
        if project is None:
            raise NotFound(f"Project {project_id} not found")
        return project

    async def list_projects(self, limit: int = 20) -> List[Project]:
        return await self.store.list_projects(limit)

    async def get_project_state(self, project_id: str) -> Dict[str, Any]:
        """Project plus its artifacts and most recent runs."""
        project = await self.get_project(project_id)
        artifacts = await self.store.get_artifacts(project_id)
        runs = await self.runs.list_recent(project_id)
        return {"project": project, "artifacts": artifacts, "runs": runs}

    async def get_run(self, project_id: str, run_id: str) -> Run:
        await self.get_project(project_id)
        return await self.runs.get(project_id, run_id)

    async def _update_progress(self, project_id: str, **extra: Any) -> None:
        artifacts = await self.store.get_artifacts(project_id)
        fields = {"currentStage": current_stage_for(a.stage for a in artifacts)}
        fields.update(extra)
        await self.store.update_project(project_id, fields)

    # ========================================================================
    # Chat
    # ========================================================================

    def should_summarize(self, project: Project) -> bool:
        """Idea brief is (re)generated past the threshold until it is finalized."""
        if len(project.chat_history) < self.config.summary_threshold_turns:
            return False
        return self.config.rolling_brief or not project.brief_finalized

    async def chat(self, project_id: str, message: str) -> ChatResult:
        """Run one interview turn and persist both sides of it."""
        project = await self.get_project(project_id)
        reply = await self.architect.converse(project.chat_history, message)
        return await self._record_exchange(project, message, reply)

    async def stream_chat(self, project_id: str, message: str) -> AsyncIterator[Dict[str, Any]]:
        """
        Streaming interview turn.

        Yields ``{"type": "chunk", "text": ...}`` events while the reply is
        generated, then a single ``{"type": "done", ...}`` event once the
        transcript (and brief, if due) have been saved.
        """
        project = await self.get_project(project_id)
        chunks: List[str] = []
        async for chunk in self.architect.stream(project.chat_history, message):
            chunks.append(chunk)
            yield {"type": "chunk", "text": chunk}

        result = await self._record_exchange(project, message, "".join(chunks))
        yield {
            "type": "done",
            "aiResponse": result.ai_response,
            "history": [turn.to_wire() for turn in result.history],
            "briefUpdated": result.brief_updated,
        }

    async def _record_exchange(self, project: Project, message: str, reply: str) -> ChatResult:
        history = project.chat_history + [
            ChatTurn.of(ChatRole.USER, message),
            ChatTurn.of(ChatRole.MODEL, reply),
        ]
        await self.store.save_chat_history(project.id, history)
        project = project.model_copy(update={"chat_history": history})

        brief_updated = False
        if self.should_summarize(project):
            await self.summarize(project)
            brief_updated = True
        return ChatResult(ai_response=reply, history=history, brief_updated=brief_updated)

    async def summarize(self, project: Project) -> Dict[str, Any]:
        """Turn the full transcript into the idea brief artifact."""
        logger.info(
            f"[summarize] project={project.id} turns={len(project.chat_history)}"
        )
        result = await self.summarizer.process({
            "project_id": project.id,
            "transcript": project.transcript(),
        })
        await self.store.save_artifact(project.id, StageName.IDEA_BRIEF, result["artifact"])
        await self._update_progress(project.id)
        return result["artifact"]

    # ========================================================================
    # Stage Runs
    # ========================================================================

    async def request_stage_run(self, project_id: str, stage_name: str) -> str:
        """
        Validate the request, create the run and start it in the background.

        Raises:
            InvalidRequest: Unknown stage, or a stage produced elsewhere
            NotFound: Unknown project
        """
        definition = get_stage(stage_name)
        if not definition.runnable:
            raise InvalidRequest(f"Stage {definition.name.value} cannot be run directly")
        await self.get_project(project_id)

        run_id = await self.runs.start(project_id, definition.name)
        task = asyncio.create_task(
            self._execute_stage(project_id, run_id, definition),
            name=f"stage-run-{run_id}",
        )
        self._active_runs[run_id] = task
        task.add_done_callback(lambda _t, rid=run_id: self._active_runs.pop(rid, None))
        return run_id

    def _lock_for(self, project_id: str) -> asyncio.Lock:
        lock = self._project_locks.get(project_id)
        if lock is None:
            lock = self._project_locks[project_id] = asyncio.Lock()
        return lock

    async def _execute_stage(self, project_id: str, run_id: str, definition: StageDefinition) -> None:
        stage = definition.name.value
        try:
            if self.config.serialize_project_runs:
                async with self._lock_for(project_id):
                    log_lines = await self._run_stage(project_id, definition)
            else:
                log_lines = await self._run_stage(project_id, definition)
        except Exception as e:
            logger.warning(f"[run_stage] project={project_id} run={run_id} stage={stage} failed: {e}")
            await self._finish(project_id, run_id, RunStatus.FAILED, [f"Error: {e}"])
            return
        await self._finish(project_id, run_id, RunStatus.COMPLETED, log_lines)

    async def _run_stage(self, project_id: str, definition: StageDefinition) -> List[str]:
        stage = definition.name
        artifacts = {a.stage: a.data for a in await self.store.get_artifacts(project_id)}
        missing = [p.value for p in definition.prerequisites if p not in artifacts]
        if missing:
            raise PrerequisiteMissing(stage.value, missing)

        input_data: Dict[str, Any] = {"project_id": project_id}
        for prerequisite in definition.prerequisites:
            input_data[prerequisite.value] = artifacts[prerequisite]

        result = await self.stage_agents[stage].process(input_data)
        await self.store.save_artifact(project_id, stage, result["artifact"])

        progress: Dict[str, Any] = {}
        if stage == StageName.RESEARCH_REPORT:
            progress["briefFinalized"] = True
        await self._update_progress(project_id, **progress)

        log_lines = [result["event"].to_log_line()]
        log_lines.extend(f"Warning: {problem}" for problem in result["problems"])
        log_lines.append(f"{stage.value} completed successfully.")
        return log_lines

    async def _finish(self, project_id: str, run_id: str, outcome: RunStatus, log_lines: List[str]) -> None:
        try:
            await self.runs.complete(project_id, run_id, outcome, log_lines)
        except Exception:
            logger.exception(f"[run_stage] Could not record {outcome.value} for run {run_id}")

    async def wait_for_run(self, run_id: str) -> None:
        """Block until a background stage run has finished (no-op if already done)."""
        task = self._active_runs.get(run_id)
        if task is not None:
            await task

    async def shutdown(self) -> None:
        """Let in-flight stage runs finish."""
        pending = list(self._active_runs.values())
        if pending:
            logger.info(f"Waiting for {len(pending)} stage run(s) to finish...")
            await asyncio.gather(*pending, return_exceptions=True)
