"""
IdeaForge HTTP API
FastAPI application exposing projects, chat and stage runs.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .agents import create_llm_client
from .config import AppSettings, StoreBackend, configure_logging, create_default_config_from_env
from .core.errors import IdeaForgeError
from .core.pipeline import PipelineOrchestrator
from .models import Artifact, Project, Run
from .services import (
    CORS_ALLOWED_HEADERS,
    CORS_ALLOWED_METHODS,
    FirestoreProjectStore,
    InMemoryProjectStore,
    ProjectStore,
    create_limiter,
)

logger = logging.getLogger("ideaforge.api")


# ============================================================================
# Request / Response Models
# ============================================================================

class CreateProjectRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=200)


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=8000)


class ChatResponse(BaseModel):
    aiResponse: str
    history: List[Dict[str, Any]]


class StageRunResponse(BaseModel):
    runId: str


def _project_state_to_wire(state: Dict[str, Any]) -> Dict[str, Any]:
    project: Project = state["project"]
    artifacts: List[Artifact] = state["artifacts"]
    runs: List[Run] = state["runs"]
    return {
        "project": project.to_wire(),
        "artifacts": [a.to_wire() for a in artifacts],
        "runs": [r.to_wire() for r in runs],
    }


# ============================================================================
# Wiring
# ============================================================================

def create_project_store(settings: AppSettings) -> ProjectStore:
    if settings.store_backend == StoreBackend.FIRESTORE:
        return FirestoreProjectStore(settings.firestore)
    return InMemoryProjectStore()


def build_orchestrator(settings: AppSettings) -> PipelineOrchestrator:
    """Validate settings and construct the orchestrator with its collaborators."""
    errors = settings.validate_settings()
    if errors:
        raise RuntimeError("Configuration errors: " + "; ".join(errors))
    return PipelineOrchestrator(
        store=create_project_store(settings),
        llm_client=create_llm_client(settings),
        config=settings.pipeline,
    )


async def _handle_service_error(request: Request, exc: IdeaForgeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(
    settings: Optional[AppSettings] = None,
    orchestrator: Optional[PipelineOrchestrator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted
        orchestrator: Pre-built orchestrator (tests); built from settings on
            startup otherwise, which fails fast on a missing Gemini key
    """
    if settings is None:
        load_dotenv()
        settings = create_default_config_from_env()
    configure_logging(settings.server.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.orchestrator is None:
            app.state.orchestrator = build_orchestrator(settings)
        store = app.state.orchestrator.store
        if await store.connect():
            logger.info(f"Project store ready ({type(store).__name__})")
        yield
        await app.state.orchestrator.shutdown()
        await store.close()

    app = FastAPI(title="IdeaForge API", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    limiter = create_limiter(enabled=settings.server.rate_limits_enabled)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(IdeaForgeError, _handle_service_error)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.allowed_origins,
        allow_credentials=True,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    @app.get("/health", response_class=PlainTextResponse)
    async def health():
        return "OK"

    app.include_router(_build_router(settings, limiter), prefix=settings.server.api_prefix)
    return app


def _orchestrator(request: Request) -> PipelineOrchestrator:
    return request.app.state.orchestrator


def _build_router(settings: AppSettings, limiter: Limiter) -> APIRouter:
    router = APIRouter(prefix="/projects")

    @router.post("")
    async def create_project(body: CreateProjectRequest, request: Request):
        project = await _orchestrator(request).create_project(body.name)
        return project.to_wire()

    @router.get("")
    async def list_projects(request: Request, limit: int = 20):
        projects = await _orchestrator(request).list_projects(max(1, min(limit, 100)))
        return {"projects": [p.to_wire() for p in projects]}

    @router.get("/{project_id}")
    async def get_project_state(project_id: str, request: Request):
        state = await _orchestrator(request).get_project_state(project_id)
        return _project_state_to_wire(state)

    @router.post("/{project_id}/chat", response_model=ChatResponse)
    @limiter.limit(settings.server.chat_rate_limit)
    async def chat(project_id: str, body: ChatRequest, request: Request):
        result = await _orchestrator(request).chat(project_id, body.message)
        return ChatResponse(
            aiResponse=result.ai_response,
            history=[turn.to_wire() for turn in result.history],
        )

    @router.post("/{project_id}/chat/stream")
    @limiter.limit(settings.server.chat_rate_limit)
    async def chat_stream(project_id: str, body: ChatRequest, request: Request):
        orchestrator = _orchestrator(request)
        await orchestrator.get_project(project_id)

        async def event_generator():
            try:
                async for event in orchestrator.stream_chat(project_id, body.message):
                    yield f"data: {json.dumps(event)}\n\n"
            except IdeaForgeError as e:
                logger.warning(f"[chat_stream] project={project_id} failed: {e}")
                yield f"data: {json.dumps({'type': 'error', 'message': str(e)})}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    @router.post("/{project_id}/stages/{stage}/run", response_model=StageRunResponse)
    @limiter.limit(settings.server.stage_rate_limit)
    async def run_stage(project_id: str, stage: str, request: Request):
        run_id = await _orchestrator(request).request_stage_run(project_id, stage)
        return StageRunResponse(runId=run_id)

    @router.get("/{project_id}/runs/{run_id}")
    async def get_run(project_id: str, run_id: str, request: Request):
        run = await _orchestrator(request).get_run(project_id, run_id)
        return run.to_wire()

    return router
