"""
IdeaForge Data Models Module
Pydantic schemas for projects, runs and stage artifacts.
"""

from .schemas import (
    # Event Models
    AgentEvent,
    # Records
    Artifact,
    BrandKit,
    BrandVoice,
    CamelModel,
    ChatPart,
    ChatRole,
    ChatTurn,
    Competitor,
    # Stage Outputs
    IdeaBrief,
    MessagingPillar,
    Project,
    ResearchReport,
    Run,
    # Enums
    RunStatus,
    STAGE_OUTPUT_MODELS,
    StageName,
    StageOutput,
    parse_artifact,
    utc_now_iso,
)

__all__ = [
    "StageName",
    "RunStatus",
    "ChatRole",
    "CamelModel",
    "ChatPart",
    "ChatTurn",
    "Project",
    "Artifact",
    "Run",
    "StageOutput",
    "IdeaBrief",
    "Competitor",
    "ResearchReport",
    "BrandVoice",
    "MessagingPillar",
    "BrandKit",
    "STAGE_OUTPUT_MODELS",
    "parse_artifact",
    "AgentEvent",
    "utc_now_iso",
]
