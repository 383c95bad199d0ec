"""
Pydantic data models for IdeaForge.
Records persisted in the project store plus one typed model per artifact stage.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class StageName(str, Enum):
    """Pipeline stages; the value doubles as the artifact key."""
    IDEA_BRIEF = "idea_brief"
    RESEARCH_REPORT = "research_report"
    BRAND_KIT = "brand_kit"


class RunStatus(str, Enum):
    """Run lifecycle status."""
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


# ============================================================================
# Project Records
# ============================================================================

class ChatPart(CamelModel):
    text: str


class ChatTurn(CamelModel):
    """One transcript turn in the Gemini content shape."""
    role: ChatRole
    parts: List[ChatPart]

    @classmethod
    def of(cls, role: ChatRole, text: str) -> "ChatTurn":
        return cls(role=role, parts=[ChatPart(text=text)])

    @property
    def text(self) -> str:
        return self.parts[0].text if self.parts else ""


class Project(CamelModel):
    """A venture being ideated."""
    id: str
    name: str = "Untitled Venture"
    current_stage: int = Field(
        default=1,
        description="1 interview, 2 research, 3 branding, 4 done"
    )
    created_at: str = Field(default_factory=utc_now_iso)
    chat_history: List[ChatTurn] = Field(default_factory=list)
    brief_finalized: bool = Field(
        default=False,
        description="Set once research completes; stops idea brief regeneration"
    )

    def transcript(self) -> str:
        return "\n".join(f"{turn.role.value}: {turn.text}" for turn in self.chat_history)


class Artifact(CamelModel):
    """Structured output of one stage, keyed by stage name."""
    id: str
    stage: StageName
    data: Dict[str, Any]
    updated_at: str = Field(default_factory=utc_now_iso)

    def typed(self) -> "StageOutput":
        return parse_artifact(self.stage, self.data)


class Run(CamelModel):
    """One execution attempt of a stage."""
    id: str
    stage: StageName
    status: RunStatus = RunStatus.RUNNING
    started_at: str = Field(default_factory=utc_now_iso)
    finished_at: Optional[str] = None
    logs: List[str] = Field(default_factory=list)


# ============================================================================
# Stage Output Models
# ============================================================================

class StageOutput(CamelModel):
    """Base for typed artifact payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class IdeaBrief(StageOutput):
    """Formal summary of the interview."""
    niche: str
    target_customer: str
    core_problem: str
    solution_promise: str
    monetization_model: str
    channels: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    next_questions: List[str] = Field(default_factory=list)


class Competitor(StageOutput):
    name: str = ""
    positioning: str = ""
    notes: str = ""


class ResearchReport(StageOutput):
    """Simulated market research built from the idea brief."""
    summary: str
    demand_signals: List[str] = Field(default_factory=list)
    competitors: List[Competitor] = Field(default_factory=list)
    pricing_benchmarks: List[str] = Field(default_factory=list)
    viability_score: float
    risks: List[str] = Field(default_factory=list)
    recommended_next_move: str = ""


class BrandVoice(StageOutput):
    tone: List[str] = Field(default_factory=list)
    do: List[str] = Field(default_factory=list)
    dont: List[str] = Field(default_factory=list)


class MessagingPillar(StageOutput):
    pillar: str = ""
    proof: str = ""


class BrandKit(StageOutput):
    """Naming, positioning and voice built from brief and research."""
    name_options: List[str]
    taglines: List[str] = Field(default_factory=list)
    positioning_statement: str
    voice: BrandVoice = Field(default_factory=BrandVoice)
    messaging_pillars: List[MessagingPillar] = Field(default_factory=list)
    basic_visual_direction: str = ""


STAGE_OUTPUT_MODELS: Dict[StageName, Type[StageOutput]] = {
    StageName.IDEA_BRIEF: IdeaBrief,
    StageName.RESEARCH_REPORT: ResearchReport,
    StageName.BRAND_KIT: BrandKit,
}


def parse_artifact(stage: StageName, data: Dict[str, Any]) -> StageOutput:
    """Validate a raw payload into the typed model for its stage."""
    return STAGE_OUTPUT_MODELS[StageName(stage)].model_validate(data)


# ============================================================================
# Event Models
# ============================================================================

class AgentEvent(BaseModel):
    """Event emitted by agents for audit logging."""
    project_id: str
    agent_name: str
    action: str
    input_summary: str
    output_summary: str
    duration_ms: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_log_line(self) -> str:
        return f"{self.agent_name} {self.action} finished in {self.duration_ms}ms"
