"""
Schema Registry for IdeaForge.

Declarative shape descriptors for each artifact stage, written in the dialect
Gemini accepts as ``response_schema`` (upper-case type names). The same
descriptors drive post-parse validation of model output, and ``STAGES`` lists
which upstream artifacts each stage consumes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..models import StageName
from .errors import InvalidRequest

STRING = "STRING"
NUMBER = "NUMBER"
INTEGER = "INTEGER"
BOOLEAN = "BOOLEAN"
ARRAY = "ARRAY"
OBJECT = "OBJECT"


def _string_list() -> Dict[str, Any]:
    return {"type": ARRAY, "items": {"type": STRING}}


# ============================================================================
# Artifact Schemas
# ============================================================================

IDEA_BRIEF_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "niche": {"type": STRING},
        "targetCustomer": {"type": STRING},
        "coreProblem": {"type": STRING},
        "solutionPromise": {"type": STRING},
        "monetizationModel": {"type": STRING},
        "channels": _string_list(),
        "risks": _string_list(),
        "nextQuestions": _string_list(),
    },
    "required": ["niche", "targetCustomer", "coreProblem", "solutionPromise", "monetizationModel"],
}

RESEARCH_REPORT_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "summary": {"type": STRING},
        "demandSignals": _string_list(),
        "competitors": {
            "type": ARRAY,
            "items": {
                "type": OBJECT,
                "properties": {
                    "name": {"type": STRING},
                    "positioning": {"type": STRING},
                    "notes": {"type": STRING},
                },
            },
        },
        "pricingBenchmarks": _string_list(),
        "viabilityScore": {"type": NUMBER},
        "risks": _string_list(),
        "recommendedNextMove": {"type": STRING},
    },
    "required": ["summary", "viabilityScore"],
}

BRAND_KIT_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "nameOptions": _string_list(),
        "taglines": _string_list(),
        "positioningStatement": {"type": STRING},
        "voice": {
            "type": OBJECT,
            "properties": {
                "tone": _string_list(),
                "do": _string_list(),
                "dont": _string_list(),
            },
        },
        "messagingPillars": {
            "type": ARRAY,
            "items": {
                "type": OBJECT,
                "properties": {
                    "pillar": {"type": STRING},
                    "proof": {"type": STRING},
                },
            },
        },
        "basicVisualDirection": {"type": STRING},
    },
    "required": ["nameOptions", "positioningStatement"],
}


# ============================================================================
# Stage Definitions
# ============================================================================

@dataclass(frozen=True)
class StageDefinition:
    """A pipeline stage: its output schema and the artifacts it consumes."""
    name: StageName
    title: str
    schema: Dict[str, Any]
    prerequisites: Tuple[StageName, ...] = field(default_factory=tuple)
    runnable: bool = True
    order: int = 1


STAGES: Dict[StageName, StageDefinition] = {
    StageName.IDEA_BRIEF: StageDefinition(
        name=StageName.IDEA_BRIEF,
        title="Idea Brief",
        schema=IDEA_BRIEF_SCHEMA,
        runnable=False,  # produced by the chat flow
        order=1,
    ),
    StageName.RESEARCH_REPORT: StageDefinition(
        name=StageName.RESEARCH_REPORT,
        title="Market Research",
        schema=RESEARCH_REPORT_SCHEMA,
        prerequisites=(StageName.IDEA_BRIEF,),
        order=2,
    ),
    StageName.BRAND_KIT: StageDefinition(
        name=StageName.BRAND_KIT,
        title="Brand Kit",
        schema=BRAND_KIT_SCHEMA,
        prerequisites=(StageName.IDEA_BRIEF, StageName.RESEARCH_REPORT),
        order=3,
    ),
}


def is_known_stage(name: str) -> bool:
    return name in {stage.value for stage in STAGES}


def get_stage(name: str) -> StageDefinition:
    """Look up a stage definition by name."""
    if not is_known_stage(name):
        raise InvalidRequest(f"Unknown stage: {name}")
    return STAGES[StageName(name)]


def get_schema(name: str) -> Dict[str, Any]:
    return get_stage(name).schema


def runnable_stages() -> List[StageName]:
    """Stages that can be triggered through the stage-run endpoint."""
    return [definition.name for definition in STAGES.values() if definition.runnable]


def current_stage_for(artifact_stages) -> int:
    """Project progress: one past the furthest stage with an artifact, in order."""
    present = {StageName(s) for s in artifact_stages}
    progress = 1
    for definition in sorted(STAGES.values(), key=lambda d: d.order):
        if definition.name not in present:
            break
        progress = definition.order + 1
    return progress


# ============================================================================
# Payload Validation
# ============================================================================

def type_matches(expected: str, value: Any) -> bool:
    if expected == STRING:
        return isinstance(value, str)
    if expected == NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == BOOLEAN:
        return isinstance(value, bool)
    if expected == ARRAY:
        return isinstance(value, list)
    if expected == OBJECT:
        return isinstance(value, dict)
    return True


def validate_payload(
    schema: Dict[str, Any],
    payload: Any,
    path: Optional[str] = None,
) -> List[str]:
    """
    Check a parsed payload against a descriptor.

    Args:
        schema: Descriptor from this registry
        payload: Parsed JSON value
        path: Location prefix used in messages (internal)

    Returns:
        Human-readable problems; empty when the payload conforms
    """
    location = path or "$"
    expected = schema.get("type")
    if not type_matches(expected, payload):
        return [f"{location}: expected {expected}, got {type(payload).__name__}"]

    problems: List[str] = []
    if expected == OBJECT:
        for key in schema.get("required", []):
            value = payload.get(key)
            if value is None or value == "" or value == []:
                problems.append(f"{location}.{key}: required field is missing or empty")
        for key, child in schema.get("properties", {}).items():
            if key in payload and payload[key] is not None:
                problems.extend(validate_payload(child, payload[key], f"{location}.{key}"))
    elif expected == ARRAY and "items" in schema:
        for index, item in enumerate(payload):
            problems.extend(validate_payload(schema["items"], item, f"{location}[{index}]"))
    return problems
