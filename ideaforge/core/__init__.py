"""
IdeaForge Core Module
Error taxonomy, schema registry, run tracking and the pipeline orchestrator.
"""

from .errors import (
    GenerationFailure,
    IdeaForgeError,
    InvalidRequest,
    NotFound,
    PersistenceFailure,
    PrerequisiteMissing,
)

__all__ = [
    "IdeaForgeError",
    "NotFound",
    "InvalidRequest",
    "PrerequisiteMissing",
    "GenerationFailure",
    "PersistenceFailure",
]
