"""
IdeaForge Agents Module
LLM client and the ideation agents built on it.
"""

from .base import (
    BaseAgent,
    GeminiClient,
    LLMClient,
    create_llm_client,
)
from .ideation_agents import (
    BrandingAgent,
    IdeaArchitectAgent,
    IdeationSummarizerAgent,
    ResearchAgent,
)

__all__ = [
    "LLMClient",
    "GeminiClient",
    "BaseAgent",
    "create_llm_client",
    "IdeaArchitectAgent",
    "IdeationSummarizerAgent",
    "ResearchAgent",
    "BrandingAgent",
]
