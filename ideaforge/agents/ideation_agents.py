"""
Ideation Agent Implementations for IdeaForge
One agent per pipeline step: interview, brief, research, brand kit.
"""

import json
from typing import Any, AsyncIterator, Dict, Sequence

from ..core.schema_registry import (
    BRAND_KIT_SCHEMA,
    IDEA_BRIEF_SCHEMA,
    RESEARCH_REPORT_SCHEMA,
)
from ..models import ChatTurn
from ..prompts import (
    ARCHITECT_SYSTEM_PROMPT,
    BRAND_SYSTEM_PROMPT,
    BRAND_USER_PROMPT_TEMPLATE,
    RESEARCH_SYSTEM_PROMPT,
    RESEARCH_USER_PROMPT_TEMPLATE,
    SUMMARIZER_SYSTEM_PROMPT,
    SUMMARIZER_USER_PROMPT_TEMPLATE,
)
from .base import BaseAgent, LLMClient


class IdeaArchitectAgent(BaseAgent):
    """
    Idea Architect - Interview Phase
    Conversational interviewer; free text, not schema constrained.
    """

    def __init__(self, llm_client: LLMClient):
        super().__init__(
            name="IdeaArchitect",
            llm_client=llm_client,
            system_prompt=ARCHITECT_SYSTEM_PROMPT,
        )

    async def converse(self, history: Sequence[ChatTurn], message: str) -> str:
        return await self.llm_client.converse(self.system_prompt, history, message)

    def stream(self, history: Sequence[ChatTurn], message: str) -> AsyncIterator[str]:
        return self.llm_client.stream_converse(self.system_prompt, history, message)

    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        reply = await self.converse(input_data.get("history", []), input_data["message"])
        return {"reply": reply}


class IdeationSummarizerAgent(BaseAgent):
    """
    Ideation Summarizer - Idea Brief
    Condenses the interview transcript into the brief.
    """

    def __init__(self, llm_client: LLMClient):
        super().__init__(
            name="IdeationSummarizer",
            llm_client=llm_client,
            system_prompt=SUMMARIZER_SYSTEM_PROMPT,
        )

    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """Summarize ``transcript`` into an idea brief payload."""
        user_prompt = SUMMARIZER_USER_PROMPT_TEMPLATE.format(
            transcript=input_data["transcript"],
        )

        result, event, problems = await self.generate_with_logging(
            user_prompt=user_prompt,
            schema=IDEA_BRIEF_SCHEMA,
            project_id=input_data.get("project_id", "unknown"),
        )

        return {"artifact": result, "event": event, "problems": problems}


class ResearchAgent(BaseAgent):
    """
    Research Agent - Market Research Stage
    Simulates market research from the idea brief.
    """

    def __init__(self, llm_client: LLMClient):
        super().__init__(
            name="ResearchAgent",
            llm_client=llm_client,
            system_prompt=RESEARCH_SYSTEM_PROMPT,
        )

    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        user_prompt = RESEARCH_USER_PROMPT_TEMPLATE.format(
            brief_json=json.dumps(input_data["idea_brief"]),
        )

        result, event, problems = await self.generate_with_logging(
            user_prompt=user_prompt,
            schema=RESEARCH_REPORT_SCHEMA,
            project_id=input_data.get("project_id", "unknown"),
        )

        return {"artifact": result, "event": event, "problems": problems}


class BrandingAgent(BaseAgent):
    """
    Branding Agent - Brand Kit Stage
    Builds naming, positioning and voice from the brief and research.
    """

    def __init__(self, llm_client: LLMClient):
        super().__init__(
            name="BrandingAgent",
            llm_client=llm_client,
            system_prompt=BRAND_SYSTEM_PROMPT,
        )

    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        user_prompt = BRAND_USER_PROMPT_TEMPLATE.format(
            brief_json=json.dumps(input_data["idea_brief"]),
            research_json=json.dumps(input_data["research_report"]),
        )

        result, event, problems = await self.generate_with_logging(
            user_prompt=user_prompt,
            schema=BRAND_KIT_SCHEMA,
            project_id=input_data.get("project_id", "unknown"),
        )

        return {"artifact": result, "event": event, "problems": problems}
