"""
IdeaForge Prompts Module
System prompts and user prompt templates for each agent.
"""

from .architect import ARCHITECT_SYSTEM_PROMPT
from .brand_strategist import BRAND_SYSTEM_PROMPT, BRAND_USER_PROMPT_TEMPLATE
from .repair import REPAIR_PROMPT_TEMPLATE
from .researcher import RESEARCH_SYSTEM_PROMPT, RESEARCH_USER_PROMPT_TEMPLATE
from .summarizer import SUMMARIZER_SYSTEM_PROMPT, SUMMARIZER_USER_PROMPT_TEMPLATE

__all__ = [
    "ARCHITECT_SYSTEM_PROMPT",
    "SUMMARIZER_SYSTEM_PROMPT",
    "SUMMARIZER_USER_PROMPT_TEMPLATE",
    "RESEARCH_SYSTEM_PROMPT",
    "RESEARCH_USER_PROMPT_TEMPLATE",
    "BRAND_SYSTEM_PROMPT",
    "BRAND_USER_PROMPT_TEMPLATE",
    "REPAIR_PROMPT_TEMPLATE",
]
