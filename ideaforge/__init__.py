"""
IdeaForge
Guided business ideation service: interview chat, research and brand kit stages.
"""

__version__ = "0.3.0"
