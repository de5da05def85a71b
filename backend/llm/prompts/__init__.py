"""LLM prompts for the assistant."""

from llm.prompts.builder import PromptSection, SystemPrompt, build_system_prompt
from llm.prompts.sections import (
    FORMATTING_RULES,
    GROUNDED_POLICY,
    HEDGED_POLICY,
    PERSONA,
    QUOTATION_RULES,
)

__all__ = [
    "PromptSection",
    "SystemPrompt",
    "build_system_prompt",
    "PERSONA",
    "FORMATTING_RULES",
    "QUOTATION_RULES",
    "GROUNDED_POLICY",
    "HEDGED_POLICY",
]
