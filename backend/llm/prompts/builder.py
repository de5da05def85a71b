"""System prompt assembly.

The prompt is an ordered list of named sections so callers and tests can
check for a section by name instead of substring-matching the whole text.
The completeness directive always comes last.
"""

from dataclasses import dataclass, field

from llm.prompts.sections import (
    FORMATTING_RULES,
    GROUNDED_POLICY,
    HEDGED_POLICY,
    LANGUAGE_DIRECTIVES,
    PERSONA,
    QUOTATION_RULES,
)
from llm.types import Language

SECTION_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class PromptSection:
    """One named block of the system prompt."""

    name: str
    text: str
    variant: str | None = None


@dataclass
class SystemPrompt:
    """Ordered prompt sections rendered into the final system prompt."""

    sections: list[PromptSection] = field(default_factory=list)

    def add(self, name: str, text: str, variant: str | None = None) -> "SystemPrompt":
        self.sections.append(PromptSection(name=name, text=text, variant=variant))
        return self

    def has(self, name: str) -> bool:
        return any(s.name == name for s in self.sections)

    def get(self, name: str) -> PromptSection | None:
        return next((s for s in self.sections if s.name == name), None)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.sections]

    def render(self) -> str:
        return SECTION_SEPARATOR.join(s.text.strip() for s in self.sections if s.text)

    def __str__(self) -> str:
        return self.render()


def build_system_prompt(
    language: Language,
    completeness_augmentation: str = "",
    rag_context: str | None = None,
) -> SystemPrompt:
    """Build the assistant system prompt.

    Args:
        language: Language to answer in.
        completeness_augmentation: Directive from the completeness guard, may be empty.
        rag_context: Retrieved reference passages, if any.

    Returns:
        The ordered sections; call ``render()`` for the prompt text.
    """
    prompt = SystemPrompt()
    prompt.add(
        "language",
        LANGUAGE_DIRECTIVES.get(language, LANGUAGE_DIRECTIVES[Language.EN]),
    )
    prompt.add("persona", PERSONA)
    prompt.add("formatting", FORMATTING_RULES)
    prompt.add("quotation", QUOTATION_RULES)

    if rag_context and rag_context.strip():
        prompt.add(
            "anti_hallucination",
            GROUNDED_POLICY.format(context=rag_context.strip()),
            variant="grounded",
        )
    else:
        prompt.add("anti_hallucination", HEDGED_POLICY, variant="hedged")

    if completeness_augmentation:
        prompt.add("completeness", completeness_augmentation)

    return prompt
