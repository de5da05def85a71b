"""Tests for system prompt assembly."""

from llm.completeness import analyze_completeness
from llm.prompts import build_system_prompt
from llm.types import Language


class TestBuildSystemPrompt:
    """Tests for build_system_prompt."""

    def test_section_order_without_extras(self):
        prompt = build_system_prompt(Language.EN)

        assert prompt.names == [
            "language",
            "persona",
            "formatting",
            "quotation",
            "anti_hallucination",
        ]
        assert prompt.get("anti_hallucination").variant == "hedged"

    def test_language_directive(self):
        assert build_system_prompt(Language.FR).get("language").text == "Réponds en français."
        assert build_system_prompt(Language.AR).get("language").text == "أجب باللغة العربية."

    def test_rag_context_uses_grounded_policy(self):
        prompt = build_system_prompt(Language.EN, rag_context="[Source 1] Sahih Bukhari 1")

        section = prompt.get("anti_hallucination")
        assert section.variant == "grounded"
        assert "[Source 1] Sahih Bukhari 1" in section.text
        assert "{context}" not in section.text

    def test_blank_rag_context_is_ignored(self):
        prompt = build_system_prompt(Language.EN, rag_context="   ")
        assert prompt.get("anti_hallucination").variant == "hedged"

    def test_completeness_section_is_last(self):
        info = analyze_completeness("Give me the 99 names of Allah")

        prompt = build_system_prompt(Language.EN, info.prompt_augmentation)

        assert prompt.has("completeness")
        assert prompt.names[-1] == "completeness"
        assert "99" in prompt.get("completeness").text

    def test_render_joins_sections(self):
        prompt = build_system_prompt(Language.EN)
        rendered = prompt.render()

        assert rendered.startswith("Respond in English.\n\n")
        assert str(prompt) == rendered
        assert not prompt.has("completeness")
