"""Tests for the knowledge-source catalog."""

from llm.sources import build_source_string, get_relevant_sources
from llm.types import Language


class TestRelevantSources:
    def test_keyword_selects_type(self):
        names = [s.name for s in get_relevant_sources("Tell me a hadith about patience", Language.EN)]
        assert names == ["HadeethEnc"]

    def test_language_filter(self):
        names = [s.name for s in get_relevant_sources("Is this halal?", Language.FR)]
        assert names == ["IslamQA (French)"]

    def test_default_types_when_nothing_matches(self):
        names = [s.name for s in get_relevant_sources("What is Hajj?", Language.EN)]
        assert names == ["IslamWeb", "IslamiCity"]

    def test_at_most_three(self):
        names = [s.name for s in get_relevant_sources("حديث قرآن فتوى", Language.AR)]
        assert names == ["HadeethEnc", "QuranExplorer", "Mashhoor"]


class TestBuildSourceString:
    def test_format(self):
        assert build_source_string("What is Hajj?", Language.EN) == "Sources : IslamWeb, IslamiCity"
