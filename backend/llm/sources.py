"""Knowledge-source catalog shown under assistant answers.

The catalog is static. Selection is keyword-based on the query and filtered
by the answer language.
"""

import re
from dataclasses import dataclass

from llm.types import Language

MAX_SOURCES = 3


@dataclass(frozen=True)
class KnowledgeSource:
    """A reference website the assistant points users to."""

    name: str
    url: str
    type: str
    languages: tuple[str, ...]


KNOWLEDGE_SOURCES: tuple[KnowledgeSource, ...] = (
    KnowledgeSource("HadeethEnc", "https://hadeethenc.com", "hadith", ("en", "ar")),
    KnowledgeSource(
        "QuranExplorer", "https://www.quranexplorer.com/quran", "quran", ("en", "ar")
    ),
    KnowledgeSource("IslamQA (English)", "https://islamqa.info/en", "fatwa", ("en",)),
    KnowledgeSource("IslamQA (French)", "https://islamqa.info/fr", "fatwa", ("fr",)),
    KnowledgeSource("Siyar", "https://siyar.fr", "education", ("fr",)),
    KnowledgeSource("IslamWeb", "https://www.islamweb.net", "general", ("en", "ar")),
    KnowledgeSource(
        "Maison Islam", "https://www.maison-islam.com", "education", ("fr",)
    ),
    KnowledgeSource("Islamophile", "http://islamophile.org", "education", ("fr",)),
    KnowledgeSource("Mashhoor", "https://www.mashhoor.net", "scholar", ("ar",)),
    KnowledgeSource("Bin Othaimeen", "https://binothaimeen.net", "scholar", ("ar",)),
    KnowledgeSource("Al Mosleh", "https://www.almosleh.com", "scholar", ("ar",)),
    KnowledgeSource(
        "IslamiCity", "https://www.islamicity.org", "general", ("en", "ar")
    ),
)

# Ordered (pattern, source type) rules; every matching rule contributes.
SOURCE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"hadith|sunnah|prophet|حديث"), "hadith"),
    (re.compile(r"quran|verse|surah|قرآن|coran|sourate"), "quran"),
    (re.compile(r"ruling|halal|haram|حكم|licite|illicite"), "fatwa"),
    (re.compile(r"scholar|opinion|fatwa|فتوى|savant|avis"), "scholar"),
)
DEFAULT_SOURCE_TYPES = ("education", "general")


def get_relevant_sources(
    query: str,
    language: Language,
    catalog: tuple[KnowledgeSource, ...] = KNOWLEDGE_SOURCES,
) -> list[KnowledgeSource]:
    """Pick up to three catalog entries relevant to the query."""
    q = query.lower()
    lang_sources = [s for s in catalog if language.value in s.languages]
    selected: list[KnowledgeSource] = []

    for pattern, source_type in SOURCE_RULES:
        if pattern.search(q):
            selected.extend(s for s in lang_sources if s.type == source_type)

    if not selected:
        selected = [s for s in lang_sources if s.type in DEFAULT_SOURCE_TYPES]

    return selected[:MAX_SOURCES]


def build_source_string(query: str, language: Language) -> str:
    """Display line such as ``"Sources : HadeethEnc, IslamWeb"``."""
    sources = get_relevant_sources(query, language)
    if not sources:
        return ""
    return "Sources : " + ", ".join(s.name for s in sources)
