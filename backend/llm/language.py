"""Lightweight language detection using Unicode ranges and stopwords.

Priority: Arabic script > French stopwords > French diacritics > English.
"""

import re

from llm.types import Language

ARABIC_CHAR = re.compile("[\u0600-\u06FF\u0750-\u077F\uFB50-\uFDFF\uFE70-\uFEFF]")
ARABIC_RATIO_THRESHOLD = 0.30

FRENCH_STOPWORDS = frozenset(
    {
        "le", "la", "les", "des", "une", "un", "est", "que", "ce",
        "dans", "pour", "pas", "sur", "sont", "avec", "tout", "mais",
        "cette", "nous", "vous", "leur", "ces", "ses", "aux", "aussi",
        "entre", "après", "très", "fait", "comme", "quoi", "quel",
        "quelle", "quels", "quelles", "comment", "donne", "donnez",
        "moi", "noms", "tous", "allah", "islam", "coran", "sourate",
        "cite", "combien", "pourquoi", "qui", "ou", "donc",
    }
)  # fmt: skip
FRENCH_MIN_HITS = 2
FRENCH_HIT_RATIO = 0.25

# Whitespace, straight and curly apostrophes, hyphens
WORD_SPLIT = re.compile(r"[\s'\u2018\u2019\-]+")
FRENCH_DIACRITIC = re.compile("[àâçéèêëîïôùûüÿœæ]", re.IGNORECASE)


def detect_language(text: str) -> Language:
    """Detect the language of user input text.

    Args:
        text: Raw user query.

    Returns:
        ``Language.AR``, ``Language.FR`` or ``Language.EN``.
    """
    chars = re.sub(r"\s", "", text)
    if chars:
        arabic_count = len(ARABIC_CHAR.findall(chars))
        if arabic_count / len(chars) > ARABIC_RATIO_THRESHOLD:
            return Language.AR

    words = [w for w in WORD_SPLIT.split(text.lower()) if w]
    french_hits = sum(1 for w in words if w in FRENCH_STOPWORDS)
    if french_hits >= FRENCH_MIN_HITS or (
        words and french_hits / len(words) > FRENCH_HIT_RATIO
    ):
        return Language.FR

    if FRENCH_DIACRITIC.search(text):
        return Language.FR

    return Language.EN
