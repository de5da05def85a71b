"""Post-hoc checks on assistant answers.

Pure string analysis, no API calls: confidence scoring from retrieval
stats, citation presence, Quran surah-number sanity and a disclaimer for
low-confidence answers.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

DISCLAIMER_MARKER = "والله أعلم"
LOW_CONFIDENCE_DISCLAIMER = (
    "\n\nوالله أعلم (Et Allah sait mieux). Consultez un savant pour confirmer."
)

SURAH_COUNT = 114

CITATION = re.compile(r"\[Source\s+\d+\]", re.IGNORECASE)
SURAH_REFERENCES: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:surah|sourate|سورة)\s+(\d+)", re.IGNORECASE),
    re.compile(r"\b(\d{1,3}):(\d+)\b"),
)


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class ValidationResult:
    """Validated (possibly augmented) answer text."""

    text: str
    confidence: Confidence
    warnings: list[str] = field(default_factory=list)


def score_confidence(rag_source_count: int, avg_similarity: float) -> Confidence:
    if rag_source_count >= 3 and avg_similarity > 0.8:
        return Confidence.HIGH
    if rag_source_count >= 1 and avg_similarity > 0.65:
        return Confidence.MEDIUM
    return Confidence.LOW


def validate_response(
    response_text: str,
    rag_source_count: int,
    avg_similarity: float,
) -> ValidationResult:
    """Validate an answer and append a disclaimer when confidence is low.

    Args:
        response_text: Final assistant text.
        rag_source_count: Number of retrieved passages given to the model.
        avg_similarity: Mean similarity score of those passages (0-1).
    """
    warnings: list[str] = []
    text = response_text
    confidence = score_confidence(rag_source_count, avg_similarity)

    if rag_source_count > 0 and not CITATION.search(text):
        warnings.append(
            f"Response has {rag_source_count} RAG source(s) but no "
            "[Source N] citations found in text."
        )

    for pattern in SURAH_REFERENCES:
        for match in pattern.finditer(text):
            surah = int(match.group(1))
            if surah < 1 or surah > SURAH_COUNT:
                warnings.append(
                    f"Potentially invalid surah number {surah} found "
                    f"(valid range: 1-{SURAH_COUNT})."
                )

    if confidence is Confidence.LOW and DISCLAIMER_MARKER not in text:
        text += LOW_CONFIDENCE_DISCLAIMER

    if warnings:
        logger.debug("Response validation warnings: %s", warnings)

    return ValidationResult(text=text, confidence=confidence, warnings=warnings)
