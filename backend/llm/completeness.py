"""Completeness guard for enumerated answers.

Detects queries asking for a complete list, produces a system-prompt
directive that enforces exhaustive numbered output, and checks the answer
afterwards by counting numbered lines. Canonical lists with a fixed size can
then be repaired with a targeted continuation request.
"""

import re
from dataclasses import dataclass

from llm.types import CompletenessCheck, CompletenessInfo


@dataclass(frozen=True)
class ListExpectation:
    """A canonical list with a universally agreed number of items."""

    patterns: tuple[re.Pattern[str], ...]
    expected_count: int
    label: str

    def matches(self, query: str) -> bool:
        return any(p.search(query) for p in self.patterns)


# Ordered: first matching entry wins.
LIST_EXPECTATIONS: tuple[ListExpectation, ...] = (
    ListExpectation(
        patterns=(
            re.compile(r"99\s*n(om|ame)s?\b", re.IGNORECASE),
            re.compile(r"n(om|ame)s?\s*(d['’]?\s*)?allah", re.IGNORECASE),
            re.compile(r"asma\s*(ul|al)?\s*husna", re.IGNORECASE),
            re.compile(r"أسماء\s*الله\s*الحسنى"),
            re.compile(r"noms\s*d(e|['’])\s*dieu", re.IGNORECASE),
            re.compile(r"names\s*of\s*(god|allah)", re.IGNORECASE),
            re.compile(r"beautiful\s*names", re.IGNORECASE),
            re.compile(r"beaux\s*noms", re.IGNORECASE),
        ),
        expected_count=99,
        label="99 Names of Allah",
    ),
    ListExpectation(
        patterns=(
            re.compile(r"piliers?\s*(de\s*l['’]?\s*islam|of\s*islam)", re.IGNORECASE),
            re.compile(r"pillars?\s*of\s*islam", re.IGNORECASE),
            re.compile(r"أركان\s*الإسلام"),
        ),
        expected_count=5,
        label="Pillars of Islam",
    ),
    ListExpectation(
        patterns=(
            re.compile(
                r"piliers?\s*(de\s*la\s*foi|of\s*(the\s*)?faith|iman)", re.IGNORECASE
            ),
            re.compile(r"pillars?\s*of\s*(iman|faith)", re.IGNORECASE),
            re.compile(r"أركان\s*الإيمان"),
        ),
        expected_count=6,
        label="Pillars of Iman",
    ),
)

# Generic "give me everything" markers (EN / FR / AR).
COMPLETENESS_KEYWORDS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\ball\b", re.IGNORECASE),
    re.compile(r"\bcomplete\b", re.IGNORECASE),
    re.compile(r"\bfull\b", re.IGNORECASE),
    re.compile(r"\bentire\b", re.IGNORECASE),
    re.compile(r"\btous\b", re.IGNORECASE),
    re.compile(r"\btoutes\b", re.IGNORECASE),
    re.compile(r"\bcomplète\b", re.IGNORECASE),
    re.compile(r"\bcomplet\b", re.IGNORECASE),
    re.compile(r"\bintégral", re.IGNORECASE),
    re.compile(r"\bكامل"),
    re.compile(r"\bجميع"),
    re.compile(r"\bكل\b"),
    re.compile(r"\bcite[z]?\s*(moi\s*)?(les|tous)", re.IGNORECASE),
    re.compile(r"\bliste?\b", re.IGNORECASE),
    re.compile(r"\blist\b", re.IGNORECASE),
    re.compile(r"\bénumère", re.IGNORECASE),
    re.compile(r"\benumerate", re.IGNORECASE),
    re.compile(r"\bdonne[z]?\s*(-?\s*moi\s*)?(les|tous)", re.IGNORECASE),
)

# A numbered-list line: "12. ..." or "12) ...", ASCII digits only
NUMBERED_LINE = re.compile(r"^\s*[0-9]+[.)]\s", re.MULTILINE)

NOT_A_LIST = CompletenessInfo(
    is_list_request=False,
    expected_count=None,
    label=None,
    prompt_augmentation="",
)


def analyze_completeness(query: str) -> CompletenessInfo:
    """Classify a query and attach the matching completeness directive."""
    for entry in LIST_EXPECTATIONS:
        if entry.matches(query):
            return CompletenessInfo(
                is_list_request=True,
                expected_count=entry.expected_count,
                label=entry.label,
                prompt_augmentation=build_prompt_augmentation(
                    entry.expected_count, entry.label
                ),
            )

    if any(keyword.search(query) for keyword in COMPLETENESS_KEYWORDS):
        return CompletenessInfo(
            is_list_request=True,
            expected_count=None,
            label=None,
            prompt_augmentation=build_generic_completeness_prompt(),
        )

    return NOT_A_LIST


def build_prompt_augmentation(expected_count: int, label: str) -> str:
    return f"""
CRITICAL COMPLETENESS REQUIREMENT:
The user is asking for the complete {label}. You MUST provide ALL {expected_count} items in a numbered list from 1 to {expected_count}.
- Do NOT stop early or truncate.
- Do NOT summarize or skip items.
- Number each item sequentially: 1. ... 2. ... up to {expected_count}.
- If each item has an Arabic name and a meaning/translation, include both.
- Output every single item. The response MUST contain exactly {expected_count} numbered items.
- After the list, include a brief closing line confirming the total count."""


def build_generic_completeness_prompt() -> str:
    return """
COMPLETENESS REQUIREMENT:
The user is asking for a complete list. You MUST provide ALL items without truncation.
- Number each item sequentially.
- Do NOT stop early, summarize, or skip items.
- Do NOT say "and so on" or "etc.", list every single item.
- After the list, confirm the total count."""


def verify_completeness(
    response_text: str, expected_count: int | None
) -> CompletenessCheck:
    """Count numbered items in a response and compare with the target.

    Without a target the response is reported complete, so callers never
    attempt an automatic continuation for generic list requests.
    """
    item_count = len(NUMBERED_LINE.findall(response_text))

    if expected_count is None:
        return CompletenessCheck(item_count=item_count, is_complete=True)

    return CompletenessCheck(
        item_count=item_count,
        is_complete=item_count >= expected_count,
    )


def build_continuation_prompt(
    current_count: int, expected_count: int, label: str | None
) -> str:
    """User-turn instruction asking for the missing tail of a list."""
    of_label = f" of the {label}" if label else ""
    return (
        f"You previously provided items 1 through {current_count}{of_label}.\n"
        f"The list is incomplete. Continue from item {current_count + 1} "
        f"to item {expected_count}.\n"
        f"Use the same format (numbered list). Do NOT repeat items "
        f"1-{current_count}. Start directly with {current_count + 1}."
    )
