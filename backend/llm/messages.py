"""User-facing fallback messages shown when no answer could be produced."""

import re
from enum import Enum

from llm.types import Language


class FailureKind(str, Enum):
    """Why the assistant could not answer."""

    NOT_CONFIGURED = "not_configured"
    AUTHENTICATION = "authentication"
    CONNECTIVITY = "connectivity"


AUTH_HINT = re.compile(r"401|403|auth|unauthorized|invalid.*key", re.IGNORECASE)

OFFLINE_MESSAGES: dict[FailureKind, dict[Language, str]] = {
    FailureKind.NOT_CONFIGURED: {
        Language.EN: (
            "No API key configured. Please add ANTHROPIC_API_KEY or "
            "OPENAI_API_KEY to your .env file."
        ),
        Language.FR: (
            "Aucune clé API configurée. Veuillez ajouter ANTHROPIC_API_KEY ou "
            "OPENAI_API_KEY dans votre fichier .env"
        ),
        Language.AR: (
            "لم يتم تكوين مفتاح API. يرجى إضافة ANTHROPIC_API_KEY أو "
            "OPENAI_API_KEY في ملف .env"
        ),
    },
    FailureKind.AUTHENTICATION: {
        Language.EN: (
            "API authentication failed. Please check your API keys in the .env file."
        ),
        Language.FR: (
            "Erreur d'authentification API. Veuillez vérifier vos clés API "
            "dans le fichier .env"
        ),
        Language.AR: "فشل مصادقة API. يرجى التحقق من مفاتيح API في ملف .env",
    },
    FailureKind.CONNECTIVITY: {
        Language.EN: (
            "I apologize, but I am currently unable to connect. Please check "
            "your internet connection and try again."
        ),
        Language.FR: (
            "Je m'excuse, mais je ne parviens pas à me connecter. Veuillez "
            "vérifier votre connexion internet et réessayer."
        ),
        Language.AR: (
            "عذراً، لا أستطيع الاتصال حالياً. يرجى التحقق من اتصالك بالإنترنت "
            "والمحاولة مرة أخرى."
        ),
    },
}


def classify_failure(has_providers: bool, error_hint: str | None = None) -> FailureKind:
    """Root cause of a failed chat turn."""
    if not has_providers:
        return FailureKind.NOT_CONFIGURED
    if error_hint and AUTH_HINT.search(error_hint):
        return FailureKind.AUTHENTICATION
    return FailureKind.CONNECTIVITY


def offline_message(
    language: Language | str,
    has_providers: bool,
    error_hint: str | None = None,
) -> str:
    """Localized message for a failed chat turn, English when unknown."""
    messages = OFFLINE_MESSAGES[classify_failure(has_providers, error_hint)]
    try:
        return messages[Language(language)]
    except ValueError:
        return messages[Language.EN]
