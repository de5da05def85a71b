"""Tests for offline / failure messages."""

import pytest

from llm.messages import FailureKind, classify_failure, offline_message
from llm.types import Language


class TestClassifyFailure:
    def test_no_providers(self):
        assert classify_failure(False, "401") == FailureKind.NOT_CONFIGURED

    @pytest.mark.parametrize(
        "hint",
        ["Anthropic API error 401: {}", "HTTP 403", "Unauthorized", "Invalid API key"],
    )
    def test_auth_hints(self, hint):
        assert classify_failure(True, hint) == FailureKind.AUTHENTICATION

    def test_other_errors_are_connectivity(self):
        assert classify_failure(True, "connection reset") == FailureKind.CONNECTIVITY
        assert classify_failure(True, None) == FailureKind.CONNECTIVITY


class TestOfflineMessage:
    def test_not_configured_in_three_languages(self):
        assert "No API key configured" in offline_message(Language.EN, False)
        assert "Aucune clé API" in offline_message(Language.FR, False)
        assert "لم يتم تكوين" in offline_message(Language.AR, False)

    def test_auth_message(self):
        assert "authentification" in offline_message("fr", True, "401 Unauthorized")

    def test_connectivity_message(self):
        assert "unable to connect" in offline_message("en", True, "timeout")

    def test_unknown_language_falls_back_to_english(self):
        assert offline_message("de", True) == offline_message(Language.EN, True)
