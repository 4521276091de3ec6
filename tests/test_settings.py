"""Tests for settings helper."""

import pytest

from runledger.settings import Settings


def test_orchestrator_timeout_disabled_logs_warning_and_returns_none(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A non-positive timeout disables the engine call timeout and says so."""
    caplog.set_level("WARNING")
    settings = Settings(orchestrator_timeout_seconds=0)
    assert settings.orchestrator_timeout() is None
    assert "runledger.settings" in [r.name for r in caplog.records]
    warnings = [r for r in caplog.records if r.levelname == "WARNING"]
    assert len(warnings) == 1
    assert "disables the engine call timeout" in warnings[0].message


def test_orchestrator_timeout_positive() -> None:
    settings = Settings(orchestrator_timeout_seconds=5)
    assert settings.orchestrator_timeout() == 5.0


def test_blank_webhook_and_key_are_unset() -> None:
    """Empty strings from the environment count as not configured."""
    settings = Settings(orchestrator_webhook_url="  ", internal_api_key="")
    assert settings.orchestrator_webhook_url is None
    assert settings.internal_api_key is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORCHESTRATOR_WEBHOOK_URL", "http://engine.local/webhook/onboarding")
    monkeypatch.setenv("INTERNAL_API_KEY", "secret")
    settings = Settings()
    assert settings.orchestrator_webhook_url == "http://engine.local/webhook/onboarding"
    assert settings.internal_api_key == "secret"
