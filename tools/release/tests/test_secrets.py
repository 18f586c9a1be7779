from __future__ import annotations

from pathlib import Path

import pytest

import trace_release.secrets as secrets


@pytest.fixture()
def isolated_secrets(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(secrets, "_secret_specs", {})
    monkeypatch.setattr(secrets, "_resolvers", [])
    secrets.register_resolver(secrets.EnvResolver(), priority=0, name="env", source="env")
    return secrets


def test_resolve_secret_info_reports_env(monkeypatch: pytest.MonkeyPatch, isolated_secrets) -> None:
    monkeypatch.setenv("TEST_SECRET", "value")
    isolated_secrets.register_secret(secrets.SecretSpec(name="TEST_SECRET"))

    info = isolated_secrets.resolve_secret_info("TEST_SECRET")

    assert info.value == "value"
    assert info.source == "env"
    assert any(attempt.success for attempt in info.attempts)
    assert "value" not in repr(info)


def test_resolve_secret_falls_back_to_dotenv(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, isolated_secrets
) -> None:
    monkeypatch.delenv("DOT_SECRET", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text('DOT_SECRET="abc123"\n')
    isolated_secrets.use_dotenv(env_file)

    info = isolated_secrets.resolve_secret_info("DOT_SECRET")

    assert info.value == "abc123"
    assert info.source == "dotenv"
    assert info.attempts[0].resolver == "env"
    assert not info.attempts[0].success
    assert info.attempts[1].details["path"] == str(env_file)


def test_env_takes_priority_over_dotenv(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, isolated_secrets
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("SHARED_SECRET=from-file\n")
    isolated_secrets.use_dotenv(env_file)
    monkeypatch.setenv("SHARED_SECRET", "from-env")

    assert isolated_secrets.resolve_secret("SHARED_SECRET") == "from-env"


def test_empty_values_are_missing(monkeypatch: pytest.MonkeyPatch, isolated_secrets) -> None:
    monkeypatch.setenv("EMPTY_SECRET", "")
    assert isolated_secrets.resolve_secret("EMPTY_SECRET") is None


def test_describe_secret_missing_reports_attempts(tmp_path: Path, isolated_secrets) -> None:
    isolated_secrets.use_dotenv(tmp_path / "absent.env")
    isolated_secrets.register_secret(secrets.SecretSpec(name="UNKNOWN_SECRET", description="unused"))

    payload = isolated_secrets.describe_secret("UNKNOWN_SECRET")

    assert payload["present"] is False
    assert payload["description"] == "unused"
    assert [attempt["source"] for attempt in payload["attempts"]] == ["env", "dotenv"]
    assert payload["attempts"][1]["details"]["exists"] is False


def test_credential_secrets_are_registered() -> None:
    names = {spec.name for spec in secrets.list_secrets()}
    assert {secrets.CREDENTIALS_KEY_ENV, secrets.CREDENTIALS_IV_ENV} <= names


def test_use_dotenv_registers_each_path_once(tmp_path: Path, isolated_secrets) -> None:
    env_file = tmp_path / ".env"
    isolated_secrets.use_dotenv(env_file)
    isolated_secrets.use_dotenv(env_file)
    isolated_secrets.use_dotenv(tmp_path / "other.env")

    payload = isolated_secrets.describe_secret("ANY_SECRET")

    assert [attempt["resolver"] for attempt in payload["attempts"]] == [
        "env",
        f"dotenv:{env_file}",
        f"dotenv:{tmp_path / 'other.env'}",
    ]


def test_dotenv_picks_up_file_created_later(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, isolated_secrets
) -> None:
    monkeypatch.delenv("LATE_SECRET", raising=False)
    env_file = tmp_path / ".env"
    isolated_secrets.use_dotenv(env_file)
    assert isolated_secrets.resolve_secret("LATE_SECRET") is None

    env_file.write_text("LATE_SECRET=now-here\n")

    assert isolated_secrets.resolve_secret("LATE_SECRET") == "now-here"
