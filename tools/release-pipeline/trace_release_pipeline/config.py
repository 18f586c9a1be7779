"""Build configuration, captured once at startup and passed to every step."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from trace_release.credentials import CredentialMaterial
from trace_release.secrets import CREDENTIALS_IV_ENV, CREDENTIALS_KEY_ENV, resolve_secret

from .errors import ConfigError
from .models import TestSelection

EXCLUDE_INTEGRATION_ENV = "TRACE_TEST_EXCLUDE_INTEGRATION"
DEFAULT_CONFIG_FILE = "trace-build.yaml"

# Integration-heavy tests skipped when only unit tests are requested.
UNIT_TEST_EXCLUDE_PATTERNS = [
    "test/plugins/test-*",
    "test/test-agent-stopped.js",
    "test/test-grpc-async-handler.js",
    "test/test-grpc-context.js",
    "test/test-mysql-pool.js",
    "test/test-plugins-*",
    "test/test-trace-hapi-tails.js",
    "test/test-trace-web-frameworks.js",
    "test/test-unpatch.js",
]

TEST_INCLUDE_PATTERNS = [
    "test/test-*.js",
    "test/plugins/test-*.js",
]


class BuildFileSettings(BaseModel):
    """Non-secret settings that may be overridden from ``trace-build.yaml``."""

    build_directory: str = "build"
    project_id: str = "long-door-651"
    key_id: str = "a179efbeda21"
    credentials_dir: str = "."
    test_timeout_ms: int = Field(default=4000, gt=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("build_directory", "credentials_dir")
    @classmethod
    def _relative_to_workspace(cls, value: str) -> str:
        if Path(value).is_absolute():
            raise ValueError("must be relative to the workspace root")
        return value


class BuildConfig(BuildFileSettings):
    workspace_root: Path
    exclude_integration: bool = False
    credentials_key: Optional[SecretStr] = None
    credentials_iv: Optional[SecretStr] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def build_path(self) -> Path:
        return self.workspace_root / self.build_directory

    @property
    def credentials_filename(self) -> str:
        return f"{self.project_id}-{self.key_id}.json"

    @property
    def credentials_path(self) -> Path:
        return self.workspace_root / self.credentials_dir / self.credentials_filename

    def credential_material(self) -> Optional[CredentialMaterial]:
        if self.credentials_key is None or self.credentials_iv is None:
            return None
        return CredentialMaterial(
            key=self.credentials_key.get_secret_value(),
            iv=self.credentials_iv.get_secret_value(),
        )


def _read_config_file(path: Path) -> BuildFileSettings:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping.")
    try:
        return BuildFileSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc


def load_config(
    workspace_root: str | Path = ".",
    *,
    config_file: str | Path | None = None,
) -> BuildConfig:
    """Snapshot environment flags, secrets and optional YAML overrides into a ``BuildConfig``."""

    workspace = Path(workspace_root).resolve()
    if config_file is not None:
        settings_path: Optional[Path] = Path(config_file)
        if not settings_path.is_absolute():
            settings_path = workspace / settings_path
        if not settings_path.exists():
            raise ConfigError(f"Config file not found: {settings_path}")
    else:
        candidate = workspace / DEFAULT_CONFIG_FILE
        settings_path = candidate if candidate.exists() else None

    settings = _read_config_file(settings_path) if settings_path else BuildFileSettings()

    key = resolve_secret(CREDENTIALS_KEY_ENV)
    iv = resolve_secret(CREDENTIALS_IV_ENV)
    return BuildConfig(
        **settings.model_dump(),
        workspace_root=workspace,
        exclude_integration=bool(os.environ.get(EXCLUDE_INTEGRATION_ENV)),
        credentials_key=SecretStr(key) if key else None,
        credentials_iv=SecretStr(iv) if iv else None,
    )


def unit_test_exclude_globs(config: BuildConfig) -> List[str]:
    if not config.exclude_integration:
        return []
    return [f"{config.build_directory}/{pattern}" for pattern in UNIT_TEST_EXCLUDE_PATTERNS]


def build_test_selection(config: BuildConfig, *, coverage: bool) -> TestSelection:
    return TestSelection(
        include_globs=tuple(f"{config.build_directory}/{pattern}" for pattern in TEST_INCLUDE_PATTERNS),
        exclude_globs=tuple(unit_test_exclude_globs(config)),
        root_dir=config.build_directory,
        coverage=coverage,
        timeout=config.test_timeout_ms,
    )
