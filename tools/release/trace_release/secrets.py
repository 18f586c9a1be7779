"""Secret resolution helpers shared by the build pipeline and its CI jobs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from dotenv import dotenv_values

CREDENTIALS_KEY_ENV = "TRACE_SYSTEM_TEST_ENCRYPTED_CREDENTIALS_KEY"
CREDENTIALS_IV_ENV = "TRACE_SYSTEM_TEST_ENCRYPTED_CREDENTIALS_IV"


@dataclass(frozen=True)
class SecretSpec:
    name: str
    description: str = ""
    scopes: tuple[str, ...] = ()


class SecretResolver(Protocol):
    def resolve(self, spec: SecretSpec) -> Optional[str]:  # pragma: no cover - interface
        ...

    def describe(self) -> dict[str, object]:  # pragma: no cover - optional hook
        return {}


@dataclass(frozen=True)
class SecretAttempt:
    resolver: str
    source: str
    success: bool
    details: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class SecretResolutionInfo:
    name: str
    value: Optional[str] = field(repr=False)
    resolver: Optional[str]
    source: Optional[str]
    attempts: List[SecretAttempt]


@dataclass
class _RegisteredResolver:
    priority: int
    resolver: SecretResolver
    name: str
    source: str
    details: dict[str, object]


_secret_specs: dict[str, SecretSpec] = {}
_resolvers: List[_RegisteredResolver] = []


def register_secret(spec: SecretSpec) -> None:
    _secret_specs.setdefault(spec.name, spec)


def register_resolver(
    resolver: SecretResolver,
    priority: int = 0,
    *,
    name: Optional[str] = None,
    source: Optional[str] = None,
    details: Optional[dict[str, object]] = None,
) -> None:
    entry = _RegisteredResolver(
        priority=priority,
        resolver=resolver,
        name=name or resolver.__class__.__name__,
        source=source or (name or resolver.__class__.__name__),
        details=dict(details or {}),
    )
    _resolvers.append(entry)
    _resolvers.sort(key=lambda item: item.priority, reverse=True)


class EnvResolver:
    """Resolve secrets from process environment variables."""

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        value = os.getenv(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {"type": "env"}


class DotEnvResolver:
    """Resolve secrets from a repo-local ``.env`` file without touching ``os.environ``."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._values: Optional[Dict[str, Optional[str]]] = None
        self._mtime: Optional[float] = None

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        value = self._load().get(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {
            "type": "dotenv",
            "path": str(self.path),
            "exists": self.path.exists(),
            "loaded": self._values is not None,
        }

    def _load(self) -> Dict[str, Optional[str]]:
        # Reload when the file appears or changes between runs in one process.
        mtime = self.path.stat().st_mtime if self.path.exists() else None
        if self._values is None or mtime != self._mtime:
            self._values = dict(dotenv_values(self.path)) if mtime is not None else {}
            self._mtime = mtime
        return self._values


register_resolver(EnvResolver(), priority=0, name="env", source="env")


def use_dotenv(path: str | Path, *, priority: int = -10) -> None:
    resolver = DotEnvResolver(Path(path))
    name = f"dotenv:{resolver.path}"
    if any(entry.name == name for entry in _resolvers):
        return
    register_resolver(
        resolver,
        priority=priority,
        name=name,
        source="dotenv",
        details={"path": str(resolver.path)},
    )


def resolve_secret(name: str) -> Optional[str]:
    return resolve_secret_info(name).value


def resolve_secret_info(name: str) -> SecretResolutionInfo:
    spec = _secret_specs.get(name, SecretSpec(name=name))
    attempts: List[SecretAttempt] = []

    for entry in _resolvers:
        details = dict(entry.details)
        describe = getattr(entry.resolver, "describe", None)
        value = entry.resolver.resolve(spec)
        if callable(describe):
            extra = describe()
            if isinstance(extra, dict):
                details.update(extra)

        success = bool(value)
        attempts.append(
            SecretAttempt(resolver=entry.name, source=entry.source, success=success, details=details)
        )
        if success:
            return SecretResolutionInfo(
                name=spec.name,
                value=value,
                resolver=entry.name,
                source=entry.source,
                attempts=attempts,
            )

    return SecretResolutionInfo(name=spec.name, value=None, resolver=None, source=None, attempts=attempts)


def list_secrets() -> List[SecretSpec]:
    return list(_secret_specs.values())


def describe_secret(name: str) -> dict[str, object]:
    """Report where a secret would come from. The value itself is never included."""
    spec = _secret_specs.get(name, SecretSpec(name=name))
    info = resolve_secret_info(name)
    return {
        "name": spec.name,
        "description": spec.description,
        "scopes": list(spec.scopes),
        "present": info.value is not None,
        "resolver": info.resolver,
        "source": info.source,
        "attempts": [
            {
                "resolver": attempt.resolver,
                "source": attempt.source,
                "success": attempt.success,
                "details": attempt.details,
            }
            for attempt in info.attempts
        ],
    }


register_secret(
    SecretSpec(
        name=CREDENTIALS_KEY_ENV,
        description="Hex AES key for the encrypted service account credentials",
        scopes=("decrypt-service-account-credentials",),
    )
)
register_secret(
    SecretSpec(
        name=CREDENTIALS_IV_ENV,
        description="Hex nonce for the encrypted service account credentials",
        scopes=("decrypt-service-account-credentials",),
    )
)
