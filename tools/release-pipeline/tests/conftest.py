from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

import trace_release.secrets as secrets
from trace_release_pipeline.config import EXCLUDE_INTEGRATION_ENV, BuildConfig
from trace_release_pipeline.errors import SubprocessFailure
from trace_release_pipeline.models import CompileConfig, TestSelection


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(secrets, "_resolvers", [])
    secrets.register_resolver(secrets.EnvResolver(), priority=0, name="env", source="env")
    for name in (EXCLUDE_INTEGRATION_ENV, secrets.CREDENTIALS_KEY_ENV, secrets.CREDENTIALS_IV_ENV):
        monkeypatch.delenv(name, raising=False)


class FakeCollaborators:
    def __init__(self, fail_on: Optional[Dict[str, Exception]] = None) -> None:
        self.calls: List[Tuple[str, object]] = []
        self.fail_on = fail_on or {}

    def _record(self, name: str, payload: object = None) -> None:
        self.calls.append((name, payload))
        if name in self.fail_on:
            raise self.fail_on[name]

    def check_install(self) -> None:
        self._record("check_install")

    def compile(self, config: CompileConfig) -> None:
        self._record("compile", config)

    def get_plugin_types(self) -> None:
        self._record("get_plugin_types")

    def init_test_fixtures(self, include_integration: bool) -> None:
        self._record("init_test_fixtures", include_integration)

    def run_tests(self, selection: TestSelection) -> None:
        self._record("run_tests", selection)

    def report_coverage(self) -> None:
        self._record("report_coverage")

    def test_non_interference(self) -> None:
        self._record("test_non_interference")

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class FakeInvoker:
    def __init__(self, outputs: Optional[Dict[str, str]] = None, fail_on: Optional[str] = None) -> None:
        self.calls: List[Tuple[List[str], Path]] = []
        self.outputs = outputs or {}
        self.fail_on = fail_on

    def __call__(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: Path,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        argv = [command, *[str(arg) for arg in args]]
        self.calls.append((argv, Path(cwd)))
        rendered = " ".join(argv)
        if self.fail_on is not None and self.fail_on in rendered:
            raise SubprocessFailure(argv, 1)
        return subprocess.CompletedProcess(argv, 0, stdout=self.outputs.get(rendered, ""), stderr="")

    @property
    def commands(self) -> List[str]:
        return [" ".join(argv) for argv, _ in self.calls]


@pytest.fixture()
def build_config(tmp_path: Path) -> BuildConfig:
    return BuildConfig(workspace_root=tmp_path)


@pytest.fixture()
def collaborators() -> FakeCollaborators:
    return FakeCollaborators()


@pytest.fixture()
def invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture()
def make_collaborators():
    return FakeCollaborators


@pytest.fixture()
def make_invoker():
    return FakeInvoker
