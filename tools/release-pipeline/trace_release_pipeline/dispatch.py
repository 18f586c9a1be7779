from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List, Optional, TextIO

from trace_release.credentials import CryptoError, decrypt_credentials, encrypt_credentials

from .collaborators import Collaborators
from .config import BuildConfig, build_test_selection
from .errors import PipelineError
from .invoker import Invoker, run_command
from .models import StepResult
from .steps import CompileStep, NamedStep, NpmPassthrough, ParsedStep

logger = logging.getLogger(__name__)

StepHandler = Callable[[str], StepResult]


class StepDispatcher:
    """Map parsed steps onto collaborator calls and report each outcome as a ``StepResult``."""

    def __init__(
        self,
        config: BuildConfig,
        collaborators: Collaborators,
        *,
        invoker: Invoker = run_command,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.config = config
        self.collaborators = collaborators
        self.invoker = invoker
        self.stdout = stdout
        self._named: Dict[str, StepHandler] = {
            "check-install": self._check_install,
            "encrypt-service-account-credentials": self._encrypt_credentials,
            "decrypt-service-account-credentials": self._decrypt_credentials,
            "get-plugin-types": self._get_plugin_types,
            "init-test-fixtures": self._init_test_fixtures,
            "run-unit-tests": self._run_unit_tests,
            "run-unit-tests-with-coverage": self._run_unit_tests_with_coverage,
            "report-coverage": self._report_coverage,
            "test-non-interference": self._test_non_interference,
        }

    def named_steps(self) -> List[str]:
        return list(self._named)

    def dispatch(self, step: ParsedStep) -> StepResult:
        try:
            if isinstance(step, NpmPassthrough):
                self.invoker("npm", ["run", step.script], cwd=self.config.workspace_root)
                return StepResult(step=step.token, data={"script": step.script})
            if isinstance(step, CompileStep):
                config = step.config()
                self.collaborators.compile(config)
                return StepResult(step=step.token, data=config.to_dict())
            if isinstance(step, NamedStep):
                handler = self._named.get(step.name)
                if handler is None:
                    logger.warning("> %s: not found", step.name)
                    return StepResult(step=step.token, status="skipped", reason="unknown-step")
                return handler(step.token)
        except (PipelineError, CryptoError) as exc:
            return StepResult(step=step.token, status="failed", error=exc)
        raise TypeError(f"Unsupported step type: {type(step).__name__}")

    def _check_install(self, token: str) -> StepResult:
        self.collaborators.check_install()
        return StepResult(step=token)

    def _encrypt_credentials(self, token: str) -> StepResult:
        material = encrypt_credentials(self.config.credentials_path)
        # Operator copies these into the CI secret store; never written to disk.
        print(f"key: {material.key}\niv: {material.iv}", file=self.stdout or sys.stdout)
        return StepResult(step=token, data={"path": str(self.config.credentials_path)})

    def _decrypt_credentials(self, token: str) -> StepResult:
        material = self.config.credential_material()
        if material is None:
            logger.warning("> Environment insufficient to decrypt service account credentials")
            return StepResult(step=token, status="skipped", reason="missing-secrets")
        path = decrypt_credentials(material, self.config.credentials_path)
        return StepResult(step=token, data={"path": str(path)})

    def _get_plugin_types(self, token: str) -> StepResult:
        self.collaborators.get_plugin_types()
        return StepResult(step=token)

    def _init_test_fixtures(self, token: str) -> StepResult:
        include_integration = not self.config.exclude_integration
        self.collaborators.init_test_fixtures(include_integration)
        return StepResult(step=token, data={"include_integration": include_integration})

    def _run_unit_tests(self, token: str) -> StepResult:
        return self._run_tests(token, coverage=False)

    def _run_unit_tests_with_coverage(self, token: str) -> StepResult:
        return self._run_tests(token, coverage=True)

    def _run_tests(self, token: str, *, coverage: bool) -> StepResult:
        selection = build_test_selection(self.config, coverage=coverage)
        self.collaborators.run_tests(selection)
        return StepResult(step=token, data=selection.to_dict())

    def _report_coverage(self, token: str) -> StepResult:
        self.collaborators.report_coverage()
        return StepResult(step=token)

    def _test_non_interference(self, token: str) -> StepResult:
        self.collaborators.test_non_interference()
        return StepResult(step=token)
