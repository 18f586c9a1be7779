"""Default implementations of the Node toolchain operations behind each named step."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Protocol

from .config import BuildConfig
from .errors import CompileFailure, SubprocessFailure, TestFailure
from .invoker import Invoker, run_command
from .models import CompileConfig, TestSelection

logger = logging.getLogger(__name__)

PLUGIN_TYPES_DIR = Path("test") / "plugins" / "types"
FIXTURES_DIR = Path("test") / "fixtures"


class Collaborators(Protocol):
    def check_install(self) -> None: ...

    def compile(self, config: CompileConfig) -> None: ...

    def get_plugin_types(self) -> None: ...

    def init_test_fixtures(self, include_integration: bool) -> None: ...

    def run_tests(self, selection: TestSelection) -> None: ...

    def report_coverage(self) -> None: ...

    def test_non_interference(self) -> None: ...


class ShellCollaborators:
    """Shell out to npm/npx/node from the workspace root."""

    def __init__(self, config: BuildConfig, invoker: Invoker = run_command) -> None:
        self.config = config
        self.invoker = invoker

    @property
    def workspace(self) -> Path:
        return self.config.workspace_root

    def check_install(self) -> None:
        """Pack the module and make sure the tarball installs into an empty project."""
        packed = self.invoker("npm", ["pack"], cwd=self.workspace, capture_output=True)
        tarball_lines = [line for line in (packed.stdout or "").splitlines() if line.strip()]
        if not tarball_lines:
            raise SubprocessFailure(["npm", "pack"], 0, "npm pack did not report a tarball")
        tarball = (self.workspace / tarball_lines[-1].strip()).resolve()
        try:
            with tempfile.TemporaryDirectory(prefix="trace-check-install-") as scratch:
                scratch_path = Path(scratch)
                self.invoker("npm", ["init", "-y"], cwd=scratch_path, capture_output=True)
                self.invoker("npm", ["install", str(tarball)], cwd=scratch_path)
        finally:
            tarball.unlink(missing_ok=True)

    def compile(self, config: CompileConfig) -> None:
        args = ["tsc", "-p", ".", "--target", config.language_level, "--outDir", self.config.build_directory]
        if config.strict:
            args.append("--strict")
        try:
            self.invoker("npx", args, cwd=self.workspace)
        except SubprocessFailure as exc:
            raise CompileFailure(f"Compilation failed for target '{config.language_level}': {exc}") from exc

    def get_plugin_types(self) -> None:
        types_root = self.workspace / PLUGIN_TYPES_DIR
        if not types_root.is_dir():
            logger.info("> No plugin type packages under %s", types_root)
            return
        for package_json in sorted(types_root.glob("*/package.json")):
            self.invoker("npm", ["install"], cwd=package_json.parent)

    def init_test_fixtures(self, include_integration: bool) -> None:
        source = self.workspace / FIXTURES_DIR
        if not source.is_dir():
            logger.info("> No test fixtures under %s", source)
            return
        destination = self.config.build_path / "test" / "plugins" / "fixtures"
        if destination.exists():
            shutil.rmtree(destination)
        shutil.copytree(source, destination)
        if not include_integration:
            return
        for package_json in sorted(destination.glob("*/package.json")):
            self.invoker("npm", ["install"], cwd=package_json.parent)

    def run_tests(self, selection: TestSelection) -> None:
        files = self._select_test_files(selection)
        if not files:
            raise TestFailure(f"No test files matched {list(selection.include_globs)}")
        args: List[str] = []
        if selection.coverage:
            args.extend(["nyc", "--reporter", "lcov", "mocha"])
        else:
            args.append("mocha")
        args.extend(["--timeout", str(selection.timeout)])
        args.extend(files)
        try:
            self.invoker("npx", args, cwd=self.workspace)
        except SubprocessFailure as exc:
            raise TestFailure(str(exc)) from exc

    def report_coverage(self) -> None:
        self.invoker("npx", ["nyc", "report", "--reporter=json"], cwd=self.workspace)
        reports = sorted((self.workspace / "coverage").glob("*.json"))
        args = ["codecov"]
        for report in reports:
            args.extend(["-f", str(report.relative_to(self.workspace))])
        self.invoker("npx", args, cwd=self.workspace)

    def test_non_interference(self) -> None:
        scripts_dir = self.config.build_path / "test" / "non-interference"
        for script in sorted(scripts_dir.glob("*.js")):
            self.invoker("node", [str(script.relative_to(self.workspace))], cwd=self.workspace)

    def _select_test_files(self, selection: TestSelection) -> List[str]:
        excluded = set()
        for pattern in selection.exclude_globs:
            excluded.update(self.workspace.glob(pattern))
        selected: List[str] = []
        for pattern in selection.include_globs:
            for match in sorted(self.workspace.glob(pattern)):
                if match in excluded or not match.is_file():
                    continue
                relative = match.relative_to(self.workspace).as_posix()
                if relative not in selected:
                    selected.append(relative)
        return selected
