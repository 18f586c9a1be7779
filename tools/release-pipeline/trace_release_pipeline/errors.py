from __future__ import annotations

from typing import Sequence


class PipelineError(RuntimeError):
    """Raised when a build step fails validation or runtime checks."""


class ConfigError(PipelineError):
    """Raised when the build configuration cannot be loaded."""


class SubprocessFailure(PipelineError):
    """Raised when a child process exits non-zero or cannot be started."""

    def __init__(self, command: Sequence[str], returncode: int | None, detail: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        rendered = " ".join(self.command)
        if returncode is None:
            message = f"Failed to start `{rendered}`"
        else:
            message = f"`{rendered}` exited with code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CompileFailure(PipelineError):
    """Raised when the TypeScript compiler reports errors."""


class TestFailure(PipelineError):
    """Raised when the test runner reports failures or finds nothing to run."""

    __test__ = False
