from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class CompileConfig:
    strict: bool
    language_level: str

    def to_dict(self) -> Dict[str, object]:
        return {"strict": self.strict, "language_level": self.language_level}


@dataclass(frozen=True, slots=True)
class TestSelection:
    __test__ = False

    include_globs: Tuple[str, ...]
    exclude_globs: Tuple[str, ...]
    root_dir: str
    coverage: bool
    timeout: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "include_globs": list(self.include_globs),
            "exclude_globs": list(self.exclude_globs),
            "root_dir": self.root_dir,
            "coverage": self.coverage,
            "timeout": self.timeout,
        }


class EngineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class StepResult:
    step: str
    status: str = "ok"
    reason: Optional[str] = None
    error: Optional[BaseException] = None
    data: Dict[str, object] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"step": self.step, "status": self.status}
        if self.reason:
            payload["reason"] = self.reason
        if self.error is not None:
            payload["error"] = str(self.error)
            payload["error_type"] = type(self.error).__name__
        if self.data:
            payload["data"] = self.data
        return payload


@dataclass(slots=True)
class RunResult:
    state: EngineState
    attempted: List[str] = field(default_factory=list)
    results: List[StepResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is EngineState.SUCCEEDED

    @property
    def failure(self) -> Optional[StepResult]:
        for result in self.results:
            if result.failed:
                return result
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "attempted": list(self.attempted),
            "results": [result.to_dict() for result in self.results],
        }
