"""Sequential build and release step orchestration for the trace agent."""

from .config import BuildConfig, build_test_selection, load_config, unit_test_exclude_globs
from .dispatch import StepDispatcher
from .engine import Orchestrator, run_steps
from .errors import CompileFailure, ConfigError, PipelineError, SubprocessFailure, TestFailure
from .models import CompileConfig, EngineState, RunResult, StepResult, TestSelection
from .steps import CompileStep, NamedStep, NpmPassthrough, ParsedStep, parse_step

__all__ = [
    "BuildConfig",
    "build_test_selection",
    "load_config",
    "unit_test_exclude_globs",
    "StepDispatcher",
    "Orchestrator",
    "run_steps",
    "CompileFailure",
    "ConfigError",
    "PipelineError",
    "SubprocessFailure",
    "TestFailure",
    "CompileConfig",
    "EngineState",
    "RunResult",
    "StepResult",
    "TestSelection",
    "CompileStep",
    "NamedStep",
    "NpmPassthrough",
    "ParsedStep",
    "parse_step",
]
