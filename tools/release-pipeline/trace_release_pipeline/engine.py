"""Run build steps one after another, stopping at the first failure."""

from __future__ import annotations

import logging
from typing import Iterable

from .dispatch import StepDispatcher
from .models import EngineState, RunResult
from .steps import parse_step

logger = logging.getLogger(__name__)


class Orchestrator:
    def __init__(self, dispatcher: StepDispatcher) -> None:
        self.dispatcher = dispatcher
        self.state = EngineState.IDLE

    def run(self, steps: Iterable[str]) -> RunResult:
        result = RunResult(state=EngineState.RUNNING)
        self.state = EngineState.RUNNING
        for token in steps:
            logger.info("> Running step: %s", token)
            result.attempted.append(token)
            try:
                outcome = self.dispatcher.dispatch(parse_step(token))
            except Exception:
                self.state = result.state = EngineState.FAILED
                raise
            result.results.append(outcome)
            if outcome.failed:
                self.state = result.state = EngineState.FAILED
                return result

        self.state = result.state = EngineState.SUCCEEDED
        return result


def run_steps(steps: Iterable[str], dispatcher: StepDispatcher) -> RunResult:
    return Orchestrator(dispatcher).run(steps)
