from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence

from .errors import SubprocessFailure

logger = logging.getLogger(__name__)


class Invoker(Protocol):
    def __call__(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: Path,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:  # pragma: no cover - interface
        ...


def run_command(
    command: str,
    args: Sequence[str] = (),
    *,
    cwd: Path,
    env: Optional[Dict[str, str]] = None,
    capture_output: bool = False,
) -> subprocess.CompletedProcess:
    """Run ``command`` with ``args`` to completion, raising ``SubprocessFailure`` unless it exits 0."""

    argv = [command, *[str(arg) for arg in args]]
    merged_env = os.environ.copy()
    if env:
        merged_env.update(env)

    logger.debug("$ %s (cwd=%s)", " ".join(argv), cwd)
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd),
            env=merged_env,
            capture_output=capture_output,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise SubprocessFailure(argv, None, str(exc)) from exc

    if result.returncode != 0:
        detail = ""
        if capture_output:
            detail = (result.stderr or "").strip() or (result.stdout or "").strip()
        raise SubprocessFailure(argv, result.returncode, detail)
    return result
