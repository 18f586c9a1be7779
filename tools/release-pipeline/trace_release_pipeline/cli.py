"""Cross-platform build script entry point.

Usage (in repository root directory)::

    trace-build [step1] [step2 ... stepN]

Steps run in the order given. ``npm-<script>`` forwards to ``npm run`` and
``compile-<level>[-strict]`` runs the TypeScript compiler.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from trace_release.secrets import use_dotenv

from .collaborators import ShellCollaborators
from .config import load_config
from .dispatch import StepDispatcher
from .engine import Orchestrator
from .errors import ConfigError


def _load_local_env(workspace_root: Path) -> None:
    """Best-effort load of repo-local .env for convenience."""

    env_file = workspace_root / ".env"
    use_dotenv(env_file)
    if env_file.exists():
        load_dotenv(env_file)


def _configure_logging(verbose: bool, *, to_stderr: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr if to_stderr else sys.stdout,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trace-build", description="Run build and release steps in order")
    parser.add_argument("steps", nargs="*", help="Steps to run, in order")
    parser.add_argument("--workspace-root", default=".")
    parser.add_argument("--config", help="YAML file overriding build settings")
    parser.add_argument("--json", action="store_true", help="Print a JSON run summary")
    parser.add_argument("--list-steps", action="store_true", help="List known steps and exit")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, to_stderr=args.json)

    workspace_root = Path(args.workspace_root).resolve()
    _load_local_env(workspace_root)

    try:
        config = load_config(workspace_root, config_file=args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    # Keep stdout parseable as JSON; key material goes to stderr instead.
    dispatcher = StepDispatcher(config, ShellCollaborators(config), stdout=sys.stderr if args.json else None)

    if args.list_steps:
        listing = {"named": dispatcher.named_steps(), "patterns": ["npm-<script>", "compile-<level>[-strict]"]}
        print(json.dumps(listing, indent=2))
        return 0

    result = Orchestrator(dispatcher).run(args.steps)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))

    failure = result.failure
    if failure is not None:
        print(f"{failure.step}: {failure.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
