from __future__ import annotations

import pytest

from trace_release_pipeline.steps import CompileStep, NamedStep, NpmPassthrough, parse_step


@pytest.mark.parametrize(
    "token, level, strict",
    [
        ("compile-es5", "es5", False),
        ("compile-es5-strict", "es5", True),
        ("compile-es2015-strict", "es2015", True),
        ("compile-es2015-", "es2015", False),
        ("compile-esnext-yes-ignored", "esnext", True),
        ("compile-", "", False),
    ],
)
def test_parse_compile_steps(token: str, level: str, strict: bool) -> None:
    step = parse_step(token)
    assert isinstance(step, CompileStep)
    assert step.language_level == level
    assert step.strict is strict
    assert step.config().to_dict() == {"strict": strict, "language_level": level}


@pytest.mark.parametrize(
    "token, script",
    [
        ("npm-lint", "lint"),
        ("npm-lint-fix", "lint-fix"),
        ("npm-a-b-c", "a-b-c"),
        ("npm-", ""),
    ],
)
def test_parse_npm_passthrough(token: str, script: str) -> None:
    step = parse_step(token)
    assert isinstance(step, NpmPassthrough)
    assert step.module_and_args[0] == "npm"
    assert step.script == script


@pytest.mark.parametrize("token", ["check-install", "run-unit-tests", "typo-step", "compile", "npm", ""])
def test_everything_else_is_named(token: str) -> None:
    step = parse_step(token)
    assert isinstance(step, NamedStep)
    assert step.name == token


def test_prefix_must_lead_token() -> None:
    assert isinstance(parse_step("run-npm-lint"), NamedStep)
    assert isinstance(parse_step("pre-compile-es5"), NamedStep)
