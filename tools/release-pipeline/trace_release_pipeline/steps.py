"""Classify raw step tokens from the command line.

Three forms are recognised:

* ``npm-<script>``: forwarded to ``npm run <script>``; everything after the
  first ``npm-`` is rejoined with hyphens, so ``npm-lint-fix`` runs ``lint-fix``.
* ``compile-<level>[-<strict>]``: compiles at ``level``; any non-empty third
  segment turns strict mode on.
* anything else: a named step looked up verbatim by the dispatcher.

Parsing never fails. Unknown names are the dispatcher's concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .models import CompileConfig

NPM_PREFIX = "npm-"
COMPILE_PREFIX = "compile-"
DELIMITER = "-"


@dataclass(frozen=True, slots=True)
class NpmPassthrough:
    token: str
    module_and_args: Tuple[str, ...]

    @property
    def script(self) -> str:
        return DELIMITER.join(self.module_and_args[1:])


@dataclass(frozen=True, slots=True)
class CompileStep:
    token: str
    language_level: str
    strict: bool

    def config(self) -> CompileConfig:
        return CompileConfig(strict=self.strict, language_level=self.language_level)


@dataclass(frozen=True, slots=True)
class NamedStep:
    token: str

    @property
    def name(self) -> str:
        return self.token


ParsedStep = Union[NpmPassthrough, CompileStep, NamedStep]


def parse_step(token: str) -> ParsedStep:
    if token.startswith(NPM_PREFIX):
        return NpmPassthrough(token=token, module_and_args=tuple(token.split(DELIMITER)))
    if token.startswith(COMPILE_PREFIX):
        segments = token.split(DELIMITER)
        language_level = segments[1]
        strict = len(segments) > 2 and bool(segments[2])
        return CompileStep(token=token, language_level=language_level, strict=strict)
    return NamedStep(token=token)
