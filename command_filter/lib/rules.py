"""
Classifier rule table: which commands are verbose and how to summarize them.

Rules are evaluated top to bottom and the first match wins, so the table is an
ordered list rather than a mapping. Patterns are regular expressions applied
with re.search(); almost all are anchored with ``^`` which makes them prefix
rules. A compound command such as ``cd x && npm install`` therefore does not
match the npm rule.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class Category(StrEnum):
    """Tag selecting the summary extractor for a command's output."""

    DOCKER = "docker"
    NPM = "npm"
    NPM_SCRIPT = "npm_script"
    CARGO = "cargo"
    PIP = "pip"
    PYTEST = "pytest"
    JEST = "jest"
    MAKE = "make"
    GO = "go"
    KUBECTL = "kubectl"
    GIT = "git"
    BUNDLE = "bundle"
    TERRAFORM = "terraform"
    GRADLE = "gradle"
    GENERIC = "generic"
    NONE = "none"


class ClassifierRule(BaseModel):
    """A single (pattern, category) pair."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    category: Category

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid rule pattern {value!r}: {e}") from e
        return value

    @field_validator("category")
    @classmethod
    def _not_none(cls, value: Category) -> Category:
        if value == Category.NONE:
            raise ValueError("a rule cannot map to category 'none'")
        return value

    def matches(self, command: str) -> bool:
        return re.search(self.pattern, command) is not None


# =============================================================================
# DEFAULT RULES
# =============================================================================
# Order matters: "npm install" must be tested before the npm script rules and
# the unanchored "npm test" rule sits below every anchored npm rule.

DEFAULT_RULES: list[ClassifierRule] = [
    # Container builds
    ClassifierRule(pattern=r"^docker compose (build|up|pull|push|logs)", category=Category.DOCKER),
    ClassifierRule(pattern=r"^docker build", category=Category.DOCKER),
    # JS package managers
    ClassifierRule(pattern=r"^(npm|yarn|pnpm) (install|ci)($| )", category=Category.NPM),
    ClassifierRule(pattern=r"^(npm|yarn|pnpm) run (build|dev|start)", category=Category.NPM_SCRIPT),
    ClassifierRule(pattern=r"^(npm|yarn|pnpm) build", category=Category.NPM_SCRIPT),
    # Rust
    ClassifierRule(pattern=r"^cargo (build|run|test|clippy)", category=Category.CARGO),
    # Python installers
    ClassifierRule(pattern=r"^pip install", category=Category.PIP),
    ClassifierRule(pattern=r"^(poetry|pipenv) install", category=Category.PIP),
    # Test runners
    ClassifierRule(pattern=r"^pytest", category=Category.PYTEST),
    ClassifierRule(pattern=r"^python.*-m pytest", category=Category.PYTEST),
    ClassifierRule(pattern=r"^(jest|vitest|mocha|ava)($| )", category=Category.JEST),
    ClassifierRule(pattern=r"npm (run )?test", category=Category.JEST),
    # Native build tools
    ClassifierRule(pattern=r"^(make|cmake|ninja)($| )", category=Category.MAKE),
    ClassifierRule(pattern=r"^go (build|test|mod)", category=Category.GO),
    # Cluster inspection
    ClassifierRule(pattern=r"^kubectl (logs|describe)", category=Category.KUBECTL),
    # Version control
    ClassifierRule(pattern=r"^git (clone|pull|fetch)", category=Category.GIT),
    # Ruby
    ClassifierRule(pattern=r"^(bundle|gem) install", category=Category.BUNDLE),
    # Infrastructure
    ClassifierRule(pattern=r"^terraform (plan|apply|init)", category=Category.TERRAFORM),
    # JVM builds
    ClassifierRule(pattern=r"^gradle (build|assemble)", category=Category.GRADLE),
    ClassifierRule(pattern=r"^mvn (compile|package|install)", category=Category.GRADLE),
]
