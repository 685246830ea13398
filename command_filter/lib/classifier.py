"""Command classification - decides whether a command is verbose."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from command_filter.lib.rules import DEFAULT_RULES, Category, ClassifierRule

logger = logging.getLogger(__name__)


def build_rules(
    extra_rules: Sequence[ClassifierRule] = (),
    disabled_categories: Iterable[Category] = (),
) -> list[ClassifierRule]:
    """Assemble the effective rule list.

    User rules come first so they can claim a command before a default rule
    does. Rules whose category is disabled are dropped entirely.

    Args:
        extra_rules: Additional rules, evaluated ahead of DEFAULT_RULES
        disabled_categories: Categories that should never intercept

    Returns:
        Ordered list of rules
    """
    disabled = set(disabled_categories)
    return [r for r in [*extra_rules, *DEFAULT_RULES] if r.category not in disabled]


def classify(command: str, rules: Sequence[ClassifierRule] | None = None) -> Category:
    """
    Map a raw command line to a Category.

    The first matching rule wins. The command is matched as-is: compound
    commands are classified by their literal prefix only.

    Args:
        command: Shell command line about to be executed
        rules: Ordered rules to evaluate (defaults to DEFAULT_RULES)

    Returns:
        Matching category, or Category.NONE for pass-through
    """
    if not command:
        return Category.NONE

    for rule in DEFAULT_RULES if rules is None else rules:
        if rule.matches(command):
            logger.debug(f"Command matched {rule.pattern!r} -> {rule.category}")
            return rule.category

    return Category.NONE
