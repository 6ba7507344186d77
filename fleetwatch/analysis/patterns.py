"""Ordered help-request rules for assistant utterances.

The rule table is data: each ``HelpRule`` pairs a case-insensitive regex
with the operator-facing label it produces. Rules are evaluated top to
bottom and the first match wins, so specific, actionable phrasings sit
above generic error/failure wording.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class HelpRule:
    """A single needs-help classification rule.

    Attributes:
        name: Stable rule identifier.
        pattern: Compiled case-insensitive pattern.
        message: Alert message emitted when the rule matches.
    """

    name: str
    pattern: re.Pattern[str]
    message: str

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(name: str, pattern: str, message: str) -> HelpRule:
    return HelpRule(name=name, pattern=re.compile(pattern, re.IGNORECASE), message=message)


HELP_RULES: tuple[HelpRule, ...] = (
    _rule("explicit_help", r"I need.*help", "Agent explicitly requested help"),
    _rule("stuck", r"I('m| am) stuck", "Agent reports being stuck"),
    _rule("cannot_proceed", r"cannot proceed", "Agent cannot proceed"),
    _rule("waiting_for_input", r"waiting for.*input", "Agent waiting for input"),
    _rule("confirmation", r"please.*confirm", "Agent needs confirmation"),
    _rule("uncertainty", r"I don'?t know how to", "Agent uncertain about approach"),
    _rule("error_occurred", r"error.*occurred", "Agent encountered an error"),
    _rule("task_failed", r"failed to", "Agent task failed"),
    _rule("unable_to_complete", r"unable to (access|find|complete)", "Agent unable to complete task"),
    _rule("permission_denied", r"permission denied", "Permission issue detected"),
)


def match_help_rule(
    text: str,
    rules: tuple[HelpRule, ...] = HELP_RULES,
) -> HelpRule | None:
    """Classify an utterance against the ordered rule table.

    Args:
        text: Assistant free text.
        rules: Rules in priority order.

    Returns:
        The first matching rule, or None.
    """
    if not text:
        return None
    for rule in rules:
        if rule.matches(text):
            return rule
    return None
