# safety.py
"""
Declarative advisory rules.

Every warning / recommendation / monitoring text the calculators produce is
an ordered table of (predicate, message) pairs evaluated against a parsed
case. Tables are module-level tuples, so the full rule set of a calculator
can be listed and tested without running a calculation.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Sequence, Union

Message = Union[str, Sequence[str], Callable[[Any], Union[str, Sequence[str]]]]


def ALWAYS(case) -> bool:
    return True


@dataclass(frozen=True)
class AdvisoryRule:
    """
    One advisory fragment. `message` is a line, a block of lines, or a
    callable that builds either from the case (for fragments quoting values).
    """
    applies: Callable[[Any], bool]
    message: Message

    def render(self, case) -> List[str]:
        message = self.message(case) if callable(self.message) else self.message
        if isinstance(message, str):
            return [message]
        return list(message)


def rule(applies: Callable[[Any], bool], *lines: str) -> AdvisoryRule:
    """Shorthand: rule(pred, "line 1", "line 2")."""
    return AdvisoryRule(applies, lines[0] if len(lines) == 1 else tuple(lines))


def one_of(*rules: AdvisoryRule) -> AdvisoryRule:
    """Groups rules so that only the first applicable one contributes."""
    return AdvisoryRule(
        applies=lambda case: any(r.applies(case) for r in rules),
        message=lambda case: first_match(rules, case),
    )


def compose(rules: Iterable[AdvisoryRule], case) -> List[str]:
    """All matching fragments, in table order."""
    lines: List[str] = []
    for advisory in rules:
        if advisory.applies(case):
            lines.extend(advisory.render(case))
    return lines


def first_match(rules: Iterable[AdvisoryRule], case) -> List[str]:
    """Only the first matching fragment (an if/elif chain as data)."""
    for advisory in rules:
        if advisory.applies(case):
            return advisory.render(case)
    return []


def first_message(rules: Iterable[AdvisoryRule], case, default: str = "") -> str:
    lines = first_match(rules, case)
    return "\n".join(lines) if lines else default


def join_lines(lines: Sequence[str]) -> str:
    return "\n".join(lines)


def bulleted(lines: Sequence[str], bullet: str = "• ") -> str:
    """['a', 'b'] -> '• a\\n• b'."""
    return bullet + ("\n" + bullet).join(lines)
