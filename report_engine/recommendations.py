from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

from .formatting import format_currency

MoneyFormatter = Callable[[Any], str]


@dataclass(frozen=True)
class Recommendation:
    title: str
    text: str
    # Same text with ungrouped money, set only when it differs from ``text``
    delimited_text: str | None = None

    def __str__(self) -> str:
        return f"{self.title}: {self.text}"

    def as_delimited(self) -> str:
        return f"{self.title}: {self.delimited_text or self.text}"


@dataclass(frozen=True)
class Rule:
    """
    One threshold check. ``when`` decides whether the rule fires for a set of
    insights. ``title`` is a plain string; ``text`` is either a plain string or
    a callable taking the insights and a money formatter, so the same message
    can be rendered with grouped amounts for documents and ungrouped ones for
    delimited files.
    """

    title: str
    text: str | Callable[[Any, MoneyFormatter], str]
    when: Callable[[Any], bool] = lambda insights: True

    def render(self, insights) -> Recommendation:
        if not callable(self.text):
            return Recommendation(self.title, self.text)
        text = self.text(insights, format_currency)
        delimited = self.text(insights, partial(format_currency, grouping=False))
        return Recommendation(self.title, text, delimited if delimited != text else None)


def assemble(rules: Sequence[Rule], insights) -> list[Recommendation]:
    """Evaluates every rule in order; each one that fires adds exactly one entry."""
    return [rule.render(insights) for rule in rules if rule.when(insights)]
