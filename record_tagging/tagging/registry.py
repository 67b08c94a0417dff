"""
Rule registry
Immutable, priority-ordered collection of tagging rules
"""
from typing import Iterable, Iterator, List, Optional, Tuple
import logging

from .models import RuleInfo
from .rules import BaseRule, default_rules

logger = logging.getLogger(__name__)


class RuleRegistry:
    """
    Rules sorted by ascending priority.

    Ties keep registration order (``sorted`` is stable). The registry is
    built once and never changes, so it can be shared between concurrent
    evaluations.
    """

    def __init__(self, rules: Iterable[BaseRule]):
        ordered = sorted(rules, key=lambda rule: rule.priority)
        names = [rule.name for rule in ordered]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"Duplicate rule names: {', '.join(sorted(duplicates))}")

        self._rules: Tuple[BaseRule, ...] = tuple(ordered)

    @classmethod
    def default(cls, organization_domain: Optional[str] = None) -> "RuleRegistry":
        return cls(default_rules(organization_domain))

    def __iter__(self) -> Iterator[BaseRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> Tuple[BaseRule, ...]:
        return self._rules

    @property
    def names(self) -> List[str]:
        return [rule.name for rule in self._rules]

    def get(self, name: str) -> Optional[BaseRule]:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def enabled(self) -> List[BaseRule]:
        return [rule for rule in self._rules if rule.enabled]

    def describe(self) -> List[RuleInfo]:
        return [rule.info() for rule in self._rules]
