"""Declarative field and step visibility."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from onboarding.core.exceptions import ConfigurationError
from onboarding.services.forms.conditions import Condition, evaluate_all

StepPredicate = Callable[[Mapping[str, Any]], bool]


@dataclass(frozen=True)
class VisibilityRule:
    """Show/hide conditions for one field.

    Attributes:
        field_id: Snapshot key of the governed field
        show_when: Conditions that must hold for the field to show
        hide_when: Conditions that hide the field; checked first and win
        require_all: AND-combine conditions when True, OR-combine otherwise
    """

    field_id: str
    show_when: Tuple[Condition, ...] = field(default_factory=tuple)
    hide_when: Tuple[Condition, ...] = field(default_factory=tuple)
    require_all: bool = True


class VisibilityRuleSet:
    """Per-field rule table plus per-step predicates of one document type."""

    def __init__(
        self,
        rules: Iterable[VisibilityRule] = (),
        step_predicates: Optional[Mapping[int, StepPredicate]] = None,
    ):
        self._rules: Dict[str, VisibilityRule] = {}
        for rule in rules:
            if rule.field_id in self._rules:
                raise ConfigurationError(f"Duplicate visibility rule for field {rule.field_id}")
            self._rules[rule.field_id] = rule
        self._step_predicates: Dict[int, StepPredicate] = dict(step_predicates or {})

    def rule_for(self, field_id: str) -> Optional[VisibilityRule]:
        return self._rules.get(field_id)

    @property
    def field_ids(self) -> List[str]:
        return list(self._rules)

    def is_visible(self, field_id: str, snapshot: Mapping[str, Any]) -> bool:
        """Whether ``field_id`` should be shown for the given snapshot.

        A field without a rule is always visible.
        """
        rule = self._rules.get(field_id)
        if rule is None:
            return True
        if rule.hide_when and evaluate_all(rule.hide_when, snapshot, rule.require_all):
            return False
        if rule.show_when and not evaluate_all(rule.show_when, snapshot, rule.require_all):
            return False
        return True

    def is_step_visible(self, step: int, snapshot: Mapping[str, Any]) -> bool:
        """Whether a whole step applies; steps without a predicate always do."""
        predicate = self._step_predicates.get(step)
        if predicate is None:
            return True
        return bool(predicate(snapshot))

    def visible_fields(self, field_ids: Iterable[str], snapshot: Mapping[str, Any]) -> List[str]:
        return [field_id for field_id in field_ids if self.is_visible(field_id, snapshot)]
