"""Cross-field requirement rules.

Requirements never decide on their own whether a field applies: they ask
the visibility rule set. A field the rule set hides is never required, so
the presentation layer and the validator cannot disagree.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, List, Mapping, Sequence, Tuple

from onboarding.services.forms.visibility import VisibilityRuleSet


def is_missing(value: Any) -> bool:
    """Blank strings, empty collections and None count as not provided."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class RequirementContext:
    """What a requirement may look at when it is checked.

    Attributes:
        snapshot: Flattened form values of the document
        rules: Visibility rules of the document type
        completed_steps: Steps marked completed on the document
    """

    snapshot: Mapping[str, Any]
    rules: VisibilityRuleSet
    completed_steps: FrozenSet[int] = frozenset()

    def field_visible(self, field_id: str) -> bool:
        return self.rules.is_visible(field_id, self.snapshot)

    def step_visible(self, step: int) -> bool:
        return self.rules.is_step_visible(step, self.snapshot)


class Requirement(ABC):
    """A rule that yields human-readable violations for one step."""

    step: int

    def applies(self, context: RequirementContext) -> bool:
        return context.step_visible(self.step)

    def violations(self, context: RequirementContext) -> List[str]:
        if not self.applies(context):
            return []
        return [f"Step {self.step}: {message}" for message in self.check(context)]

    @abstractmethod
    def check(self, context: RequirementContext) -> List[str]:
        """Violation messages without the step prefix."""


@dataclass(frozen=True)
class RequiredField(Requirement):
    """One or more fields that must be filled while they are visible.

    Fields sharing a message are reported once, e.g.
    "RR Name and Customer Names are required".

    Attributes:
        step: Step the fields belong to
        fields: Snapshot keys of the required fields
        message: Violation reported when any visible field is missing
        only_if_saved: Only enforce once the step has been saved
    """

    step: int
    fields: Tuple[str, ...]
    message: str
    only_if_saved: bool = False

    def check(self, context: RequirementContext) -> List[str]:
        if self.only_if_saved and self.step not in context.completed_steps:
            return []
        missing = [
            field_id for field_id in self.fields
            if context.field_visible(field_id) and is_missing(context.snapshot.get(field_id))
        ]
        return [self.message] if missing else []


@dataclass(frozen=True)
class SignatureSet(Requirement):
    """Signature, printed name and date of one signer, all or nothing.

    The set follows the visibility of its signature field. An incomplete set
    is one violation, not one per missing part. With ``required`` an empty
    set is a violation too.
    """

    step: int
    label: str
    signature_field: str
    printed_name_field: str
    date_field: str
    required: bool = False

    @property
    def parts(self) -> Tuple[str, str, str]:
        return (self.signature_field, self.printed_name_field, self.date_field)

    def check(self, context: RequirementContext) -> List[str]:
        if not context.field_visible(self.signature_field):
            return []
        present = [not is_missing(context.snapshot.get(part)) for part in self.parts]
        if all(present):
            return []
        if not any(present):
            return [f"{self.label} signature is required"] if self.required else []
        return [f"{self.label} signature, printed name and date must be provided together"]


@dataclass(frozen=True)
class StepCompleted(Requirement):
    """A step that must have been saved at least once.

    Used for steps whose data lives in a sub-record, where an unsaved step
    means the record does not exist at all.
    """

    step: int
    message: str

    def check(self, context: RequirementContext) -> List[str]:
        return [] if self.step in context.completed_steps else [self.message]


@dataclass(frozen=True)
class CollectionRule(Requirement):
    """Predicate over the rows of a child collection."""

    step: int
    collection: str
    predicate: Callable[[Sequence[Mapping[str, Any]]], bool] = field(compare=False)
    message: str = ""

    def check(self, context: RequirementContext) -> List[str]:
        rows = context.snapshot.get(self.collection) or []
        return [] if self.predicate(rows) else [self.message]


def collect_violations(
    requirements: Sequence[Requirement], context: RequirementContext
) -> List[str]:
    """Every violation of every requirement, in declaration order."""
    violations: List[str] = []
    for requirement in requirements:
        violations.extend(requirement.violations(context))
    return violations
