"""Atomic visibility conditions and their evaluator.

A condition compares one field of a form snapshot against a value. The
evaluator is a pure function of the snapshot: anything it does not
understand evaluates to False, so a malformed rule hides a field rather
than showing it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Mapping, Union

from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    INCLUDES = "includes"
    NOT_INCLUDES = "notIncludes"
    CHECKED = "checked"
    NOT_CHECKED = "notChecked"
    ANY_CHECKED = "anyChecked"
    NONE_CHECKED = "noneChecked"


@dataclass(frozen=True)
class Condition:
    """``field OPERATOR value`` over a form snapshot.

    Attributes:
        field: Snapshot key the condition reads
        operator: Operator name, an ``Operator`` or its string value
        value: Scalar or list operand; unused by the checkbox operators
    """

    field: str
    operator: Union[Operator, str]
    value: Any = None


def _strict_equals(left: Any, right: Any) -> bool:
    # True == 1 in Python; form values never compare equal across types
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def _contains(items: list, value: Any) -> bool:
    return any(_strict_equals(item, value) for item in items)


def _includes(field_value: Any, value: Any) -> bool:
    if not isinstance(field_value, list):
        return False
    if isinstance(value, list):
        return any(_contains(field_value, candidate) for candidate in value)
    return _contains(field_value, value)


def _checked(field_value: Any, value: Any) -> bool:
    return field_value is True or field_value == "Yes"


def _not_checked(field_value: Any, value: Any) -> bool:
    return not field_value or field_value == "No"


def _any_checked(field_value: Any, value: Any) -> bool:
    if not isinstance(field_value, list):
        return False
    if isinstance(value, list):
        return any(_contains(field_value, candidate) for candidate in value)
    return len(field_value) > 0


def _none_checked(field_value: Any, value: Any) -> bool:
    if isinstance(field_value, list):
        return len(field_value) == 0
    return not field_value


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    Operator.EQUALS.value: _strict_equals,
    Operator.NOT_EQUALS.value: lambda field_value, value: not _strict_equals(field_value, value),
    Operator.INCLUDES.value: _includes,
    Operator.NOT_INCLUDES.value: lambda field_value, value: not _includes(field_value, value),
    Operator.CHECKED.value: _checked,
    Operator.NOT_CHECKED.value: _not_checked,
    Operator.ANY_CHECKED.value: _any_checked,
    Operator.NONE_CHECKED.value: _none_checked,
}


def evaluate(condition: Condition, snapshot: Mapping[str, Any]) -> bool:
    """Evaluate a single condition against a snapshot of form values.

    Args:
        condition: Condition to evaluate
        snapshot: Field name to current value; missing fields read as None

    Returns:
        Whether the condition holds. Unknown operators return False.
    """
    operator = condition.operator
    key = operator.value if isinstance(operator, Operator) else operator
    handler = _OPERATORS.get(key)
    if handler is None:
        LOGGER.warning(
            "Unknown condition operator",
            extra={"operator": str(operator), "field": condition.field},
        )
        return False
    return handler(snapshot.get(condition.field), condition.value)


def evaluate_all(
    conditions: Iterable[Condition],
    snapshot: Mapping[str, Any],
    require_all: bool = True,
) -> bool:
    """Combine conditions with AND (``require_all``) or OR.

    An empty condition list is satisfied.
    """
    conditions = list(conditions)
    if not conditions:
        return True
    results = (evaluate(condition, snapshot) for condition in conditions)
    return all(results) if require_all else any(results)
