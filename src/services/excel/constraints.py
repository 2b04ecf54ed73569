"""
Declarative field constraints.

A closed set of constraint variants attached to field descriptors and
evaluated by a single generic function, so no entity needs bespoke
validation code.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Optional, Tuple

from src.core.exceptions import ConstraintViolation


def is_blank(raw: Any) -> bool:
    """A cell is blank when it holds nothing or only whitespace"""
    if raw is None:
        return True
    if isinstance(raw, str):
        return raw.strip() == ""
    return False


@dataclass(frozen=True)
class Required:
    pass


@dataclass(frozen=True)
class MaxLength:
    length: int


@dataclass(frozen=True)
class MinLength:
    length: int


@dataclass(frozen=True)
class Pattern:
    regex: str


@dataclass(frozen=True)
class ValueRange:
    minimum: Optional[Any] = None
    maximum: Optional[Any] = None


@dataclass(frozen=True)
class RequiredIf:
    """Required when the sibling ``field`` currently holds ``value``"""
    field: str
    value: Any


@dataclass(frozen=True)
class OneOf:
    values: Tuple[str, ...]


def _comparable_bound(bound: Any, value: Any) -> Any:
    """Align a date bound with a datetime value and the other way round"""
    if isinstance(value, datetime) and isinstance(bound, date) and not isinstance(bound, datetime):
        return datetime.combine(bound, time.min)
    if isinstance(value, date) and not isinstance(value, datetime) and isinstance(bound, datetime):
        return bound.date()
    return bound


def check_constraint(constraint: Any, value: Any, raw: Any, record: Any) -> Optional[str]:
    """
    Evaluate one constraint.

    Args:
        constraint: One of the constraint variants of this module
        value: Coerced cell value
        raw: Raw cell content, used by the required checks
        record: Partially built record (sibling values already assigned)

    Returns:
        An error message, or None when the constraint holds
    """
    if isinstance(constraint, Required):
        if is_blank(raw) or value is None:
            return "Value is required"
        return None

    if isinstance(constraint, RequiredIf):
        sibling = getattr(record, constraint.field, None)
        if sibling == constraint.value and (is_blank(raw) or value is None):
            return f"Value is required when {constraint.field} is {constraint.value!r}"
        return None

    # Remaining constraints only apply to a present value
    if value is None:
        return None

    if isinstance(constraint, MaxLength):
        if len(str(value)) > constraint.length:
            return f"Value must be at most {constraint.length} characters long"
    elif isinstance(constraint, MinLength):
        if len(str(value)) < constraint.length:
            return f"Value must be at least {constraint.length} characters long"
    elif isinstance(constraint, Pattern):
        if re.fullmatch(constraint.regex, str(value)) is None:
            return f"Value does not match pattern {constraint.regex}"
    elif isinstance(constraint, ValueRange):
        minimum = _comparable_bound(constraint.minimum, value)
        maximum = _comparable_bound(constraint.maximum, value)
        try:
            if minimum is not None and value < minimum:
                return f"Value must be greater than or equal to {constraint.minimum}"
            if maximum is not None and value > maximum:
                return f"Value must be less than or equal to {constraint.maximum}"
        except TypeError:
            return f"Value cannot be compared with range {constraint.minimum} - {constraint.maximum}"
    elif isinstance(constraint, OneOf):
        allowed = {option.upper() for option in constraint.values}
        if str(value).upper() not in allowed:
            return f"Value must be one of: {', '.join(constraint.values)}"
    else:
        raise TypeError(f"Unknown constraint: {constraint!r}")

    return None


def validate_value(field_name: str, constraints: Tuple[Any, ...], value: Any, raw: Any, record: Any) -> None:
    """
    Check every constraint of a field, stopping at the first failure.

    Raises:
        ConstraintViolation: If a constraint does not hold
    """
    for constraint in constraints:
        message = check_constraint(constraint, value, raw, record)
        if message is not None:
            raise ConstraintViolation(message, field_name=field_name, value=raw)
