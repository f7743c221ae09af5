"""Declarative Validation Rules

Rules are immutable descriptions of what a validator enforces on one
property: a kind tag plus parameters. Nothing here executes validation; the
rule mapper reads rules to document them as schema constraints.

Features:
- Frozen dataclass rules
- Parameter shape checked at declaration time
- Optional condition (when/unless) carried with the rule
- Enum-typed membership rules resolved later through the schema store
"""
from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from schemarules.errors import SchemaRulesError, invalid_pattern, invalid_rule, not_an_enum

Condition = Callable[[Any], bool]

# Permissive on purpose: documents the shape, the validator does the real check.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class RuleKind(str, Enum):
    NOT_NULL = "not_null"
    NOT_EMPTY = "not_empty"
    LENGTH = "length"
    MINIMUM_LENGTH = "minimum_length"
    MAXIMUM_LENGTH = "maximum_length"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    INCLUSIVE_BETWEEN = "inclusive_between"
    EXCLUSIVE_BETWEEN = "exclusive_between"
    MATCHES = "matches"
    EMAIL_ADDRESS = "email_address"
    IS_IN_ENUM = "is_in_enum"
    CHILD_VALIDATOR = "child_validator"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class Rule:
    """One validation rule attached to a property."""
    kind: RuleKind | str
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    condition: Condition | None = None

    def __post_init__(self):
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None

    def with_condition(self, condition: Condition) -> Rule:
        return replace(self, condition=condition)

    @property
    def constraint_name(self) -> str:
        """Human-readable rule name for logs."""
        kind = self.kind.value if isinstance(self.kind, RuleKind) else str(self.kind)
        shown = {k: v for k, v in self.params.items() if k not in ("validator", "enum_type")}
        return f"{kind}[{', '.join(f'{k}={v}' for k, v in shown.items())}]" if shown else kind


RuleChain = tuple[Rule, ...]


# ============================================================================
# Parameter checks
# ============================================================================

def _length_param(kind: str, name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaRulesError(invalid_rule(kind, f"{name} must be an int, got {type(value).__name__}"))
    if value < 0:
        raise SchemaRulesError(invalid_rule(kind, f"{name} must be non-negative, got {value}"))
    return value


def _numeric_param(kind: str, name: str, value: Any) -> int | float | Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise SchemaRulesError(invalid_rule(kind, f"{name} must be a number, got {type(value).__name__}"))
    return value


# ============================================================================
# Presence
# ============================================================================

def not_null() -> Rule:
    return Rule(RuleKind.NOT_NULL)


def not_empty() -> Rule:
    return Rule(RuleKind.NOT_EMPTY)


# ============================================================================
# Length
# ============================================================================

def length(min_length: int, max_length: int) -> Rule:
    kind = RuleKind.LENGTH.value
    return Rule(RuleKind.LENGTH, {
        "min": _length_param(kind, "min_length", min_length),
        "max": _length_param(kind, "max_length", max_length),
    })


def minimum_length(min_length: int) -> Rule:
    return Rule(RuleKind.MINIMUM_LENGTH, {"min": _length_param(RuleKind.MINIMUM_LENGTH.value, "min_length", min_length)})


def maximum_length(max_length: int) -> Rule:
    return Rule(RuleKind.MAXIMUM_LENGTH, {"max": _length_param(RuleKind.MAXIMUM_LENGTH.value, "max_length", max_length)})


# ============================================================================
# Comparison
# ============================================================================
# Comparison operands are not checked: comparing against dates or other
# properties is legal, such rules simply have no schema rendering.

def greater_than(value: Any) -> Rule:
    return Rule(RuleKind.GREATER_THAN, {"value": value})


def greater_than_or_equal(value: Any) -> Rule:
    return Rule(RuleKind.GREATER_THAN_OR_EQUAL, {"value": value})


def less_than(value: Any) -> Rule:
    return Rule(RuleKind.LESS_THAN, {"value": value})


def less_than_or_equal(value: Any) -> Rule:
    return Rule(RuleKind.LESS_THAN_OR_EQUAL, {"value": value})


def inclusive_between(low: int | float | Decimal, high: int | float | Decimal) -> Rule:
    kind = RuleKind.INCLUSIVE_BETWEEN.value
    return Rule(RuleKind.INCLUSIVE_BETWEEN, {"from": _numeric_param(kind, "from", low), "to": _numeric_param(kind, "to", high)})


def exclusive_between(low: int | float | Decimal, high: int | float | Decimal) -> Rule:
    kind = RuleKind.EXCLUSIVE_BETWEEN.value
    return Rule(RuleKind.EXCLUSIVE_BETWEEN, {"from": _numeric_param(kind, "from", low), "to": _numeric_param(kind, "to", high)})


# ============================================================================
# Format
# ============================================================================

def matches(pattern: str) -> Rule:
    if not isinstance(pattern, str):
        raise SchemaRulesError(invalid_rule(RuleKind.MATCHES.value, f"pattern must be a string, got {type(pattern).__name__}"))
    try:
        re.compile(pattern)
    except re.error as e:
        raise SchemaRulesError(invalid_pattern(pattern, str(e))) from e
    return Rule(RuleKind.MATCHES, {"pattern": pattern})


def email_address() -> Rule:
    return Rule(RuleKind.EMAIL_ADDRESS, {"pattern": EMAIL_PATTERN})


def is_in_enum(values: type[Enum] | Iterable[Any]) -> Rule:
    """Membership rule over an Enum type or an explicit collection of scalars."""
    if isinstance(values, type):
        if not issubclass(values, Enum):
            raise SchemaRulesError(not_an_enum(values))
        return Rule(RuleKind.IS_IN_ENUM, {"enum_type": values})
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise SchemaRulesError(not_an_enum(values))
    if not (collected := tuple(v.value if isinstance(v, Enum) else v for v in values)):
        raise SchemaRulesError(not_an_enum(values))
    return Rule(RuleKind.IS_IN_ENUM, {"values": collected})


# ============================================================================
# Composition
# ============================================================================

def child_validator(validator: Any) -> Rule:
    return Rule(RuleKind.CHILD_VALIDATOR, {"validator": validator})


def custom(name: str, **params) -> Rule:
    """Rule of a caller-defined kind; documented only through a registered mapper handler."""
    if not name:
        raise SchemaRulesError(invalid_rule(RuleKind.CUSTOM.value, "custom rules need a name"))
    return Rule(name, params)
