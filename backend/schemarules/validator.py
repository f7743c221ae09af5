"""Validator Declarations

A Validator groups the rules declared for one model type, property by
property, in a fluent style:

    class CustomerValidator(Validator[Customer]):
        def __init__(self):
            super().__init__()
            self.rule_for("name").not_empty().maximum_length(100)
            self.rule_for("age").greater_than(0)
            self.rule_for("nickname").maximum_length(20).when(lambda c: c.is_vip)

``rule_chains()`` is the only thing the schema engine reads.
"""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_origin

from schemarules import rules
from schemarules.errors import SchemaRulesError, model_type_unresolved
from schemarules.rules import Condition, Rule, RuleChain

T = TypeVar("T")


class RuleBuilder:
    """Fluent rule declaration for one property."""

    __slots__ = ("property_name", "_rules")

    def __init__(self, property_name: str):
        self.property_name = property_name
        self._rules: list[Rule] = []

    @property
    def rules(self) -> RuleChain:
        return tuple(self._rules)

    def add(self, rule: Rule) -> RuleBuilder:
        self._rules.append(rule)
        return self

    def not_null(self) -> RuleBuilder: return self.add(rules.not_null())

    def not_empty(self) -> RuleBuilder: return self.add(rules.not_empty())

    def length(self, min_length: int, max_length: int) -> RuleBuilder: return self.add(rules.length(min_length, max_length))

    def minimum_length(self, min_length: int) -> RuleBuilder: return self.add(rules.minimum_length(min_length))

    def maximum_length(self, max_length: int) -> RuleBuilder: return self.add(rules.maximum_length(max_length))

    def greater_than(self, value: Any) -> RuleBuilder: return self.add(rules.greater_than(value))

    def greater_than_or_equal(self, value: Any) -> RuleBuilder: return self.add(rules.greater_than_or_equal(value))

    def less_than(self, value: Any) -> RuleBuilder: return self.add(rules.less_than(value))

    def less_than_or_equal(self, value: Any) -> RuleBuilder: return self.add(rules.less_than_or_equal(value))

    def inclusive_between(self, low: int | float | Decimal, high: int | float | Decimal) -> RuleBuilder:
        return self.add(rules.inclusive_between(low, high))

    def exclusive_between(self, low: int | float | Decimal, high: int | float | Decimal) -> RuleBuilder:
        return self.add(rules.exclusive_between(low, high))

    def matches(self, pattern: str) -> RuleBuilder: return self.add(rules.matches(pattern))

    def email_address(self) -> RuleBuilder: return self.add(rules.email_address())

    def is_in_enum(self, values: type[Enum] | Iterable[Any]) -> RuleBuilder: return self.add(rules.is_in_enum(values))

    def set_validator(self, validator: Validator) -> RuleBuilder: return self.add(rules.child_validator(validator))

    def custom(self, name: str, **params) -> RuleBuilder: return self.add(rules.custom(name, **params))

    def when(self, condition: Condition) -> RuleBuilder:
        """Guard every rule declared so far on this property."""
        self._rules = [r.with_condition(condition) for r in self._rules]
        return self

    def unless(self, condition: Condition) -> RuleBuilder:
        return self.when(lambda instance: not condition(instance))


class Validator(Generic[T]):
    """Base class for model validators.

    The validated type comes from the generic argument
    (``Validator[Customer]``) or an explicit ``model_type`` class attribute.
    """

    model_type: ClassVar[type | None] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get("model_type") is not None:
            return
        for base in getattr(cls, "__orig_bases__", ()):
            if get_origin(base) is Validator and (args := get_args(base)) and isinstance(args[0], type):
                cls.model_type = args[0]
                return

    def __init__(self):
        if self.model_type is None:
            raise SchemaRulesError(model_type_unresolved(type(self)))
        self._builders: list[RuleBuilder] = []
        self._included: list[Validator] = []

    def rule_for(self, property_name: str) -> RuleBuilder:
        builder = RuleBuilder(property_name)
        self._builders.append(builder)
        return builder

    def include(self, other: Validator) -> None:
        """Pull in every rule of another validator for the same model."""
        self._included.append(other)

    def rule_chains(self) -> list[tuple[str, RuleChain]]:
        """Rule chains per property, in declaration order; included validators follow."""
        chains: dict[str, list[Rule]] = {}
        for builder in self._builders:
            chains.setdefault(builder.property_name, []).extend(builder.rules)
        for other in self._included:
            for name, chain in other.rule_chains():
                chains.setdefault(name, []).extend(chain)
        return [(name, tuple(chain)) for name, chain in chains.items()]

    def chain_for(self, property_name: str) -> RuleChain:
        return next((chain for name, chain in self.rule_chains() if name == property_name), ())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({getattr(self.model_type, '__name__', self.model_type)})"
