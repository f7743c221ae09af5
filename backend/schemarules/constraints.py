"""Constraint Sets and Merge Policy

A ConstraintSet collects the schema-level facts proposed by one property's
rule chain, then applies them onto a SchemaNode.

Merge policy:
- Lower bounds (minLength, minItems, minimum) keep the larger value
- Upper bounds (maxLength, maxItems, maximum) keep the smaller value
- On equal numeric bounds the exclusive one wins
- required and non-nullable are sticky once set
- pattern and enum values: last proposal wins

Bound merges are commutative; pattern/enum merges depend on rule order.
The policy checks dominance only: minLength > maxLength is kept as declared.

Numeric values are Decimals. Floats are converted through their shortest
round-trip repr, so a bound declared as 5.1 merges exactly against another 5.1.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from schemarules.nodes import SchemaNode


def as_decimal(value: Any) -> Decimal | None:
    """Convert a numeric rule operand to Decimal without binary-float drift.

    Returns None for anything that is not a number (bools included).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        try:
            result = Decimal(repr(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


def to_json_number(value: Decimal) -> int | float:
    """Render a Decimal as a JSON-serializable number."""
    return int(value) if value == value.to_integral_value() else float(value)


@dataclass(frozen=True, slots=True)
class Bound:
    """A numeric bound with its exclusivity."""
    value: Decimal
    exclusive: bool = False

    @classmethod
    def of(cls, value: Any, exclusive: bool = False) -> Bound | None:
        return None if (number := as_decimal(value)) is None else cls(number, exclusive)


def tighter_lower(current: Bound | None, proposed: Bound | None) -> Bound | None:
    """Most restrictive lower bound: the higher floor."""
    if current is None or proposed is None: return proposed or current
    if current.value != proposed.value:
        return current if current.value > proposed.value else proposed
    return Bound(current.value, current.exclusive or proposed.exclusive)


def tighter_upper(current: Bound | None, proposed: Bound | None) -> Bound | None:
    """Most restrictive upper bound: the lower ceiling."""
    if current is None or proposed is None: return proposed or current
    if current.value != proposed.value:
        return current if current.value < proposed.value else proposed
    return Bound(current.value, current.exclusive or proposed.exclusive)


def new_min(current: int | None, proposed: int | None) -> int | None:
    if current is None or proposed is None: return current if proposed is None else proposed
    return max(current, proposed)


def new_max(current: int | None, proposed: int | None) -> int | None:
    if current is None or proposed is None: return current if proposed is None else proposed
    return min(current, proposed)


@dataclass(slots=True)
class ConstraintSet:
    """Mutable bag of constraints for one property.

    ``nullable`` is None until a rule pins it; rules only ever pin it to False.
    """
    required: bool = False
    nullable: bool | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    minimum: Bound | None = None
    maximum: Bound | None = None
    pattern: str | None = None
    enum_values: tuple[Any, ...] | None = None

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def require(self) -> None:
        self.required = True

    def pin_not_nullable(self) -> None:
        self.nullable = False

    def propose_min_length(self, value: int) -> None:
        self.min_length = new_min(self.min_length, value)

    def propose_max_length(self, value: int) -> None:
        self.max_length = new_max(self.max_length, value)

    def propose_min_items(self, value: int) -> None:
        self.min_items = new_min(self.min_items, value)

    def propose_max_items(self, value: int) -> None:
        self.max_items = new_max(self.max_items, value)

    def propose_minimum(self, bound: Bound) -> None:
        self.minimum = tighter_lower(self.minimum, bound)

    def propose_maximum(self, bound: Bound) -> None:
        self.maximum = tighter_upper(self.maximum, bound)

    def propose_pattern(self, pattern: str) -> None:
        self.pattern = pattern

    def propose_enum(self, values: tuple[Any, ...]) -> None:
        self.enum_values = values

    @property
    def is_empty(self) -> bool:
        return self == ConstraintSet()

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(self, node: SchemaNode, *, exclusive_bounds: Literal["boolean", "numeric"] = "boolean") -> None:
        """Write the constraints onto a node, merging with values already there.

        ``required`` is not written here: it lives on the owning schema.
        Empty nodes swallow every write.
        """
        if node.is_empty:
            return
        if self.nullable is False:
            node.pin_not_nullable()

        for key, value, merge in (
            ("minLength", self.min_length, new_min),
            ("maxLength", self.max_length, new_max),
            ("minItems", self.min_items, new_min),
            ("maxItems", self.max_items, new_max),
        ):
            if value is not None:
                node.set(key, merge(node.get_int(key), value))

        if self.minimum is not None:
            node.set_bound("lower", tighter_lower(node.get_bound("lower"), self.minimum), style=exclusive_bounds)
        if self.maximum is not None:
            node.set_bound("upper", tighter_upper(node.get_bound("upper"), self.maximum), style=exclusive_bounds)
        if self.pattern is not None:
            node.set("pattern", self.pattern)
        if self.enum_values is not None:
            node.set("enum", list(self.enum_values))
