"""Rule-to-Constraint Mapper

Turns one property's rule chain into a ConstraintSet and writes it onto the
property's schema node.

Features:
- Handler table keyed by rule kind, extensible with ``register``
- Rules evaluated independently, in chain order
- Most-restrictive merge for bounds, last-wins for pattern and enum
- Conditional rules and non-numeric comparison operands are skipped
- Writes to an unreachable property are discarded, never raised
"""
from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from schemarules.config import SchemaGenerationOptions
from schemarules.constraints import Bound, ConstraintSet
from schemarules.logging import mapper_logger
from schemarules.nodes import SchemaNode
from schemarules.rules import Rule, RuleChain, RuleKind

if TYPE_CHECKING:
    from schemarules.context import SchemaContext

log = mapper_logger()

# (rule, node, constraints, context) -> None
RuleHandler = Callable[[Rule, SchemaNode, ConstraintSet, "SchemaContext"], None]


# ============================================================================
# Handlers
# ============================================================================

def _not_null(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
    constraints.require()
    constraints.pin_not_nullable()


def _not_empty(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
    constraints.require()
    constraints.pin_not_nullable()
    if node.is_array:
        constraints.propose_min_items(1)
    elif node.is_string:
        constraints.propose_min_length(1)


def _length_bounds(node: SchemaNode, constraints: ConstraintSet, low: int | None, high: int | None) -> None:
    """Length rules count characters on strings and elements on arrays."""
    if node.is_array:
        if low is not None: constraints.propose_min_items(low)
        if high is not None: constraints.propose_max_items(high)
        return
    if low is not None: constraints.propose_min_length(low)
    if high is not None: constraints.propose_max_length(high)


def _length(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
    _length_bounds(node, constraints, rule.params.get("min"), rule.params.get("max"))


def _comparison(lower: bool, exclusive: bool) -> RuleHandler:
    def handler(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
        if (bound := Bound.of(rule.params.get("value"), exclusive)) is None:
            log.debug("rule_skipped", rule=rule.constraint_name, reason="non_numeric_operand")
            return
        if lower:
            constraints.propose_minimum(bound)
        else:
            constraints.propose_maximum(bound)
    return handler


def _between(exclusive: bool) -> RuleHandler:
    def handler(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
        low = Bound.of(rule.params.get("from"), exclusive)
        high = Bound.of(rule.params.get("to"), exclusive)
        if low is None or high is None:
            log.debug("rule_skipped", rule=rule.constraint_name, reason="non_numeric_operand")
            return
        constraints.propose_minimum(low)
        constraints.propose_maximum(high)
    return handler


def _pattern(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
    constraints.propose_pattern(rule.params["pattern"])


def _enum(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
    if (enum_type := rule.params.get("enum_type")) is None:
        constraints.propose_enum(tuple(rule.params["values"]))
        return
    # Allowed values come from the enum's own schema, materialized on demand
    schema = context.get_schema_for_type(enum_type)
    if not schema or not isinstance(values := schema.get("enum"), list):
        log.debug("rule_skipped", rule=rule.constraint_name, reason="enum_schema_unavailable",
                  enum=getattr(enum_type, "__name__", repr(enum_type)))
        return
    constraints.propose_enum(tuple(values))


def _child_validator(rule: Rule, node: SchemaNode, constraints: ConstraintSet, context: SchemaContext) -> None:
    """Nested validators are applied to the nested type's schema by SchemaFilter."""


DEFAULT_HANDLERS: dict[str, RuleHandler] = {
    RuleKind.NOT_NULL.value: _not_null,
    RuleKind.NOT_EMPTY.value: _not_empty,
    RuleKind.LENGTH.value: _length,
    RuleKind.MINIMUM_LENGTH.value: _length,
    RuleKind.MAXIMUM_LENGTH.value: _length,
    RuleKind.GREATER_THAN.value: _comparison(lower=True, exclusive=True),
    RuleKind.GREATER_THAN_OR_EQUAL.value: _comparison(lower=True, exclusive=False),
    RuleKind.LESS_THAN.value: _comparison(lower=False, exclusive=True),
    RuleKind.LESS_THAN_OR_EQUAL.value: _comparison(lower=False, exclusive=False),
    RuleKind.INCLUSIVE_BETWEEN.value: _between(exclusive=False),
    RuleKind.EXCLUSIVE_BETWEEN.value: _between(exclusive=True),
    RuleKind.MATCHES.value: _pattern,
    RuleKind.EMAIL_ADDRESS.value: _pattern,
    RuleKind.IS_IN_ENUM.value: _enum,
    RuleKind.CHILD_VALIDATOR.value: _child_validator,
}


def _kind_key(kind: RuleKind | str) -> str:
    return kind.value if isinstance(kind, RuleKind) else str(kind)


# ============================================================================
# Mapper
# ============================================================================

class RuleMapper:
    """Maps rule chains onto property schemas.

    Example:
        mapper = RuleMapper(options)
        mapper.apply(context, "name", validator.chain_for("name"))
    """

    __slots__ = ("options", "_handlers")

    def __init__(self, options: SchemaGenerationOptions | None = None):
        self.options = options or SchemaGenerationOptions()
        self._handlers: dict[str, RuleHandler] = dict(DEFAULT_HANDLERS)

    def register(self, kind: RuleKind | str, handler: RuleHandler) -> RuleMapper:
        """Add or replace the handler for a rule kind."""
        self._handlers[_kind_key(kind)] = handler
        return self

    def handles(self, kind: RuleKind | str) -> bool:
        return _kind_key(kind) in self._handlers

    def collect(self, context: SchemaContext, node: SchemaNode, chain: RuleChain) -> ConstraintSet:
        """Evaluate every applicable rule of a chain into one ConstraintSet."""
        constraints = ConstraintSet()
        for rule in chain:
            if rule.is_conditional and self.options.skip_conditional_rules:
                log.debug("rule_skipped", rule=rule.constraint_name, reason="conditional")
                continue
            if (handler := self._handlers.get(_kind_key(rule.kind))) is None:
                log.debug("rule_skipped", rule=rule.constraint_name, reason="unknown_kind")
                continue
            handler(rule, node, constraints, context)
        return constraints

    def apply(self, context: SchemaContext, key: str, chain: RuleChain) -> ConstraintSet:
        """Map a property's chain and write the result onto the context's schema.

        ``required`` goes to the owning schema even when the property node
        itself is unreachable.
        """
        node = context.get_property_node(key)
        constraints = self.collect(context, node, chain)
        constraints.apply(node, exclusive_bounds=self.options.exclusive_bounds)
        if constraints.required:
            context.mark_required(key)
        return constraints
