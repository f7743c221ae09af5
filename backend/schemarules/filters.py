"""Schema Augmentation Hooks

The two points at which a host hands its generated schemas to the rule
engine.

- SchemaFilter: per-type hook, called once for each generated type schema.
  Maps every property's rule chain and recurses into child validators.
- OperationFilter: per-operation hook, called once per API operation with
  its emitted parameters and fragments. Documents the rules of parameters
  that the host expanded out of a grouping model, inside a
  MaterializationSpan so the grouping model's schema does not leak.

Both are host-neutral: OperationDescription/ParameterDescription carry what
a host knows about an operation, and a SchemaProvider carries its schema
model.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from schemarules.config import SchemaGenerationOptions
from schemarules.context import ParameterSchemaContext, SchemaContext, SchemaProvider
from schemarules.logging import mapper_logger
from schemarules.mapper import RuleMapper
from schemarules.materialization import MaterializationSpan
from schemarules.registry import ValidatorRegistry
from schemarules.rules import Rule, RuleChain, RuleKind
from schemarules.validator import Validator

log = mapper_logger()


def merged_chains(validators: Iterable[Validator]) -> dict[str, RuleChain]:
    """Rule chains per property across validators, concatenated in validator order."""
    chains: dict[str, list[Rule]] = {}
    for validator in validators:
        for name, chain in validator.rule_chains():
            chains.setdefault(name, []).extend(chain)
    return {name: tuple(chain) for name, chain in chains.items()}


def _field_alias(schema_type: Any, name: str) -> str | None:
    if isinstance(schema_type, type) and issubclass(schema_type, BaseModel):
        if (info := schema_type.model_fields.get(name)) is not None:
            return info.alias
    return None


# ============================================================================
# Per-type hook
# ============================================================================

class SchemaFilter:
    """Applies registered validators to one type's schema."""

    def __init__(
        self,
        registry: ValidatorRegistry,
        mapper: RuleMapper | None = None,
        options: SchemaGenerationOptions | None = None,
    ):
        self.registry = registry
        self.options = options or registry.options
        self.mapper = mapper or RuleMapper(self.options)

    def resolve_key(self, context: SchemaContext, name: str) -> str | None:
        """Schema property key for a validator property name.

        Tries the configured name resolver, then the pydantic alias, then a
        case-insensitive match.
        """
        properties = context.properties
        if (key := self.options.name_resolver(name)) in properties:
            return key
        if (alias := _field_alias(context.schema_type, name)) in properties:
            return alias
        lowered = name.lower()
        return next((p for p in properties if p.lower() == lowered), None)

    def apply(self, context: SchemaContext, validators: Sequence[Validator] | None = None) -> None:
        self._apply(context, validators, frozenset())

    def _apply(self, context: SchemaContext, validators: Sequence[Validator] | None, active: frozenset[int]) -> None:
        if validators is None:
            validators = self.registry.get_validators(context.schema_type)
        if not validators or id(context.schema) in active:
            return
        active = active | {id(context.schema)}
        for name, chain in merged_chains(validators).items():
            if (key := self.resolve_key(context, name)) is None:
                log.debug("property_not_in_schema", type=repr(context), property=name)
                continue
            self.mapper.apply(context, key, chain)
            for rule in chain:
                if rule.kind is not RuleKind.CHILD_VALIDATOR:
                    continue
                if rule.is_conditional and self.options.skip_conditional_rules:
                    continue
                child: Validator = rule.params["validator"]
                if (child_context := self._child_context(context, key, child)) is not None:
                    self._apply(child_context, [child], active)

    def _child_context(self, context: SchemaContext, key: str, child: Validator) -> SchemaContext | None:
        """The nested object schema of a property: inline, behind a ref, or materialized."""
        pending = [context.schema["properties"][key]]
        while pending:
            schema = pending.pop(0)
            if not isinstance(schema, dict):
                continue
            if "$ref" in schema:
                if resolved := context.provider.resolve(schema):
                    return context.for_type(child.model_type, resolved)
                continue
            if isinstance(schema.get("properties"), dict):
                return context.for_type(child.model_type, schema)
            if isinstance(items := schema.get("items"), dict):
                pending.append(items)
            for union_key in ("anyOf", "oneOf", "allOf"):
                if isinstance(branches := schema.get(union_key), list):
                    pending.extend(branches)
        return context.provider.context_for_type(child.model_type)


# ============================================================================
# Per-operation hook
# ============================================================================

@dataclass(frozen=True, slots=True)
class ParameterDescription:
    """One emitted operation parameter.

    ``container_type``/``property_name`` are set when the host expanded a
    grouping model into flat parameters; ``parameter`` is the emitted dict
    and is mutated in place.
    """
    name: str
    location: str
    parameter: dict[str, Any]
    container_type: type | None = None
    property_name: str | None = None

    @property
    def is_expanded(self) -> bool:
        return self.container_type is not None and self.property_name is not None


@dataclass(frozen=True, slots=True)
class OperationDescription:
    """Host-neutral view of one API operation's emitted schema surface."""
    path: str
    method: str
    parameters: list[ParameterDescription] = field(default_factory=list)
    fragments: list[Any] = field(default_factory=list)  # request body / response schemas as emitted

    def roots(self) -> list[Any]:
        """Everything the operation actually emits; cleanup keeps what these reference."""
        return [*(p.parameter for p in self.parameters), *self.fragments]


class OperationFilter:
    """Documents rules of expanded parameters without leaking their container schemas."""

    def __init__(
        self,
        registry: ValidatorRegistry,
        mapper: RuleMapper | None = None,
        options: SchemaGenerationOptions | None = None,
    ):
        self.registry = registry
        self.options = options or registry.options
        self.mapper = mapper or RuleMapper(self.options)

    def apply(self, operation: OperationDescription, provider: SchemaProvider) -> list[str]:
        """Apply parameter rules; returns the ids removed by cleanup."""
        span = MaterializationSpan(provider.store)
        with span.guard(operation.roots):
            for parameter in operation.parameters:
                if parameter.is_expanded:
                    self._apply_parameter(parameter, provider)
        if span.removed:
            log.debug("operation_cleanup", path=operation.path, method=operation.method, removed=span.removed)
        return span.removed

    def _apply_parameter(self, parameter: ParameterDescription, provider: SchemaProvider) -> None:
        if (validator := self.registry.get_validator(parameter.container_type)) is None:
            return
        chains = merged_chains([validator])
        name = parameter.property_name
        chain = chains.get(name) or next((c for n, c in chains.items() if n.lower() == name.lower()), ())
        if not chain:
            return
        # Materializes the container schema; the span removes it unless emitted
        if (container := provider.context_for_type(parameter.container_type)) is None:
            return
        self.mapper.apply(ParameterSchemaContext(container, parameter.parameter, name), name, chain)
