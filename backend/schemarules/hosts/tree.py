"""Tree-Model Host

Schema generation in the style of a standalone JSON Schema document: the
schema of a type is one inline tree, nested model and enum schemas included.
Only types the host was told to reference (``reference_types``) and
self-referencing types are kept as ``#/definitions/{id}`` pointers, with
their schemas registered in a SchemaResolver.

Features:
- pydantic ``$defs`` dereferenced inline
- Cycle-safe: a type already being inlined is referenced instead
- Per-type filters run on every nested type schema as it is inlined, then on the root
- Each pass is a MaterializationSpan: rule-only schemas never reach the document
"""
from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from pydantic.json_schema import JsonSchemaMode

from schemarules.config import SchemaGenerationOptions
from schemarules.context import TreeSchemaProvider
from schemarules.hosts.reflection import is_schema_type, keyed_json_schema, walk_types
from schemarules.hosts.repository import TypeSchemaFilter
from schemarules.hosts.store import DictSchemaStore
from schemarules.materialization import MaterializationSpan

_LOCAL_DEFS = "#/$defs/"


class SchemaResolver(DictSchemaStore):
    """Definitions store; entries are referenced as ``#/definitions/{id}``."""

    ref_prefix = "#/definitions/"

    def to_document(self, root: dict[str, Any]) -> dict[str, Any]:
        """Standalone document: the root schema with its definitions attached."""
        return {**root, "definitions": dict(self.schemas)} if self.schemas else dict(root)


class _InlinePass:
    """State of one ``generate_schema`` call: pydantic's ``$defs`` and the types behind them."""

    __slots__ = ("generator", "resolver", "defs", "types_by_id", "reference_ids")

    def __init__(self, generator: TreeSchemaGenerator, resolver: SchemaResolver, tp: Any, defs: dict[str, Any]):
        selector = generator.options.schema_id_selector
        self.generator = generator
        self.resolver = resolver
        self.defs = defs
        self.types_by_id = {selector(t): t for t in walk_types(tp)}
        self.reference_ids = {selector(t) for t in generator.reference_types}

    def definition(self, def_id: str, stack: tuple[str, ...]) -> dict[str, Any]:
        schema = self.inline(copy.deepcopy(self.defs[def_id]), (*stack, def_id))
        if (schema_type := self.types_by_id.get(def_id)) is not None:
            self.generator.run_filters(schema_type, schema, self.resolver)
        return schema

    def inline(self, node: Any, stack: tuple[str, ...]) -> Any:
        if isinstance(node, list):
            return [self.inline(item, stack) for item in node]
        if not isinstance(node, dict):
            return node
        ref = node.get("$ref")
        if not (isinstance(ref, str) and ref.startswith(_LOCAL_DEFS)):
            return {key: self.inline(value, stack) for key, value in node.items()}

        def_id = ref[len(_LOCAL_DEFS):]
        siblings = {key: self.inline(value, stack) for key, value in node.items() if key != "$ref"}
        if def_id not in self.defs:
            return dict(node)
        if def_id in stack or def_id in self.reference_ids:
            if not self.resolver.contains(def_id):
                self.resolver.add(def_id, {})  # placeholder while a cycle is being inlined
                self.resolver.add(def_id, self.definition(def_id, stack))
            return {**self.resolver.reference(def_id), **siblings}
        return {**self.definition(def_id, stack), **siblings}


class TreeSchemaGenerator:
    """Generates inline schema trees, registering referenced types in a SchemaResolver."""

    def __init__(
        self,
        options: SchemaGenerationOptions | None = None,
        *,
        reference_types: Iterable[type] = (),
        filters: Iterable[TypeSchemaFilter] = (),
        mode: JsonSchemaMode = "validation",
    ):
        self.options = options or SchemaGenerationOptions()
        self.reference_types = list(reference_types)
        self.filters = list(filters)
        self.mode = mode

    def generate_schema(self, tp: Any, resolver: SchemaResolver) -> dict[str, Any]:
        """Inline schema for ``tp``, or a ``$ref`` when ``tp`` itself is a reference type.

        Schemas registered only to evaluate rules (an enum read for its
        values) are dropped from the resolver unless the result refers to them.
        """
        schema_id = self.options.schema_id_selector(tp)
        referenced = is_schema_type(tp) and tp in self.reference_types
        if referenced and resolver.contains(schema_id):
            return resolver.reference(schema_id)

        raw = keyed_json_schema(tp, self.options.schema_id_selector, _LOCAL_DEFS + "{model}", self.mode)
        inline_pass = _InlinePass(self, resolver, tp, raw.pop("$defs", {}))
        emitted: list[dict[str, Any]] = []
        with MaterializationSpan(resolver).guard(lambda: emitted):
            if isinstance(ref := raw.get("$ref"), str) and ref.startswith(_LOCAL_DEFS) and len(raw) == 1:
                # Self-referencing root: pydantic points at its own definition
                schema = inline_pass.inline(copy.deepcopy(inline_pass.defs[ref[len(_LOCAL_DEFS):]]), (schema_id,))
            else:
                schema = inline_pass.inline(raw, (schema_id,))

            self.run_filters(tp, schema, resolver)
            if referenced:
                resolver.add(schema_id, schema)
                schema = resolver.reference(schema_id)
            emitted.append(schema)
        return schema

    def run_filters(self, tp: Any, schema: dict[str, Any], resolver: SchemaResolver) -> None:
        if not self.filters or not is_schema_type(tp):
            return
        context = TreeSchemaProvider(resolver, self, self.options).context_for(tp, schema)
        for schema_filter in self.filters:
            schema_filter.apply(context)
