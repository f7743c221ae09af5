"""Schema Contexts and Providers

The mapper never touches a host schema model directly. It sees a
SchemaContext: the schema of one type, with

- ``get_property_node(key)``: the property's constraint-bearing node, or the
  empty node when the property is unreachable
- ``mark_required(key)``: add the property to the owner's ``required`` list
- ``get_schema_for_type(tp)``: fetch-or-create the schema of another type

Providers adapt the two host models behind that interface:

- RepositorySchemaProvider: reference model. Models and enums live in a
  repository (``components/schemas``) and are referenced by id, never inline.
- TreeSchemaProvider: tree model. Schemas are inline trees, nested types
  included, unless the host was told to reference them.

``get_schema_for_type`` is the only path by which rule application adds
entries to a schema store; callers that care guard it with a
MaterializationSpan.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from schemarules.config import SchemaGenerationOptions
from schemarules.errors import ErrorCode, SchemaRulesError
from schemarules.logging import schema_logger
from schemarules.nodes import EMPTY_NODE, DictSchemaNode, SchemaNode, node_for

if TYPE_CHECKING:
    from schemarules.hosts.repository import RepositorySchemaGenerator, SchemaRepository
    from schemarules.hosts.store import SchemaStore
    from schemarules.hosts.tree import SchemaResolver, TreeSchemaGenerator

log = schema_logger()


class SchemaContext:
    """One type's object schema, seen through its provider."""

    __slots__ = ("schema_type", "schema", "provider")

    def __init__(self, schema_type: Any, schema: dict[str, Any], provider: SchemaProvider):
        self.schema_type = schema_type
        self.schema = schema
        self.provider = provider

    @property
    def options(self) -> SchemaGenerationOptions:
        return self.provider.options

    @property
    def properties(self) -> list[str]:
        props = self.schema.get("properties")
        return list(props) if isinstance(props, dict) else []

    def get_property_node(self, key: str) -> SchemaNode:
        props = self.schema.get("properties")
        if not isinstance(props, dict) or key not in props:
            return EMPTY_NODE
        if (node := node_for(props[key])).is_empty:
            log.debug("property_unreachable", type=getattr(self.schema_type, "__name__", None), property=key)
        return node

    def mark_required(self, key: str) -> None:
        required = self.schema.setdefault("required", [])
        if key not in required:
            required.append(key)

    def get_schema_for_type(self, tp: Any) -> dict[str, Any] | None:
        return self.provider.get_schema_for_type(tp)

    def for_type(self, tp: Any, schema: dict[str, Any]) -> SchemaContext:
        return self.provider.context_for(tp, schema)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({getattr(self.schema_type, '__name__', self.schema_type)})"


class ParameterSchemaContext(SchemaContext):
    """A single emitted parameter seen as the one property of its container type.

    Hosts that expand a grouping model into flat parameters (query models)
    document each parameter separately; rules declared on the container's
    property land on the parameter's own schema.
    """

    __slots__ = ("parameter", "property_key")

    def __init__(self, container: SchemaContext, parameter: dict[str, Any], property_key: str):
        super().__init__(container.schema_type, container.schema, container.provider)
        self.parameter = parameter
        self.property_key = property_key

    @property
    def properties(self) -> list[str]:
        return [self.property_key]

    def get_property_node(self, key: str) -> SchemaNode:
        if key != self.property_key:
            return EMPTY_NODE
        return node_for(self.parameter.get("schema"))

    def mark_required(self, key: str) -> None:
        if key == self.property_key:
            self.parameter["required"] = True


# ============================================================================
# Providers
# ============================================================================

class SchemaProvider(ABC):
    """Capability provider over one host schema model and its store."""

    def __init__(self, options: SchemaGenerationOptions | None = None):
        self.options = options or SchemaGenerationOptions()

    @property
    @abstractmethod
    def store(self) -> SchemaStore:
        """The shared schema store of the current generation pass."""

    @abstractmethod
    def _materialize(self, tp: Any) -> dict[str, Any] | None:
        """Fetch-or-create the schema for a type in this host model."""

    def get_schema_for_type(self, tp: Any) -> dict[str, Any] | None:
        """Schema for a type, created in the store when missing. None if the host cannot produce one."""
        try:
            return self._materialize(tp)
        except SchemaRulesError as e:
            if e.code is not ErrorCode.E3003_UNSUPPORTED_TYPE:
                raise
            log.debug("schema_unavailable", type=repr(tp), reason=e.error.message)
            return None

    def resolve(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Follow a ``$ref`` into the store; an unresolvable ref gives an empty schema."""
        if isinstance(schema, dict) and isinstance(ref := schema.get("$ref"), str):
            if (schema_id := self.store.id_for_ref(ref)) is not None and (found := self.store.get(schema_id)) is not None:
                return found
            return {}
        return schema

    def context_for(self, tp: Any, schema: dict[str, Any]) -> SchemaContext:
        return SchemaContext(tp, self.resolve(schema), self)

    def context_for_type(self, tp: Any) -> SchemaContext | None:
        schema = self.get_schema_for_type(tp)
        return None if schema is None else self.context_for(tp, schema)


class RepositorySchemaProvider(SchemaProvider):
    """Reference model: the generator registers model schemas and hands back ``$ref``s."""

    def __init__(
        self,
        repository: SchemaRepository,
        generator: RepositorySchemaGenerator,
        options: SchemaGenerationOptions | None = None,
    ):
        super().__init__(options or generator.options)
        self.repository = repository
        self.generator = generator

    @property
    def store(self) -> SchemaStore:
        return self.repository

    def _materialize(self, tp: Any) -> dict[str, Any] | None:
        schema = self.generator.generate_schema(tp, self.repository)
        if "$ref" in schema:
            created = self.resolve(schema)
            log.debug("schema_materialized", type=getattr(tp, "__name__", repr(tp)), model="repository")
            return created or None
        return schema


class TreeSchemaProvider(SchemaProvider):
    """Tree model: schemas are generated inline and registered in the resolver on demand."""

    def __init__(
        self,
        resolver: SchemaResolver,
        generator: TreeSchemaGenerator,
        options: SchemaGenerationOptions | None = None,
    ):
        super().__init__(options or generator.options)
        self.resolver = resolver
        self.generator = generator

    @property
    def store(self) -> SchemaStore:
        return self.resolver

    def _materialize(self, tp: Any) -> dict[str, Any] | None:
        from schemarules.hosts.reflection import is_schema_type

        schema_id = self.options.schema_id_selector(tp)
        if (existing := self.resolver.get(schema_id)) is not None:
            return existing
        schema = self.generator.generate_schema(tp, self.resolver)
        if "$ref" in schema:
            return self.resolve(schema) or None
        if is_schema_type(tp):
            self.resolver.add(schema_id, schema)
            log.debug("schema_materialized", type=getattr(tp, "__name__", repr(tp)), model="tree")
        return schema


__all__ = [
    "SchemaContext",
    "ParameterSchemaContext",
    "SchemaProvider",
    "RepositorySchemaProvider",
    "TreeSchemaProvider",
    "DictSchemaNode",
]
