"""Reference-Model Host

Schema generation in the style of an OpenAPI ``components/schemas`` section:
every model, enum and dataclass schema is stored once in a repository and
referenced everywhere else by ``$ref``. Property schemas of nested types are
therefore pure pointers, which the rule engine sees as empty nodes.

Features:
- Repository shared across one generation pass (may wrap a live document dict)
- ``$defs`` produced by pydantic are flattened into the repository under the configured schema ids
- Per-type filters run on every schema the generator newly registers
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from pydantic.json_schema import JsonSchemaMode

from schemarules.config import SchemaGenerationOptions
from schemarules.context import RepositorySchemaProvider, SchemaContext
from schemarules.hosts.reflection import is_schema_type, keyed_json_schema, walk_types
from schemarules.hosts.store import DictSchemaStore
from schemarules.logging import schema_logger

log = schema_logger()


class TypeSchemaFilter(Protocol):
    def apply(self, context: SchemaContext) -> None: ...


class SchemaRepository(DictSchemaStore):
    """Components-style store; entries are referenced as ``#/components/schemas/{id}``."""

    ref_prefix = "#/components/schemas/"


class RepositorySchemaGenerator:
    """Generates schemas into a SchemaRepository and returns references to them."""

    def __init__(
        self,
        options: SchemaGenerationOptions | None = None,
        filters: Iterable[TypeSchemaFilter] = (),
        *,
        mode: JsonSchemaMode = "validation",
    ):
        self.options = options or SchemaGenerationOptions()
        self.filters = list(filters)
        self.mode = mode

    def generate_schema(self, tp: Any, repository: SchemaRepository) -> dict[str, Any]:
        """Schema for ``tp``: a ``$ref`` for stored types, an inline schema otherwise."""
        schema_id = self.options.schema_id_selector(tp)
        if is_schema_type(tp) and repository.contains(schema_id):
            return repository.reference(schema_id)

        schema = keyed_json_schema(tp, self.options.schema_id_selector, repository.ref_template, self.mode)
        added: list[str] = []
        for def_id, definition in schema.pop("$defs", {}).items():
            if not repository.contains(def_id):
                repository.add(def_id, definition)
                added.append(def_id)

        # Self-referencing models come back as a bare $ref into their own $defs
        if is_schema_type(tp) and "$ref" not in schema:
            repository.add(schema_id, schema)
            added.append(schema_id)
            schema = repository.reference(schema_id)

        if added:
            log.debug("schemas_registered", type=getattr(tp, "__name__", repr(tp)), ids=added)
            self._run_filters(tp, repository, added)
        return schema

    def _run_filters(self, tp: Any, repository: SchemaRepository, added: list[str]) -> None:
        if not self.filters:
            return
        provider = RepositorySchemaProvider(repository, self, self.options)
        by_id = {self.options.schema_id_selector(t): t for t in walk_types(tp)}
        for schema_id in added:
            if (schema_type := by_id.get(schema_id)) is None or (schema := repository.get(schema_id)) is None:
                continue
            context = provider.context_for(schema_type, schema)
            for schema_filter in self.filters:
                schema_filter.apply(context)
