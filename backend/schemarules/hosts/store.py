"""Schema Stores

A schema store maps stable schema ids to schema objects for one generation
pass. Both host models keep one: the repository (``components/schemas``)
and the resolver (``definitions``). They differ only in how a reference to
an entry is spelled.
"""
from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SchemaStore(Protocol):
    """What the engine needs from a host's schema store."""

    def ids(self) -> list[str]: ...

    def get(self, schema_id: str) -> dict[str, Any] | None: ...

    def contains(self, schema_id: str) -> bool: ...

    def add(self, schema_id: str, schema: dict[str, Any]) -> None: ...

    def remove(self, schema_id: str) -> None: ...

    def id_for_ref(self, ref: str) -> str | None: ...


class DictSchemaStore:
    """SchemaStore over a plain dict, referenced as ``{ref_prefix}{id}``.

    The dict may be owned by the host document (e.g. its
    ``components.schemas``); the store mutates it in place.
    """

    ref_prefix: str = "#/"

    def __init__(self, schemas: dict[str, dict[str, Any]] | None = None):
        self.schemas: dict[str, dict[str, Any]] = schemas if schemas is not None else {}

    @property
    def ref_template(self) -> str:
        return self.ref_prefix + "{model}"

    def ids(self) -> list[str]:
        return list(self.schemas)

    def get(self, schema_id: str) -> dict[str, Any] | None:
        return self.schemas.get(schema_id)

    def contains(self, schema_id: str) -> bool:
        return schema_id in self.schemas

    def add(self, schema_id: str, schema: dict[str, Any]) -> None:
        self.schemas[schema_id] = schema

    def remove(self, schema_id: str) -> None:
        self.schemas.pop(schema_id, None)

    def reference(self, schema_id: str) -> dict[str, Any]:
        return {"$ref": f"{self.ref_prefix}{schema_id}"}

    def id_for_ref(self, ref: str) -> str | None:
        return ref[len(self.ref_prefix):] if isinstance(ref, str) and ref.startswith(self.ref_prefix) else None

    def __iter__(self) -> Iterator[str]:
        return iter(self.schemas)

    def __len__(self) -> int:
        return len(self.schemas)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self.schemas)})"
