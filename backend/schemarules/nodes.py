"""Schema Nodes

A SchemaNode is a handle to the settable fields of one schema object. It has
two variants:

- DictSchemaNode: a concrete, mutable JSON Schema object
- EmptySchemaNode: the schema is unreachable (a pure ``$ref`` to an enum or
  nested type, a union, a boolean schema, a missing property). Reads return
  None and writes are discarded.

``node_for`` picks the variant. It never raises: shape mismatches degrade to
the empty node.
"""
from __future__ import annotations

from typing import Any, Literal

from schemarules.constraints import Bound, as_decimal, to_json_number
from schemarules.logging import schema_logger

log = schema_logger()

BoundSide = Literal["lower", "upper"]

_BOUND_KEYS: dict[str, tuple[str, str]] = {
    "lower": ("minimum", "exclusiveMinimum"),
    "upper": ("maximum", "exclusiveMaximum"),
}


def _is_null_schema(schema: Any) -> bool:
    return isinstance(schema, dict) and schema.get("type") == "null" and len(schema.keys() - {"title", "description"}) == 1


class SchemaNode:
    """Base interface shared by both node variants."""

    is_empty: bool = False

    @property
    def schema(self) -> dict[str, Any] | None:
        """The writable schema object, or None for the empty node."""
        return None

    @property
    def types(self) -> frozenset[str]:
        return frozenset()

    @property
    def is_string(self) -> bool:
        return "string" in self.types

    @property
    def is_array(self) -> bool:
        return "array" in self.types

    def get(self, key: str) -> Any:
        return None

    def get_int(self, key: str) -> int | None:
        return None

    def set(self, key: str, value: Any) -> None:
        pass

    def get_bound(self, side: BoundSide) -> Bound | None:
        return None

    def set_bound(self, side: BoundSide, bound: Bound | None, *, style: str = "boolean") -> None:
        pass

    def pin_not_nullable(self) -> None:
        pass


class EmptySchemaNode(SchemaNode):
    """Unreachable schema: every write is a silent no-op."""

    is_empty = True

    def __repr__(self) -> str:
        return "EmptySchemaNode()"


EMPTY_NODE = EmptySchemaNode()


class DictSchemaNode(SchemaNode):
    """Concrete node over a JSON Schema dict.

    ``owner`` is the property's own schema object; ``target`` is where
    constraints go. They differ only for nullable unions
    (``anyOf: [<target>, {"type": "null"}]``).
    """

    __slots__ = ("owner", "target")

    def __init__(self, target: dict[str, Any], owner: dict[str, Any] | None = None):
        self.target = target
        self.owner = owner if owner is not None else target

    @property
    def schema(self) -> dict[str, Any]:
        return self.target

    @property
    def types(self) -> frozenset[str]:
        declared = self.target.get("type")
        if isinstance(declared, str): return frozenset({declared})
        if isinstance(declared, list): return frozenset(t for t in declared if isinstance(t, str))
        return frozenset()

    def get(self, key: str) -> Any:
        return self.target.get(key)

    def get_int(self, key: str) -> int | None:
        value = self.target.get(key)
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self.target.pop(key, None)
        else:
            self.target[key] = value

    def get_bound(self, side: BoundSide) -> Bound | None:
        """Read a bound written in either boolean (OpenAPI 3.0) or numeric (3.1) style."""
        plain_key, exclusive_key = _BOUND_KEYS[side]
        exclusive = self.target.get(exclusive_key)
        if (numeric := as_decimal(exclusive)) is not None:
            return Bound(numeric, exclusive=True)
        if (plain := as_decimal(self.target.get(plain_key))) is not None:
            return Bound(plain, exclusive=exclusive is True)
        return None

    def set_bound(self, side: BoundSide, bound: Bound | None, *, style: str = "boolean") -> None:
        plain_key, exclusive_key = _BOUND_KEYS[side]
        self.target.pop(plain_key, None)
        self.target.pop(exclusive_key, None)
        if bound is None:
            return
        number = to_json_number(bound.value)
        if style == "numeric":
            self.target[exclusive_key if bound.exclusive else plain_key] = number
            return
        self.target[plain_key] = number
        if bound.exclusive:
            self.target[exclusive_key] = True

    def pin_not_nullable(self) -> None:
        """Drop every way the schema admits null.

        A nullable union collapses into its non-null branch, which then
        becomes both owner and target.
        """
        for union_key in ("anyOf", "oneOf"):
            if self.owner is not self.target and union_key in self.owner:
                self.owner.pop(union_key)
                for key, value in self.target.items():
                    self.owner.setdefault(key, value)
                if self.owner.get("default", ...) is None:
                    self.owner.pop("default")
                self.target = self.owner
        declared = self.target.get("type")
        if isinstance(declared, list) and "null" in declared:
            remaining = [t for t in declared if t != "null"]
            self.target["type"] = remaining[0] if len(remaining) == 1 else remaining
        if "nullable" in self.target:
            self.target["nullable"] = False

    def __repr__(self) -> str:
        return f"DictSchemaNode({self.target!r})"


def node_for(schema: Any) -> SchemaNode:
    """Wrap a property schema, degrading to the empty node when it is not concrete."""
    if not isinstance(schema, dict):
        return EMPTY_NODE
    if "$ref" in schema:
        return EMPTY_NODE
    if "allOf" in schema:
        return EMPTY_NODE
    for union_key in ("anyOf", "oneOf"):
        if (branches := schema.get(union_key)) is None:
            continue
        if not isinstance(branches, list):
            return EMPTY_NODE
        concrete = [b for b in branches if not _is_null_schema(b)]
        if len(concrete) != 1 or len(branches) != 2:
            return EMPTY_NODE
        inner = concrete[0]
        if not isinstance(inner, dict) or "$ref" in inner or "anyOf" in inner or "allOf" in inner:
            return EMPTY_NODE
        return DictSchemaNode(inner, owner=schema)
    return DictSchemaNode(schema)
