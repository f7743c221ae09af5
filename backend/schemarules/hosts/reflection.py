"""Type reflection and pydantic schema helpers shared by the generators."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Annotated, Any, get_args, get_origin, get_type_hints

from pydantic import BaseModel, TypeAdapter
from pydantic.errors import PydanticUserError
from pydantic.json_schema import JsonSchemaMode

from schemarules.errors import SchemaRulesError, unsupported_type
from schemarules.naming import SchemaIdSelector, default_schema_id


def is_schema_type(tp: Any) -> bool:
    """Types that the reference model stores by id instead of inlining."""
    if not isinstance(tp, type):
        return False
    return issubclass(tp, (BaseModel, Enum)) or dataclasses.is_dataclass(tp)


def _field_annotations(tp: type) -> list[Any]:
    if issubclass(tp, BaseModel):
        return [f.annotation for f in tp.model_fields.values()]
    if dataclasses.is_dataclass(tp):
        try:
            return list(get_type_hints(tp).values())
        except NameError:
            return [f.type for f in dataclasses.fields(tp) if not isinstance(f.type, str)]
    return []


def walk_types(tp: Any) -> list[type]:
    """Every schema type reachable from ``tp`` through field annotations, ``tp`` first."""
    found: dict[type, None] = {}

    def visit(annotation: Any) -> None:
        if annotation is None:
            return
        if get_origin(annotation) is Annotated:
            visit(get_args(annotation)[0])
            return
        if args := get_args(annotation):
            for arg in args:
                visit(arg)
            return
        if not is_schema_type(annotation) or annotation in found:
            return
        found[annotation] = None
        for inner in _field_annotations(annotation):
            visit(inner)

    visit(tp)
    return list(found)



_PYDANTIC_DEFS = "#/$defs/"


def pydantic_json_schema(tp: Any, ref_template: str, mode: JsonSchemaMode = "validation") -> dict[str, Any]:
    """JSON Schema for any type pydantic understands; nested types land in ``$defs``."""
    try:
        return TypeAdapter(tp).json_schema(ref_template=ref_template, mode=mode)
    except PydanticUserError as e:
        raise SchemaRulesError(unsupported_type(tp, str(e))) from e


def keyed_json_schema(
    tp: Any,
    schema_id_selector: SchemaIdSelector,
    ref_template: str,
    mode: JsonSchemaMode = "validation",
) -> dict[str, Any]:
    """JSON Schema for ``tp`` with ``$defs`` keyed by ``schema_id_selector``.

    pydantic names its definitions after the class; every definition whose
    type is reachable from ``tp`` is renamed to the selector's id and each
    ``$ref`` is rewritten through ``ref_template``. Definitions pydantic had
    to disambiguate (two classes sharing a name) keep pydantic's name.
    """
    raw = pydantic_json_schema(tp, _PYDANTIC_DEFS + "{model}", mode)
    renames = {default_schema_id(t): schema_id_selector(t) for t in walk_types(tp)}

    def rewrite(node: Any) -> Any:
        if isinstance(node, list):
            return [rewrite(item) for item in node]
        if not isinstance(node, dict):
            return node
        out = {key: rewrite(value) for key, value in node.items()}
        if isinstance(ref := out.get("$ref"), str) and ref.startswith(_PYDANTIC_DEFS):
            name = ref[len(_PYDANTIC_DEFS):]
            out["$ref"] = ref_template.format(model=renames.get(name, name))
        return out

    defs = raw.pop("$defs", {})
    schema = rewrite(raw)
    if defs:
        schema["$defs"] = {renames.get(name, name): rewrite(definition) for name, definition in defs.items()}
    return schema
