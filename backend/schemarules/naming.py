"""Naming Conventions

Name resolvers translate a reflected property name into the key the schema
uses for it (``first_name`` -> ``firstName``). Schema id selectors produce
the key a type is stored under in a schema store.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Literal

from pydantic.json_schema import GenerateJsonSchema

NameResolver = Callable[[str], str]
SchemaIdSelector = Callable[[Any], str]

NameCasing = Literal["none", "camel", "pascal", "snake"]

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[_\-\s]+")


def _words(name: str) -> list[str]:
    return [w for w in _WORD_BOUNDARY.split(name) if w]


def identity(name: str) -> str:
    return name


def camel_case(name: str) -> str:
    if not (words := _words(name)): return name
    return words[0][0].lower() + words[0][1:] + "".join(w[:1].upper() + w[1:] for w in words[1:])


def pascal_case(name: str) -> str:
    if not (words := _words(name)): return name
    return "".join(w[:1].upper() + w[1:] for w in words)


def snake_case(name: str) -> str:
    if not (words := _words(name)): return name
    return "_".join(w.lower() for w in words)


_RESOLVERS: dict[str, NameResolver] = {
    "none": identity,
    "camel": camel_case,
    "pascal": pascal_case,
    "snake": snake_case,
}


def resolver_for(casing: NameCasing) -> NameResolver:
    """Return the name resolver for a configured casing."""
    try:
        return _RESOLVERS[casing]
    except KeyError:
        raise ValueError(f"Unknown name casing '{casing}'. Available: {', '.join(_RESOLVERS)}") from None


_DEFS_NAMER = GenerateJsonSchema()


def default_schema_id(tp: Any) -> str:
    """Schema id for a type: its class name as pydantic and FastAPI name components (``Page[int]`` -> ``Page_int_``)."""
    return _DEFS_NAMER.normalize_name(getattr(tp, "__name__", None) or repr(tp))


def type_key(tp: Any) -> str:
    """Stable identity for a type, used to key validator registrations."""
    module, qualname = getattr(tp, "__module__", None), getattr(tp, "__qualname__", None)
    return f"{module}.{qualname}" if module and qualname else repr(tp)
