"""FastAPI OpenAPI Integration

Wraps ``FastAPI.openapi()`` so that the generated document documents the
registered validators.

Pass over one document:
1. components.schemas is wrapped in a SchemaRepository (the reference model)
2. per-type hook: every registered model type that has a component schema
3. per-operation hook: every APIRoute, with query/header/cookie parameter
   models described as expanded parameters

FastAPI expands a parameter model (``Annotated[SearchQuery, Query()]``) into
flat parameters and never publishes the model itself, so its schema is
materialized only inside the operation's MaterializationSpan.

Usage:
    app = FastAPI()
    install_schema_rules(app, registry)
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from fastapi import FastAPI
from fastapi.routing import APIRoute
from pydantic import BaseModel
from starlette.routing import BaseRoute

from schemarules.config import SchemaGenerationOptions
from schemarules.context import RepositorySchemaProvider
from schemarules.filters import OperationDescription, OperationFilter, ParameterDescription, SchemaFilter
from schemarules.hosts.repository import RepositorySchemaGenerator, SchemaRepository
from schemarules.logging import api_logger
from schemarules.mapper import RuleMapper
from schemarules.materialization import MaterializationSpan
from schemarules.registry import ValidatorRegistry

log = api_logger()

OPENAPI_SCHEMA_ATTR = "openapi_schema"
OPENAPI_ATTR = "openapi"

# Dependant attribute holding each parameter location's fields
_PARAM_GROUPS = {
    "query": "query_params",
    "header": "header_params",
    "cookie": "cookie_params",
    "path": "path_params",
}


# ============================================================================
# Operation description
# ============================================================================

def _dependant_fields(dependant: Any, attr: str) -> list[Any]:
    """Fields of one parameter location across a dependant and its sub-dependencies."""
    fields = list(getattr(dependant, attr, None) or [])
    for sub in getattr(dependant, "dependencies", None) or []:
        fields.extend(_dependant_fields(sub, attr))
    return fields


def _parameter_models(route: APIRoute) -> dict[str, type[BaseModel]]:
    """Parameter-grouping models per location, as FastAPI expands them."""
    models: dict[str, type[BaseModel]] = {}
    for location, attr in _PARAM_GROUPS.items():
        # A dependency used twice contributes its fields once
        fields = list({f.name: f for f in _dependant_fields(route.dependant, attr)}.values())
        if len(fields) != 1:
            continue
        annotation = getattr(fields[0], "type_", None) or fields[0].field_info.annotation
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            models[location] = annotation
    return models


def _model_field_for(model: type[BaseModel], location: str, name: str) -> str | None:
    for field_name, info in model.model_fields.items():
        emitted = info.alias or field_name
        if name == emitted or (location == "header" and name == emitted.replace("_", "-")):
            return field_name
    return None


def describe_operation(route: APIRoute, method: str, operation: dict[str, Any]) -> OperationDescription:
    models = _parameter_models(route)
    parameters: list[ParameterDescription] = []
    for parameter in operation.get("parameters", []):
        if not isinstance(parameter, dict) or "name" not in parameter:
            continue
        location = parameter.get("in", "query")
        container = models.get(location)
        property_name = _model_field_for(container, location, parameter["name"]) if container else None
        parameters.append(ParameterDescription(
            name=parameter["name"],
            location=location,
            parameter=parameter,
            container_type=container if property_name else None,
            property_name=property_name,
        ))
    return OperationDescription(path=route.path_format, method=method, parameters=parameters, fragments=[operation])


def describe_operations(document: dict[str, Any], routes: Iterable[BaseRoute]) -> list[OperationDescription]:
    """One description per documented (route, method) pair."""
    paths = document.get("paths", {})
    described: list[OperationDescription] = []
    for route in routes:
        if not isinstance(route, APIRoute) or not route.include_in_schema:
            continue
        path_item = paths.get(route.path_format, {})
        for method in sorted(route.methods or ()):
            if isinstance(operation := path_item.get(method.lower()), dict):
                described.append(describe_operation(route, method.lower(), operation))
    return described


# ============================================================================
# Document pass
# ============================================================================

def _component_ids(schema_id: str) -> tuple[str, ...]:
    # FastAPI splits models into -Input/-Output components when the two modes differ
    return schema_id, f"{schema_id}-Input", f"{schema_id}-Output"


def apply_schema_rules(
    document: dict[str, Any],
    routes: Iterable[BaseRoute],
    registry: ValidatorRegistry,
    options: SchemaGenerationOptions | None = None,
    mapper: RuleMapper | None = None,
) -> dict[str, Any]:
    """Document the registry's rules in an OpenAPI document, in place."""
    options = options or registry.options
    mapper = mapper or RuleMapper(options)
    created_components = "components" not in document
    schemas = document.setdefault("components", {}).setdefault("schemas", {})

    repository = SchemaRepository(schemas)
    provider = RepositorySchemaProvider(repository, RepositorySchemaGenerator(options), options)

    # Per-type hook, guarded: enum lookups must not publish unreferenced schemas
    schema_filter = SchemaFilter(registry, mapper, options)
    published = set(repository.ids())
    span = MaterializationSpan(repository)
    with span.guard(lambda: [document.get("paths", {}), *(schemas[i] for i in published if i in schemas)]):
        for tp in registry.types():
            for schema_id in _component_ids(options.schema_id_selector(tp)):
                if (schema := repository.get(schema_id)) is not None:
                    schema_filter.apply(provider.context_for(tp, schema))

    operation_filter = OperationFilter(registry, mapper, options)
    for operation in describe_operations(document, routes):
        operation_filter.apply(operation, provider)

    if not schemas:
        document["components"].pop("schemas", None)
        if created_components and not document["components"]:
            document.pop("components")
    log.debug("schema_rules_applied", types=len(registry.types()), schemas=len(schemas))
    return document


def install_schema_rules(
    app: FastAPI,
    registry: ValidatorRegistry,
    options: SchemaGenerationOptions | None = None,
    mapper: RuleMapper | None = None,
) -> None:
    """Wrap ``app.openapi`` so the cached document carries the registry's rules."""
    options = options or SchemaGenerationOptions.from_settings()
    original_openapi = app.openapi

    def _openapi_with_rules() -> dict[str, Any]:
        if (cached := getattr(app, OPENAPI_SCHEMA_ATTR, None)) is not None:
            return cached
        document = original_openapi()
        apply_schema_rules(document, app.routes, registry, options, mapper)
        setattr(app, OPENAPI_SCHEMA_ATTR, document)
        log.info("openapi_rules_installed", title=app.title, validators=len(registry))
        return document

    setattr(app, OPENAPI_ATTR, _openapi_with_rules)
