# schemarules exports
from schemarules.config import settings, get_settings, Settings, SchemaGenerationOptions
from schemarules.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    unbind_context,
    api_logger,
    mapper_logger,
    registry_logger,
    schema_logger,
)
from schemarules.errors import AppError, ErrorCode, SchemaRulesError
from schemarules.rules import Rule, RuleChain, RuleKind
from schemarules.validator import RuleBuilder, Validator
from schemarules.registry import ValidatorRegistry
from schemarules.constraints import Bound, ConstraintSet
from schemarules.nodes import EMPTY_NODE, DictSchemaNode, EmptySchemaNode, SchemaNode, node_for
from schemarules.context import (
    ParameterSchemaContext,
    RepositorySchemaProvider,
    SchemaContext,
    SchemaProvider,
    TreeSchemaProvider,
)
from schemarules.hosts import (
    RepositorySchemaGenerator,
    SchemaRepository,
    SchemaResolver,
    SchemaStore,
    TreeSchemaGenerator,
)
from schemarules.mapper import RuleMapper
from schemarules.materialization import MaterializationSpan, referenced_ids
from schemarules.filters import OperationDescription, OperationFilter, ParameterDescription, SchemaFilter
from schemarules.openapi import apply_schema_rules, install_schema_rules

__all__ = [
    "settings", "get_settings", "Settings", "SchemaGenerationOptions",
    "configure_logging", "get_logger", "bind_context", "clear_context", "unbind_context",
    "api_logger", "mapper_logger", "registry_logger", "schema_logger",
    "AppError", "ErrorCode", "SchemaRulesError",
    "Rule", "RuleChain", "RuleKind", "RuleBuilder", "Validator", "ValidatorRegistry",
    "Bound", "ConstraintSet",
    "EMPTY_NODE", "DictSchemaNode", "EmptySchemaNode", "SchemaNode", "node_for",
    "SchemaContext", "ParameterSchemaContext", "SchemaProvider", "RepositorySchemaProvider", "TreeSchemaProvider",
    "SchemaStore", "SchemaRepository", "RepositorySchemaGenerator", "SchemaResolver", "TreeSchemaGenerator",
    "RuleMapper", "MaterializationSpan", "referenced_ids",
    "SchemaFilter", "OperationFilter", "OperationDescription", "ParameterDescription",
    "apply_schema_rules", "install_schema_rules",
]
