"""Error Taxonomy for Schema Rule Application

Schema rule application degrades instead of failing: unreachable property
schemas, missing validators and contradictory bounds all produce partial
output. Errors are raised only for programming-contract violations, such as
a malformed rule declaration or a cleanup requested without a snapshot.

Key components:
- ErrorCode: Hierarchical error code taxonomy
- AppError: Immutable error value with metadata
- SchemaRulesError: Exception wrapper carrying an AppError
- Builder functions: Ergonomic error construction

Usage:
    from schemarules.errors import SchemaRulesError, invalid_rule

    if max_length < 0:
        raise SchemaRulesError(invalid_rule("maximum_length", "length must be non-negative"))
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E1xxx: Rule declaration errors
    E2xxx: Validator registry errors
    E3xxx: Schema store / materialization errors
    E9xxx: Internal/Unknown errors
    """
    # Rule declaration (E1xxx)
    E1000_RULE_GENERIC = 1000
    E1001_INVALID_RULE_PARAMETER = 1001
    E1002_INVALID_PATTERN = 1002
    E1003_NOT_AN_ENUM = 1003

    # Registry (E2xxx)
    E2000_REGISTRY_GENERIC = 2000
    E2001_MODEL_TYPE_UNRESOLVED = 2001

    # Schema store (E3xxx)
    E3000_SCHEMA_GENERIC = 3000
    E3001_SNAPSHOT_MISSING = 3001
    E3002_SNAPSHOT_ALREADY_TAKEN = 3002
    E3003_UNSUPPORTED_TYPE = 3003

    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000

    @property
    def category(self) -> str:
        """Human-readable error category."""
        code = self.value
        if 1000 <= code < 2000:
            return "rule"
        if 2000 <= code < 3000:
            return "registry"
        if 3000 <= code < 4000:
            return "schema"
        return "internal"


@dataclass(frozen=True, slots=True)
class AppError:
    """Immutable error value.

    Carries a typed code from the taxonomy, a human-readable message and
    structured metadata for debugging.
    """
    code: ErrorCode
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def with_metadata(self, **kwargs) -> AppError:
        return AppError(code=self.code, message=self.message, metadata={**self.metadata, **kwargs})

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "message": self.message,
                "category": self.code.category,
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


class SchemaRulesError(Exception):
    """Exception wrapper for AppError.

    Raised for contract violations only; degraded schema output is never
    reported through this type.
    """

    def __init__(self, error: AppError):
        self.error = error
        super().__init__(str(error))

    @property
    def code(self) -> ErrorCode:
        return self.error.code


# ============================================================================
# Builders
# ============================================================================

def invalid_rule(kind: str, reason: str, **metadata) -> AppError:
    return AppError(
        code=ErrorCode.E1001_INVALID_RULE_PARAMETER,
        message=f"Invalid '{kind}' rule: {reason}",
        metadata={"kind": kind, **metadata},
    )


def invalid_pattern(pattern: str, reason: str) -> AppError:
    return AppError(
        code=ErrorCode.E1002_INVALID_PATTERN,
        message=f"Pattern does not compile: {reason}",
        metadata={"pattern": pattern},
    )


def not_an_enum(value: Any) -> AppError:
    return AppError(
        code=ErrorCode.E1003_NOT_AN_ENUM,
        message=f"Expected an Enum subclass or a non-empty collection of values, got {value!r}",
    )


def model_type_unresolved(validator_cls: type) -> AppError:
    return AppError(
        code=ErrorCode.E2001_MODEL_TYPE_UNRESOLVED,
        message=f"{validator_cls.__name__} does not declare the model type it validates",
        metadata={"validator": validator_cls.__qualname__},
    )


def missing_snapshot() -> AppError:
    return AppError(
        code=ErrorCode.E3001_SNAPSHOT_MISSING,
        message="Schema cleanup requested without a prior snapshot",
    )


def snapshot_already_taken() -> AppError:
    return AppError(
        code=ErrorCode.E3002_SNAPSHOT_ALREADY_TAKEN,
        message="Materialization span already holds a snapshot; clean it up before taking another",
    )


def unsupported_type(tp: Any, reason: str) -> AppError:
    return AppError(
        code=ErrorCode.E3003_UNSUPPORTED_TYPE,
        message=f"No schema can be produced for {tp!r}: {reason}",
        metadata={"type": repr(tp)},
    )
