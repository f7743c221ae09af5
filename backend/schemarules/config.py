from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

from schemarules.naming import (
    NameCasing,
    NameResolver,
    SchemaIdSelector,
    default_schema_id,
    identity,
    resolver_for,
)

ExclusiveBounds = Literal["boolean", "numeric"]


class Settings(BaseSettings):
    # Rule application
    ONE_VALIDATOR_PER_TYPE: bool = True
    NAME_CASING: NameCasing = "none"
    EXCLUSIVE_BOUNDS: ExclusiveBounds = "boolean"  # "numeric" for OpenAPI 3.1 / JSON Schema 2020-12
    SKIP_CONDITIONAL_RULES: bool = True

    # Sample app
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    APP_DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    @property
    def is_production(self) -> bool:
        return not self.APP_DEBUG

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


@dataclass(frozen=True, slots=True)
class SchemaGenerationOptions:
    """Options recognized by the rule engine.

    one_validator_per_type: only the first validator found for a type is used
    name_resolver: reflected property name -> schema property key
    schema_id_selector: type -> schema store key
    exclusive_bounds: "boolean" writes ``minimum`` + ``exclusiveMinimum: true``,
        "numeric" writes ``exclusiveMinimum: <n>``
    skip_conditional_rules: rules guarded by when/unless are not documented
    """
    one_validator_per_type: bool = True
    name_resolver: NameResolver = field(default=identity)
    schema_id_selector: SchemaIdSelector = field(default=default_schema_id)
    exclusive_bounds: ExclusiveBounds = "boolean"
    skip_conditional_rules: bool = True

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> SchemaGenerationOptions:
        source = source or get_settings()
        return cls(
            one_validator_per_type=source.ONE_VALIDATOR_PER_TYPE,
            name_resolver=resolver_for(source.NAME_CASING),
            exclusive_bounds=source.EXCLUSIVE_BOUNDS,
            skip_conditional_rules=source.SKIP_CONDITIONAL_RULES,
        )
