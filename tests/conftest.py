from typing import Any

import pytest

from schemarules import (
    RepositorySchemaGenerator,
    RepositorySchemaProvider,
    RuleMapper,
    SchemaContext,
    SchemaFilter,
    SchemaGenerationOptions,
    SchemaRepository,
    SchemaResolver,
    TreeSchemaGenerator,
    TreeSchemaProvider,
    ValidatorRegistry,
)
from tests.models import (
    AddressValidator,
    FilterValidator,
    PaintValidator,
    PersonValidator,
    ProfileValidator,
    SampleValidator,
    TwoTextsValidator,
)


@pytest.fixture
def options() -> SchemaGenerationOptions:
    return SchemaGenerationOptions()


@pytest.fixture
def registry(options) -> ValidatorRegistry:
    return ValidatorRegistry(
        [
            SampleValidator(),
            TwoTextsValidator(),
            PersonValidator(),
            AddressValidator(),
            PaintValidator(),
            FilterValidator(),
            ProfileValidator(),
        ],
        options=options,
    )


@pytest.fixture
def repository() -> SchemaRepository:
    return SchemaRepository()


@pytest.fixture
def repository_generator(registry, options) -> RepositorySchemaGenerator:
    return RepositorySchemaGenerator(options, filters=[SchemaFilter(registry)])


@pytest.fixture
def repository_provider(repository, repository_generator) -> RepositorySchemaProvider:
    return RepositorySchemaProvider(repository, repository_generator)


@pytest.fixture
def resolver() -> SchemaResolver:
    return SchemaResolver()


@pytest.fixture
def tree_generator(registry, options) -> TreeSchemaGenerator:
    return TreeSchemaGenerator(options, filters=[SchemaFilter(registry)])


@pytest.fixture
def tree_provider(resolver, tree_generator) -> TreeSchemaProvider:
    return TreeSchemaProvider(resolver, tree_generator)


@pytest.fixture
def mapper(options) -> RuleMapper:
    return RuleMapper(options)


@pytest.fixture
def make_context(repository_provider):
    """Context over a hand-written object schema."""
    def _make(properties: dict[str, Any], schema_type: Any = None, **extra) -> SchemaContext:
        return repository_provider.context_for(schema_type, {"type": "object", "properties": properties, **extra})
    return _make
