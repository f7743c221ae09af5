"""Tests for the per-operation hook on expanded parameters."""
import pytest

from schemarules import OperationDescription, OperationFilter, ParameterDescription, SchemaGenerationOptions
from tests.models import Filter, Sample


def _param(name: str, schema: dict, container=Filter, property_name: str | None = None) -> ParameterDescription:
    parameter = {"name": name, "in": "query", "required": False, "schema": schema}
    return ParameterDescription(
        name=name,
        location="query",
        parameter=parameter,
        container_type=container,
        property_name=property_name or (name if container else None),
    )


@pytest.fixture
def operation_filter(registry, options) -> OperationFilter:
    return OperationFilter(registry, options=options)


@pytest.fixture
def operation() -> OperationDescription:
    return OperationDescription(
        path="/items",
        method="get",
        parameters=[
            _param("term", {"anyOf": [{"type": "string"}, {"type": "null"}], "title": "Term"}),
            _param("limit", {"type": "integer", "default": 10}),
            _param("shade", {"type": "string", "default": "red"}),
        ],
    )


class TestOperationFilter:
    """Tests for expanded-parameter documentation and cleanup."""

    def test_rules_land_on_parameters(self, operation_filter, operation, repository_provider):
        operation_filter.apply(operation, repository_provider)
        term, limit, shade = (p.parameter for p in operation.parameters)

        assert term["required"] is True
        assert term["schema"] == {"title": "Term", "type": "string", "minLength": 1, "maxLength": 30}
        assert limit["required"] is False
        assert (limit["schema"]["minimum"], limit["schema"]["maximum"]) == (1, 50)
        assert shade["schema"]["enum"] == ["red", "green", "blue"]

    def test_container_and_enum_do_not_leak(self, operation_filter, operation, repository_provider, repository):
        repository.add("Published", {"type": "object"})
        removed = operation_filter.apply(operation, repository_provider)
        assert sorted(removed) == ["Color", "Filter"]
        assert repository.ids() == ["Published"]

    def test_preexisting_container_kept(self, operation_filter, operation, repository_provider, repository):
        """A container the host already published is not the span's to remove."""
        repository_provider.get_schema_for_type(Filter)
        before = set(repository.ids())
        assert operation_filter.apply(operation, repository_provider) == []
        assert set(repository.ids()) == before

    def test_emitted_reference_survives(self, operation_filter, repository_provider, repository):
        body = {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Filter"}}}}
        operation = OperationDescription(
            path="/items",
            method="post",
            parameters=[_param("term", {"type": "string"})],
            fragments=[{"requestBody": body}],
        )
        removed = operation_filter.apply(operation, repository_provider)
        assert repository.contains("Filter")
        assert removed == ["Color"]

    def test_plain_parameters_untouched(self, operation_filter, repository_provider, repository):
        parameter = _param("q", {"type": "string"}, container=None)
        operation = OperationDescription(path="/x", method="get", parameters=[parameter])
        assert operation_filter.apply(operation, repository_provider) == []
        assert parameter.parameter == {"name": "q", "in": "query", "required": False, "schema": {"type": "string"}}
        assert repository.ids() == []

    def test_container_without_validator(self, operation_filter, repository_provider, repository):
        class Unvalidated(Filter):
            pass

        operation = OperationDescription(path="/x", method="get", parameters=[_param("term", {"type": "string"}, Unvalidated)])
        operation_filter.apply(operation, repository_provider)
        assert operation.parameters[0].parameter["schema"] == {"type": "string"}
        assert repository.ids() == []

    def test_tree_model(self, operation_filter, operation, tree_provider, resolver):
        operation_filter.apply(operation, tree_provider)
        assert operation.parameters[0].parameter["required"] is True
        assert resolver.ids() == []

    def test_keyed_validator_used_when_only_one(self, options, repository_provider):
        from schemarules import ValidatorRegistry
        from tests.models import FilterValidator

        registry = ValidatorRegistry(keyed={"search": FilterValidator()}, options=options)
        operation = OperationDescription(path="/x", method="get", parameters=[_param("limit", {"type": "integer"})])
        OperationFilter(registry).apply(operation, repository_provider)
        assert operation.parameters[0].parameter["schema"]["maximum"] == 50

    def test_parameter_of_other_container_ignored(self, operation_filter, repository_provider):
        operation = OperationDescription(
            path="/x", method="get",
            parameters=[_param("plain_text", {"type": "string"}, Sample)],
        )
        operation_filter.apply(operation, repository_provider)
        assert operation.parameters[0].parameter["schema"] == {"type": "string"}

    def test_numeric_bounds_style(self, registry, operation, repository_provider):
        OperationFilter(registry, options=SchemaGenerationOptions(exclusive_bounds="numeric")).apply(
            operation, repository_provider,
        )
        assert operation.parameters[1].parameter["schema"]["minimum"] == 1
