"""Schema generation over the tree (inline) model."""
from typing import Optional

import pytest
from pydantic import BaseModel

from schemarules import SchemaFilter, SchemaGenerationOptions, TreeSchemaGenerator, ValidatorRegistry
from tests.models import Address, AddressValidator, Color, Paint, Person, Sample, TwoTexts


class Node(BaseModel):
    label: str
    children: list["Node"] = []
    parent: Optional["Node"] = None


class TestTreeModel:
    """Tests for inline schemas and resolver-backed references."""

    def test_nested_types_inlined_and_validated(self, tree_generator, resolver):
        schema = tree_generator.generate_schema(Person, resolver)
        address = schema["properties"]["address"]
        assert address["type"] == "object"
        assert address["properties"]["street"]["minLength"] == 1
        assert address["properties"]["street"]["maxLength"] == 80
        assert schema["properties"]["name"]["minLength"] == 1
        assert resolver.ids() == []

    def test_array_items_inlined(self, tree_generator, resolver):
        schema = tree_generator.generate_schema(Person, resolver)
        item = schema["properties"]["previous"]["items"]
        assert item["properties"]["street"]["maxLength"] == 80

    def test_same_mapping_as_repository_model(self, tree_generator, resolver, repository_generator, repository):
        """The mapper does not care which host model it runs in."""
        tree = tree_generator.generate_schema(TwoTexts, resolver)
        repository_generator.generate_schema(TwoTexts, repository)
        assert tree == repository.get("TwoTexts")

    def test_inlined_enum_is_concrete(self, tree_generator, resolver):
        """Unlike the repository model, an inline enum property is a writable node."""
        schema = tree_generator.generate_schema(Sample, resolver)
        color = schema["properties"]["color"]
        assert "anyOf" not in color
        assert color["enum"] == ["red", "green", "blue"]
        assert "color" in schema["required"]

    def test_reference_types_kept_as_refs(self, registry, options, resolver):
        generator = TreeSchemaGenerator(options, reference_types=[Address], filters=[SchemaFilter(registry)])
        schema = generator.generate_schema(Person, resolver)
        assert schema["properties"]["address"] == {"$ref": "#/definitions/Address"}
        assert resolver.get("Address")["properties"]["street"]["minLength"] == 1

    def test_referenced_root(self, registry, options, resolver):
        generator = TreeSchemaGenerator(options, reference_types=[Address], filters=[SchemaFilter(registry)])
        assert generator.generate_schema(Address, resolver) == {"$ref": "#/definitions/Address"}

    def test_self_reference_is_cycle_safe(self, options, resolver):
        schema = TreeSchemaGenerator(options).generate_schema(Node, resolver)
        assert schema["properties"]["children"]["items"] == {"$ref": "#/definitions/Node"}
        assert resolver.contains("Node")
        document = resolver.to_document(schema)
        assert "Node" in document["definitions"]

    def test_get_schema_for_type_registers(self, tree_provider, resolver):
        schema = tree_provider.get_schema_for_type(Color)
        assert schema["enum"] == ["red", "green", "blue"]
        assert resolver.get("Color") is schema
        assert tree_provider.get_schema_for_type(Color) is schema

    def test_enum_read_for_rule_not_published(self, tree_generator, resolver):
        """Color is registered only to read its values; the finished tree never points at it."""
        schema = tree_generator.generate_schema(Paint, resolver)
        assert schema["properties"]["shade"]["enum"] == ["red", "green", "blue"]
        assert schema["properties"]["coats"]["minimum"] == 1
        assert not resolver.contains("Color")
        assert "definitions" not in resolver.to_document(schema)

    def test_existing_definition_survives_pass(self, tree_generator, tree_provider, resolver):
        color = tree_provider.get_schema_for_type(Color)
        tree_generator.generate_schema(Paint, resolver)
        assert resolver.get("Color") is color

    def test_referenced_definitions_survive_pass(self, registry, options, resolver):
        generator = TreeSchemaGenerator(options, reference_types=[Address], filters=[SchemaFilter(registry)])
        generator.generate_schema(Paint, resolver)
        generator.generate_schema(Person, resolver)
        assert resolver.ids() == ["Address"]

    def test_unsupported_type_yields_none(self, tree_provider):
        class Opaque:
            pass

        assert tree_provider.get_schema_for_type(Opaque) is None


def _api_id(tp) -> str:
    return f"Api{tp.__name__}"


class TestTreeCustomSchemaIds:
    """Tests for a non-default schema id selector in the tree model."""

    @pytest.fixture
    def api_options(self) -> SchemaGenerationOptions:
        return SchemaGenerationOptions(schema_id_selector=_api_id)

    @pytest.fixture
    def api_filters(self, api_options) -> list[SchemaFilter]:
        return [SchemaFilter(ValidatorRegistry([AddressValidator()], options=api_options))]

    def test_inlined_nested_validator_applies(self, api_options, api_filters, resolver):
        schema = TreeSchemaGenerator(api_options, filters=api_filters).generate_schema(Person, resolver)
        street = schema["properties"]["address"]["properties"]["street"]
        assert (street["minLength"], street["maxLength"]) == (1, 80)
        assert schema["properties"]["previous"]["items"]["properties"]["street"]["maxLength"] == 80
        assert resolver.ids() == []

    def test_reference_types_keyed_by_selector(self, api_options, api_filters, resolver):
        generator = TreeSchemaGenerator(api_options, reference_types=[Address], filters=api_filters)
        schema = generator.generate_schema(Person, resolver)
        assert schema["properties"]["address"] == {"$ref": "#/definitions/ApiAddress"}
        assert resolver.ids() == ["ApiAddress"]
        assert resolver.get("ApiAddress")["properties"]["street"]["maxLength"] == 80

    def test_self_reference_keyed_by_selector(self, api_options, resolver):
        schema = TreeSchemaGenerator(api_options).generate_schema(Node, resolver)
        assert schema["properties"]["children"]["items"] == {"$ref": "#/definitions/ApiNode"}
        assert resolver.ids() == ["ApiNode"]
