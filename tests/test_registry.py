"""Tests for ValidatorRegistry lookup policy."""
from schemarules import SchemaGenerationOptions, ValidatorRegistry
from tests.models import Person, Sample, SampleValidator, TwoTexts, TwoTextsValidator


class TestValidatorRegistry:
    """Tests for keyed/unkeyed resolution."""

    def test_one_validator_per_type_prefers_unkeyed(self):
        unkeyed, keyed = SampleValidator(), SampleValidator()
        registry = ValidatorRegistry([unkeyed], keyed={"admin": keyed})
        assert registry.get_validators(Sample) == [unkeyed]

    def test_keyed_only(self):
        keyed = SampleValidator()
        registry = ValidatorRegistry(keyed=[("admin", keyed)])
        assert registry.get_validators(Sample) == [keyed]

    def test_all_validators_when_policy_disabled(self):
        first, second, third = SampleValidator(), SampleValidator(), SampleValidator()
        registry = ValidatorRegistry(
            [first],
            keyed={"a": second, "b": third},
            options=SchemaGenerationOptions(one_validator_per_type=False),
        )
        assert registry.get_validators(Sample) == [first, second, third]

    def test_keyed_registered_before_unkeyed_still_after(self):
        registry = ValidatorRegistry(options=SchemaGenerationOptions(one_validator_per_type=False))
        keyed, unkeyed = SampleValidator(), SampleValidator()
        registry.register_keyed("k", keyed).register(unkeyed)
        assert registry.get_validators(Sample) == [unkeyed, keyed]

    def test_missing_validator_is_not_an_error(self):
        registry = ValidatorRegistry([SampleValidator()])
        assert registry.get_validators(Person) == []
        assert registry.get_validator(Person) is None

    def test_get_validator_returns_first(self):
        validator = TwoTextsValidator()
        registry = ValidatorRegistry([validator])
        assert registry.get_validator(TwoTexts) is validator

    def test_types_and_membership(self):
        registry = ValidatorRegistry([SampleValidator(), TwoTextsValidator()], keyed={"x": SampleValidator()})
        assert registry.types() == [Sample, TwoTexts]
        assert Sample in registry
        assert Person not in registry
        assert len(registry) == 3
