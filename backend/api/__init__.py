from schemarules import SchemaGenerationOptions, ValidatorRegistry

from api import customers, search


def build_registry(options: SchemaGenerationOptions | None = None) -> ValidatorRegistry:
    """Registry of every validator the sample routes document."""
    return ValidatorRegistry([*customers.VALIDATORS, *search.VALIDATORS], options=options)
