"""Validator Registry

Explicit registry of validators keyed by a stable type identifier,
populated at startup.

Lookup order for a type: unkeyed validators first, then keyed validators,
each in registration order. With ``one_validator_per_type`` (the default)
only the first one is returned, so a type validated both unkeyed and under a
key contributes its constraints once.

A type with no validator is not an error: it gets no constraints.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from schemarules.config import SchemaGenerationOptions
from schemarules.logging import registry_logger
from schemarules.naming import type_key
from schemarules.validator import Validator

log = registry_logger()


class ValidatorRegistry:
    """Registry of validators per model type."""

    __slots__ = ("options", "_unkeyed", "_keyed", "_types")

    def __init__(
        self,
        validators: Iterable[Validator] = (),
        *,
        keyed: Mapping[str, Validator] | Iterable[tuple[str, Validator]] | None = None,
        options: SchemaGenerationOptions | None = None,
    ):
        self.options = options or SchemaGenerationOptions()
        self._unkeyed: dict[str, list[Validator]] = {}
        self._keyed: dict[str, list[tuple[str, Validator]]] = {}
        self._types: dict[str, type] = {}
        for validator in validators:
            self.register(validator)
        for key, validator in (keyed.items() if isinstance(keyed, Mapping) else keyed or ()):
            self.register_keyed(key, validator)

    def _remember(self, validator: Validator) -> str:
        ident = type_key(validator.model_type)
        self._types.setdefault(ident, validator.model_type)
        return ident

    def register(self, validator: Validator) -> ValidatorRegistry:
        self._unkeyed.setdefault(self._remember(validator), []).append(validator)
        log.debug("validator_registered", validator=repr(validator))
        return self

    def register_keyed(self, key: str, validator: Validator) -> ValidatorRegistry:
        self._keyed.setdefault(self._remember(validator), []).append((key, validator))
        log.debug("validator_registered", validator=repr(validator), key=key)
        return self

    def get_validators(self, tp: Any) -> list[Validator]:
        """All validators for a type, unkeyed first; only the first one under the one-per-type policy."""
        ident = type_key(tp)
        found = [*self._unkeyed.get(ident, ()), *(v for _, v in self._keyed.get(ident, ()))]
        if self.options.one_validator_per_type and len(found) > 1:
            log.debug("validators_deduplicated", type=ident, found=len(found))
            return found[:1]
        return found

    def get_validator(self, tp: Any) -> Validator | None:
        return next(iter(self.get_validators(tp)), None)

    def types(self) -> list[type]:
        """Model types with at least one registered validator, in registration order."""
        return list(self._types.values())

    def __contains__(self, tp: Any) -> bool:
        return type_key(tp) in self._types

    def __len__(self) -> int:
        return sum(map(len, self._unkeyed.values())) + sum(map(len, self._keyed.values()))
