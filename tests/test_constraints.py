"""Tests for the constraint merge policy."""
from decimal import Decimal

import pytest

from schemarules.constraints import (
    Bound,
    ConstraintSet,
    as_decimal,
    new_max,
    new_min,
    tighter_lower,
    tighter_upper,
    to_json_number,
)
from schemarules.nodes import EMPTY_NODE, DictSchemaNode


class TestNumbers:
    """Tests for decimal conversion."""

    def test_float_converted_without_drift(self):
        """5.1 becomes Decimal('5.1'), not the binary artifact."""
        assert as_decimal(5.1) == Decimal("5.1")
        assert as_decimal(5.1) == as_decimal(5.1)

    def test_int_and_decimal(self):
        assert as_decimal(3) == Decimal(3)
        assert as_decimal(Decimal("1.333")) == Decimal("1.333")

    @pytest.mark.parametrize("value", [True, False, "5", None, float("nan"), float("inf"), object()])
    def test_non_numbers_rejected(self, value):
        assert as_decimal(value) is None

    def test_json_number(self):
        """Integral decimals render as int, the rest as float."""
        assert to_json_number(Decimal("5")) == 5
        assert isinstance(to_json_number(Decimal("5.0")), int)
        assert to_json_number(Decimal("5.1")) == 5.1


class TestMinMaxOverride:
    """Lower bounds keep the larger value, upper bounds the smaller."""

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [(1, 2, 1), (2, 1, 1), (1, None, 1), (None, 1, 1)],
    )
    def test_max_override(self, first, second, expected):
        assert new_max(new_max(None, first), second) == expected

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [(1, 2, 2), (2, 1, 2), (1, None, 1), (None, 1, 1)],
    )
    def test_min_override(self, first, second, expected):
        assert new_min(new_min(None, first), second) == expected

    def test_lower_bound_takes_higher_floor(self):
        assert tighter_lower(Bound(Decimal(1)), Bound(Decimal(3))) == Bound(Decimal(3))
        assert tighter_lower(Bound(Decimal(3)), Bound(Decimal(1))) == Bound(Decimal(3))

    def test_upper_bound_takes_lower_ceiling(self):
        assert tighter_upper(Bound(Decimal(1)), Bound(Decimal(3))) == Bound(Decimal(1))
        assert tighter_upper(Bound(Decimal(3)), Bound(Decimal(1))) == Bound(Decimal(1))

    def test_equal_bounds_exclusive_wins(self):
        inclusive, exclusive = Bound(Decimal(5)), Bound(Decimal(5), exclusive=True)
        assert tighter_lower(inclusive, exclusive).exclusive is True
        assert tighter_lower(exclusive, inclusive).exclusive is True
        assert tighter_upper(inclusive, exclusive).exclusive is True

    def test_float_bounds_merge_exactly(self):
        """Two 5.1 bounds are equal, so exclusivity decides, not float noise."""
        merged = tighter_lower(Bound.of(5.1), Bound.of(5.1, exclusive=True))
        assert merged == Bound(Decimal("5.1"), exclusive=True)


class TestConstraintSet:
    """Tests for ConstraintSet proposals and application."""

    def test_bound_merge_is_commutative(self):
        a, b = ConstraintSet(), ConstraintSet()
        a.propose_min_length(1); a.propose_min_length(2); a.propose_max_length(10); a.propose_max_length(7)
        b.propose_max_length(7); b.propose_max_length(10); b.propose_min_length(2); b.propose_min_length(1)
        assert a == b
        assert (a.min_length, a.max_length) == (2, 7)

    def test_pattern_and_enum_last_wins(self):
        constraints = ConstraintSet()
        constraints.propose_pattern("^a$")
        constraints.propose_pattern("^b$")
        constraints.propose_enum(("x",))
        constraints.propose_enum(("y", "z"))
        assert constraints.pattern == "^b$"
        assert constraints.enum_values == ("y", "z")

    def test_contradictory_bounds_kept(self):
        """minLength > maxLength is surfaced as declared."""
        constraints = ConstraintSet()
        constraints.propose_min_length(5)
        constraints.propose_max_length(2)
        schema = {"type": "string"}
        constraints.apply(DictSchemaNode(schema))
        assert schema == {"type": "string", "minLength": 5, "maxLength": 2}

    def test_apply_merges_with_existing_values(self):
        """A host-provided maxLength of 20 beats a rule proposing 64."""
        constraints = ConstraintSet()
        constraints.propose_max_length(64)
        constraints.propose_min_length(1)
        schema = {"type": "string", "maxLength": 20, "minLength": 3}
        constraints.apply(DictSchemaNode(schema))
        assert schema["maxLength"] == 20
        assert schema["minLength"] == 3

    def test_apply_on_empty_node_is_noop(self):
        constraints = ConstraintSet()
        constraints.propose_max_length(3)
        constraints.pin_not_nullable()
        constraints.apply(EMPTY_NODE)

    def test_numeric_exclusive_style(self):
        constraints = ConstraintSet()
        constraints.propose_minimum(Bound(Decimal(0), exclusive=True))
        constraints.propose_maximum(Bound(Decimal(10)))
        schema = {"type": "integer"}
        constraints.apply(DictSchemaNode(schema), exclusive_bounds="numeric")
        assert schema == {"type": "integer", "exclusiveMinimum": 0, "maximum": 10}

    def test_empty(self):
        assert ConstraintSet().is_empty
        constraints = ConstraintSet()
        constraints.require()
        assert not constraints.is_empty
