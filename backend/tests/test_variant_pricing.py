"""Tests for variant price resolution."""

import itertools
from decimal import Decimal

import pytest

from orderpricing.models.product import PriceBehavior
from orderpricing.services.pricing_errors import InvalidLineItem
from orderpricing.services.variant_pricing import (
    VariantPricing,
    resolve_unit_price,
    select_winning_override,
)


def override(variant_id, modifier, priority=None):
    return VariantPricing(
        id=variant_id,
        price_modifier=Decimal(str(modifier)),
        price_behavior=PriceBehavior.OVERRIDE,
        override_priority=priority,
    )


def add(variant_id, modifier):
    return VariantPricing(
        id=variant_id,
        price_modifier=Decimal(str(modifier)),
        price_behavior=PriceBehavior.ADD,
    )


class TestResolveUnitPrice:
    """Tests for resolve_unit_price()."""

    def test_no_variants_returns_base_price(self):
        assert resolve_unit_price(Decimal("10.00"), []) == Decimal("10.00")

    def test_additive_variants_stack_on_base(self):
        """Base 10.00 with +2.00 and +1.50 resolves to 13.50."""
        price = resolve_unit_price(Decimal("10.00"), [add("a", "2.00"), add("b", "1.50")])
        assert price == Decimal("13.50")

    def test_override_replaces_base_then_adds(self):
        """Base 10.00, override 15.00 and +2.00 resolves to 17.00."""
        price = resolve_unit_price(Decimal("10.00"), [override("a", "15.00"), add("b", "2.00")])
        assert price == Decimal("17.00")

    def test_lowest_priority_override_wins(self):
        """Priorities 2 (18.00) and 1 (16.00): the priority 1 override wins."""
        variants = [override("a", "18.00", 2), override("b", "16.00", 1)]
        assert resolve_unit_price(Decimal("10.00"), variants) == Decimal("16.00")

    def test_result_independent_of_selection_order(self):
        variants = [
            override("a", "18.00", 2),
            override("b", "16.00", 1),
            override("c", "12.00"),
            add("d", "0.75"),
            add("e", "1.25"),
        ]
        results = {
            resolve_unit_price(Decimal("10.00"), list(perm))
            for perm in itertools.permutations(variants)
        }
        assert results == {Decimal("18.00")}

    def test_negative_additive_modifier_allowed(self):
        price = resolve_unit_price(Decimal("10.00"), [add("a", "-3.00")])
        assert price == Decimal("7.00")

    def test_negative_result_rejected(self):
        with pytest.raises(InvalidLineItem, match="negative"):
            resolve_unit_price(Decimal("5.00"), [add("a", "-6.00")])

    def test_zero_price_allowed(self):
        assert resolve_unit_price(Decimal("5.00"), [add("a", "-5.00")]) == Decimal("0.00")

    def test_rounds_once_at_the_end(self):
        """Sub-cent modifiers are summed exactly before rounding."""
        variants = [add("a", "0.004"), add("b", "0.004")]
        assert resolve_unit_price(Decimal("1.00"), variants) == Decimal("1.01")

    def test_base_price_accepts_non_decimal(self):
        assert resolve_unit_price("9.99", []) == Decimal("9.99")


class TestSelectWinningOverride:
    """Tests for select_winning_override()."""

    def test_no_overrides(self):
        assert select_winning_override([]) is None

    def test_null_priority_loses_to_explicit(self):
        winner = select_winning_override([override("a", "1.00"), override("b", "2.00", 50)])
        assert winner.id == "b"

    def test_equal_priority_ties_go_to_lowest_id(self):
        variants = [override("b", "2.00", 1), override("a", "1.00", 1)]
        assert select_winning_override(variants).id == "a"
        assert select_winning_override(list(reversed(variants))).id == "a"

    def test_all_null_priorities_tie_on_id(self):
        variants = [override("z", "3.00"), override("m", "2.00"), override("x", "1.00")]
        assert select_winning_override(variants).id == "m"

    def test_negative_priority_beats_zero(self):
        winner = select_winning_override([override("a", "1.00", 0), override("b", "2.00", -1)])
        assert winner.id == "b"


class TestVariantPricingFromModel:
    """Tests for VariantPricing.from_model()."""

    def test_from_variant_row(self, make_product):
        _, (variant,) = make_product("10.00", [("override", "12.50", 3)])
        pricing = VariantPricing.from_model(variant)
        assert pricing.id == str(variant.id)
        assert pricing.price_modifier == Decimal("12.50")
        assert pricing.price_behavior == PriceBehavior.OVERRIDE
        assert pricing.override_priority == 3

    def test_default_behavior_is_add(self, make_product):
        _, (variant,) = make_product("10.00", [("add", "1.00")])
        assert VariantPricing.from_model(variant).price_behavior == PriceBehavior.ADD
